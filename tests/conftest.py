"""Shared test fixtures for the board engine test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, rate limits off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- board: a board with "To Do", "In Progress" and "Done" columns
- session: a loaded BoardSession for that board
"""

import pytest

from boardsync import create_app
from boardsync.extensions import db as _db
from boardsync.services import column_service
from boardsync.services.board_service import BoardSession


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def board(db_session):
    """A board with the three default columns.

    Returns a dict of plain ids so tests can use them across sessions.
    """
    row = column_service.create_board("Test Board", ["To Do", "In Progress", "Done"])
    session = BoardSession(row.id)
    snapshot = session.load()
    todo, doing, done = snapshot.columns
    return {
        "board_id": row.id,
        "todo_id": todo.id,
        "doing_id": doing.id,
        "done_id": done.id,
    }


@pytest.fixture
def session(board):
    """A freshly loaded BoardSession for the board fixture."""
    s = BoardSession(board["board_id"])
    s.load()
    return s
