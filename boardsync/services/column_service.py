"""Column service — boards, columns and the Backlog.

Column order is a plain 0..n-1 renumbering on every change. The Backlog
column (name "Backlog", position -1) is reserved: it is created lazily by
get_backlog() and can never be created, renamed to, or reordered through
the regular column functions.
"""

import logging

from flask import current_app

from boardsync.errors import NotFoundError, ValidationError
from boardsync.models.kanban import KanbanColumn
from boardsync.services import validation
from boardsync.services.board_store import BoardStore

logger = logging.getLogger(__name__)


def _clean_column_name(name):
    name = validation.sanitize(name) if isinstance(name, str) else None
    if not name:
        raise ValidationError("Column name is required.")
    if name.lower() == KanbanColumn.BACKLOG_NAME.lower():
        raise ValidationError(f"'{KanbanColumn.BACKLOG_NAME}' is a reserved column name.")
    return name


def _board_column(store, board_id, column_id):
    column = store.find_column(column_id)
    if column is None or column.board_id != board_id:
        raise NotFoundError(f"Column {column_id} not found.")
    return column


def create_board(name, column_names=None, store=None):
    """Create a board with its starting columns.

    Args:
        name: Board name (sanitized, required).
        column_names: Initial column names, left to right. Defaults to
            the BOARD_DEFAULT_COLUMNS setting.

    Returns:
        The created Board row.
    """
    store = store or BoardStore()
    name = validation.sanitize(name) if isinstance(name, str) else None
    if not name:
        raise ValidationError("Board name is required.")
    if column_names is None:
        column_names = current_app.config["BOARD_DEFAULT_COLUMNS"]
    names = [_clean_column_name(n) for n in column_names]
    board = store.insert_board(name, names)
    logger.info(f"Created board {board.id} with columns {names}")
    return board


def add_column(board_id, name, store=None):
    """Append a column to the right of the existing ones."""
    store = store or BoardStore()
    name = _clean_column_name(name)
    position = len(store.list_columns(board_id))
    return store.insert_column(board_id, name, position)


def rename_column(board_id, column_id, name, store=None):
    store = store or BoardStore()
    column = _board_column(store, board_id, column_id)
    if column.name == KanbanColumn.BACKLOG_NAME:
        raise ValidationError("The Backlog column cannot be renamed.")
    store.rename_column(column_id, _clean_column_name(name))


def reorder_columns(board_id, ordered_ids, store=None):
    """Renumber columns 0..n-1 in the given order.

    Raises:
        ValidationError: ordered_ids is not exactly the board's columns.
    """
    store = store or BoardStore()
    current = {col.id for col in store.list_columns(board_id)}
    ordered_ids = list(ordered_ids or [])
    if len(ordered_ids) != len(current) or set(ordered_ids) != current:
        raise ValidationError("Column order must list every column on the board exactly once.")
    store.update_column_positions(ordered_ids)


def delete_column(board_id, column_id, store=None):
    """Delete a column and, before it, every card it contains."""
    store = store or BoardStore()
    _board_column(store, board_id, column_id)
    store.delete_column(column_id)
    logger.info(f"Deleted column {column_id} from board {board_id}")


def get_backlog(board_id, store=None):
    """Return (backlog column, its cards in display order), creating the column if needed."""
    store = store or BoardStore()
    column = store.find_or_create_backlog(board_id)
    return column, store.list_backlog_cards(column.id)
