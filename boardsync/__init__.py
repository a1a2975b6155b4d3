import os
import logging

import click
from flask import Flask, jsonify

from boardsync.config import config_by_name
from boardsync.extensions import db, migrate, limiter


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from boardsync import models  # noqa: F401

    # --- Register blueprints ---
    from boardsync.blueprints.boards import boards_bp

    app.register_blueprint(boards_bp)

    # --- Error handlers ---
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "Internal error"}), 500

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=app.config["LOG_LEVEL"])

    return app


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("seed-board")
    @click.option("--name", default="Demo Board", help="Board name")
    def seed_board(name):
        """Create a demo board with default columns, tags and a few cards.

        Usage:
            flask seed-board
            flask seed-board --name "Team Board"
        """
        from boardsync.services import column_service
        from boardsync.services.board_service import BoardSession

        board = column_service.create_board(name)
        session = BoardSession(board.id)
        snapshot = session.load()

        bug = session.create_tag("Bug", "#ef4444")
        feature = session.create_tag("Feature", "#22c55e")
        first, last = snapshot.columns[0], snapshot.columns[-1]
        session.add_card(first.id, "Write the README", tag_ids=[feature.id])
        session.add_card(first.id, "Fix login redirect", color="#f97316", tag_ids=[bug.id])
        session.add_card(last.id, "Set up CI")

        click.echo("")
        click.echo("=" * 60)
        click.echo("Demo board created!")
        click.echo("=" * 60)
        click.echo(f"  Board:   {name} (id: {board.id})")
        click.echo(f"  Columns: {', '.join(c.name for c in snapshot.columns)}")
        click.echo("=" * 60)

    @app.cli.command("board-shell")
    @click.argument("board_id")
    def board_shell(board_id):
        """Interactive command prompt for one board (create/move/delete/list/help).

        Usage:
            flask board-shell <board-id>
        """
        from boardsync.errors import NotFoundError
        from boardsync.services import command_service
        from boardsync.services.board_service import BoardSession

        session = BoardSession(board_id)
        try:
            session.load()
        except NotFoundError as e:
            raise click.ClickException(str(e))

        click.echo('Type a command or "help". Ctrl-D to exit.')
        while True:
            try:
                line = click.prompt(">", prompt_suffix=" ", default="", show_default=False)
            except (EOFError, click.Abort):
                click.echo("")
                break
            if not line.strip():
                continue
            response = command_service.execute(session, line)
            click.echo(response.message)
