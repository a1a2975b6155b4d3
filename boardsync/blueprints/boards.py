"""Boards blueprint — /api/boards/*

JSON API over the board engine. Every request builds its own
BoardSession and loads it; no board state lives between requests.
Write routes are rate-limited per client address.

Route Map:
  POST   /api/boards                              — Create board
  GET    /api/boards/<id>                         — Board snapshot
  POST   /api/boards/<id>/columns                 — Create column
  PUT    /api/boards/<id>/columns/<cid>           — Rename column
  DELETE /api/boards/<id>/columns/<cid>           — Delete column (+ its cards)
  PUT    /api/boards/<id>/columns/reorder         — Reorder columns
  GET    /api/boards/<id>/backlog                 — Backlog column + cards
  POST   /api/boards/<id>/cards                   — Create card
  PUT    /api/boards/<id>/cards/<cid>             — Update card
  DELETE /api/boards/<id>/cards/<cid>             — Delete card
  PUT    /api/boards/<id>/cards/<cid>/reorder     — Reorder within column (or Backlog)
  PUT    /api/boards/<id>/cards/<cid>/move        — Move to another column
  GET    /api/boards/<id>/cards/<cid>/history     — Card move history
  POST   /api/boards/<id>/tags                    — Create tag
  POST   /api/boards/<id>/command                 — Run a text command
"""

from functools import wraps

from flask import Blueprint, current_app, jsonify, request

from boardsync.errors import NotFoundError, PersistenceError, ValidationError
from boardsync.extensions import limiter
from boardsync.services import column_service, command_service
from boardsync.services.board_service import BoardSession

boards_bp = Blueprint("boards", __name__, url_prefix="/api/boards")


def _write_limit():
    return current_app.config["BOARD_WRITE_RATE_LIMIT"]


def _json_errors(f):
    """Map engine errors to JSON responses."""
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except PersistenceError as e:
            return jsonify({"error": str(e)}), 503
    return decorated


def _session(board_id):
    session = BoardSession(board_id)
    session.load()
    return session


def _index(data, key):
    try:
        return int(data.get(key, 0))
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer.") from None


def _result_dict(result):
    return {
        "card": result.card.to_dict() if result.card else None,
        "warnings": [str(f) for f in result.partial_failures],
    }


def _backlog_dict(board_id):
    column, cards = column_service.get_backlog(board_id)
    return {
        "id": column.id,
        "name": column.name,
        "cards": [c.to_dict() for c in cards],
    }


def _ordering_failure(session, error):
    """Reorder/move failed: report it along with the board as the store has it."""
    return jsonify({
        "error": str(error),
        "board": session.snapshot().to_dict(),
    }), 503


# ─── Board API ───────────────────────────────────────────────────

@boards_bp.route("", methods=["POST"])
@limiter.limit(_write_limit, methods=["POST"])
@_json_errors
def api_create_board():
    data = request.get_json(force=True)
    board = column_service.create_board(data.get("name"), data.get("columns") or None)
    return jsonify(_session(board.id).snapshot().to_dict()), 201


@boards_bp.route("/<board_id>")
@_json_errors
def api_board(board_id):
    session = _session(board_id)
    board = session.store.get_board(board_id)
    payload = session.snapshot().to_dict()
    payload.update({
        "name": board.name,
        "has_password": board.has_password,
        "expires_at": board.expires_at.isoformat() if board.expires_at else None,
    })
    return jsonify(payload)


# ─── Column API ──────────────────────────────────────────────────

@boards_bp.route("/<board_id>/columns", methods=["POST"])
@limiter.limit(_write_limit)
@_json_errors
def api_create_column(board_id):
    _session(board_id)
    data = request.get_json(force=True)
    col = column_service.add_column(board_id, data.get("name"))
    return jsonify({"id": col.id, "name": col.name, "position": col.position}), 201


@boards_bp.route("/<board_id>/columns/reorder", methods=["PUT"])
@limiter.limit(_write_limit)
@_json_errors
def api_reorder_columns(board_id):
    _session(board_id)
    data = request.get_json(force=True)
    column_service.reorder_columns(board_id, data.get("column_ids"))
    return jsonify(_session(board_id).snapshot().to_dict())


@boards_bp.route("/<board_id>/columns/<col_id>", methods=["PUT"])
@limiter.limit(_write_limit)
@_json_errors
def api_update_column(board_id, col_id):
    data = request.get_json(force=True)
    column_service.rename_column(board_id, col_id, data.get("name"))
    return jsonify({"success": True})


@boards_bp.route("/<board_id>/columns/<col_id>", methods=["DELETE"])
@limiter.limit(_write_limit)
@_json_errors
def api_delete_column(board_id, col_id):
    column_service.delete_column(board_id, col_id)
    return jsonify({"success": True})


@boards_bp.route("/<board_id>/backlog")
@_json_errors
def api_backlog(board_id):
    _session(board_id)
    return jsonify(_backlog_dict(board_id))


# ─── Card API ────────────────────────────────────────────────────

@boards_bp.route("/<board_id>/cards", methods=["POST"])
@limiter.limit(_write_limit)
@_json_errors
def api_create_card(board_id):
    session = _session(board_id)
    data = request.get_json(force=True)
    result = session.add_card(
        data.get("column_id"),
        data.get("title"),
        description=data.get("description"),
        color=data.get("color"),
        due_date=data.get("due_date"),
        tag_ids=data.get("tag_ids") or (),
    )
    return jsonify(_result_dict(result)), 201


@boards_bp.route("/<board_id>/cards/<card_id>", methods=["PUT"])
@limiter.limit(_write_limit)
@_json_errors
def api_update_card(board_id, card_id):
    session = _session(board_id)
    data = request.get_json(force=True)
    result = session.update_card(
        card_id,
        data.get("title"),
        description=data.get("description"),
        color=data.get("color"),
        due_date=data.get("due_date"),
        tag_ids=data.get("tag_ids"),
    )
    return jsonify(_result_dict(result))


@boards_bp.route("/<board_id>/cards/<card_id>", methods=["DELETE"])
@limiter.limit(_write_limit)
@_json_errors
def api_delete_card(board_id, card_id):
    _session(board_id).delete_card(card_id)
    return jsonify({"success": True})


@boards_bp.route("/<board_id>/cards/<card_id>/reorder", methods=["PUT"])
@limiter.limit(_write_limit)
@_json_errors
def api_reorder_card(board_id, card_id):
    session = _session(board_id)
    data = request.get_json(force=True)
    column_id = data.get("column_id")
    try:
        session.reorder_card(
            column_id,
            card_id,
            data.get("from_index"),
            _index(data, "to_index"),
        )
    except PersistenceError as e:
        return _ordering_failure(session, e)
    if session.state.column(column_id) is None:
        # Backlog reorder
        return jsonify(_backlog_dict(board_id))
    return jsonify(session.snapshot().to_dict())


@boards_bp.route("/<board_id>/cards/<card_id>/move", methods=["PUT"])
@limiter.limit(_write_limit)
@_json_errors
def api_move_card(board_id, card_id):
    session = _session(board_id)
    data = request.get_json(force=True)
    try:
        result = session.move_card(
            card_id,
            data.get("source_column_id"),
            data.get("column_id"),
            _index(data, "to_index"),
        )
    except PersistenceError as e:
        return _ordering_failure(session, e)
    payload = session.snapshot().to_dict()
    payload["warnings"] = [str(f) for f in result.partial_failures]
    return jsonify(payload)


@boards_bp.route("/<board_id>/cards/<card_id>/history")
@_json_errors
def api_card_history(board_id, card_id):
    return jsonify(_session(board_id).card_history(card_id))


# ─── Tag API ─────────────────────────────────────────────────────

@boards_bp.route("/<board_id>/tags", methods=["POST"])
@limiter.limit(_write_limit)
@_json_errors
def api_create_tag(board_id):
    session = _session(board_id)
    data = request.get_json(force=True)
    tag = session.create_tag(data.get("name"), data.get("color"))
    return jsonify(tag.to_dict()), 201


# ─── Command API ─────────────────────────────────────────────────

@boards_bp.route("/<board_id>/command", methods=["POST"])
@limiter.limit(_write_limit)
@_json_errors
def api_command(board_id):
    session = _session(board_id)
    data = request.get_json(force=True)
    response = command_service.execute(session, data.get("command"))
    return jsonify(response.to_dict()), 200 if response.success else 400
