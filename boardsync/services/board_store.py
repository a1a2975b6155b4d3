"""Board store — the persistence collaborator for the board engine.

The only module that touches db.session. Reads return frozen view
objects (see board_state) so ORM instances never leak into local state.

Every write runs inside _write(): it commits as one unit or rolls the
session back and raises PersistenceError. Position changes are partial
updates keyed on id ({id, position, column_id}); scalar fields are never
re-sent alongside them.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from boardsync.errors import PersistenceError
from boardsync.extensions import db
from boardsync.models.card_history import CardHistory
from boardsync.models.kanban import Board, KanbanCard, KanbanColumn, Tag, card_tags
from boardsync.services.board_state import CardView, ColumnView, TagView

logger = logging.getLogger(__name__)

BACKLOG = KanbanColumn.BACKLOG_NAME


class BoardStore:
    """SQLAlchemy-backed store for boards, columns, cards, tags and history."""

    @contextmanager
    def _write(self, action):
        try:
            yield
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Store write failed ({action}): {e}", exc_info=True)
            raise PersistenceError(f"Could not {action}.") from e

    @contextmanager
    def _read(self, action):
        try:
            yield
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Store read failed ({action}): {e}", exc_info=True)
            raise PersistenceError(f"Could not {action}.") from e

    # ─── Boards ──────────────────────────────────────────────────

    def get_board(self, board_id):
        with self._read("load board"):
            return db.session.get(Board, board_id)

    def insert_board(self, name, column_names):
        """Create a board and its initial columns at positions 0..n-1."""
        with self._write("create board"):
            board = Board(name=name)
            db.session.add(board)
            db.session.flush()
            for position, column_name in enumerate(column_names):
                db.session.add(KanbanColumn(
                    board_id=board.id, name=column_name, position=position,
                ))
        return board

    # ─── Columns ─────────────────────────────────────────────────

    def list_columns(self, board_id):
        """Non-Backlog columns of a board, ordered by position."""
        with self._read("list columns"):
            rows = (
                KanbanColumn.query
                .filter(KanbanColumn.board_id == board_id)
                .filter(KanbanColumn.name != BACKLOG)
                .order_by(KanbanColumn.position, KanbanColumn.created_at)
                .all()
            )
            return [ColumnView.from_model(c) for c in rows]

    def find_column(self, column_id):
        with self._read("load column"):
            column = db.session.get(KanbanColumn, column_id)
            return ColumnView.from_model(column) if column else None

    def column_names(self, column_ids):
        """Resolve column ids to display names with a single query."""
        ids = [cid for cid in set(column_ids) if cid]
        if not ids:
            return {}
        with self._read("resolve column names"):
            rows = (
                db.session.query(KanbanColumn.id, KanbanColumn.name)
                .filter(KanbanColumn.id.in_(ids))
                .all()
            )
            return {row.id: row.name for row in rows}

    def find_or_create_backlog(self, board_id):
        """Return the board's Backlog column, creating it on first access."""
        with self._read("find backlog"):
            column = KanbanColumn.query.filter_by(
                board_id=board_id, name=BACKLOG
            ).first()
        if column is not None:
            return ColumnView.from_model(column)
        with self._write("create backlog"):
            column = KanbanColumn(
                board_id=board_id,
                name=BACKLOG,
                position=KanbanColumn.BACKLOG_POSITION,
            )
            db.session.add(column)
        logger.info(f"Created Backlog column for board {board_id}")
        return ColumnView.from_model(column)

    def insert_column(self, board_id, name, position):
        with self._write("create column"):
            column = KanbanColumn(board_id=board_id, name=name, position=position)
            db.session.add(column)
        return ColumnView.from_model(column)

    def rename_column(self, column_id, name):
        with self._write("rename column"):
            KanbanColumn.query.filter_by(id=column_id).update({"name": name})

    def update_column_positions(self, ordered_ids):
        with self._write("reorder columns"):
            db.session.execute(
                db.update(KanbanColumn),
                [{"id": cid, "position": i} for i, cid in enumerate(ordered_ids)],
            )

    def delete_column(self, column_id):
        """Delete a column: its cards (and their tag links) first, then the column."""
        with self._write("delete column"):
            card_ids = [
                row.id for row in
                db.session.query(KanbanCard.id).filter_by(column_id=column_id).all()
            ]
            if card_ids:
                db.session.execute(
                    card_tags.delete().where(card_tags.c.card_id.in_(card_ids))
                )
                KanbanCard.query.filter(KanbanCard.id.in_(card_ids)).delete(
                    synchronize_session=False
                )
            KanbanColumn.query.filter_by(id=column_id).delete(
                synchronize_session=False
            )

    # ─── Cards ───────────────────────────────────────────────────

    def list_cards(self, column_ids):
        """Cards of the given columns with tags joined, ordered by position."""
        if not column_ids:
            return []
        with self._read("list cards"):
            rows = (
                KanbanCard.query
                .filter(KanbanCard.column_id.in_(list(column_ids)))
                .order_by(KanbanCard.position, KanbanCard.created_at)
                .all()
            )
            return [CardView.from_model(c) for c in rows]

    def list_backlog_cards(self, column_id):
        """Backlog cards in display order.

        New Backlog cards are inserted above the current top card, so
        this is newest first until someone reorders the Backlog.
        """
        with self._read("list backlog cards"):
            rows = (
                KanbanCard.query
                .filter_by(column_id=column_id)
                .order_by(KanbanCard.position, KanbanCard.created_at.desc())
                .all()
            )
            return [CardView.from_model(c) for c in rows]

    def get_card(self, card_id):
        with self._read("load card"):
            card = db.session.get(KanbanCard, card_id)
            return CardView.from_model(card) if card else None

    def insert_card(self, column_id, title, description, color, due_date, position):
        with self._write("create card"):
            card = KanbanCard(
                column_id=column_id,
                title=title,
                description=description,
                color=color,
                due_date=due_date,
                position=position,
            )
            db.session.add(card)
        return CardView.from_model(card)

    def update_card(self, card_id, fields):
        """Partial update of scalar card fields."""
        with self._write("update card"):
            updated = KanbanCard.query.filter_by(id=card_id).update(
                fields, synchronize_session=False
            )
        if not updated:
            raise PersistenceError(f"Card {card_id} no longer exists.")

    def update_positions(self, rows):
        """Batched position update keyed on id, one transaction.

        rows: iterable of {"id", "position", "column_id"} dicts.
        """
        rows = [
            {"id": r["id"], "position": r["position"], "column_id": r["column_id"]}
            for r in rows
        ]
        if not rows:
            return
        with self._write("update card positions"):
            db.session.execute(db.update(KanbanCard), rows)

    def delete_card(self, card_id):
        with self._write("delete card"):
            db.session.execute(
                card_tags.delete().where(card_tags.c.card_id == card_id)
            )
            KanbanCard.query.filter_by(id=card_id).delete(synchronize_session=False)

    # ─── Tags ────────────────────────────────────────────────────

    def list_tags(self, board_id):
        with self._read("list tags"):
            rows = Tag.query.filter_by(board_id=board_id).order_by(Tag.name).all()
            return [TagView.from_model(t) for t in rows]

    def insert_tag(self, board_id, name, color):
        with self._write("create tag"):
            tag = Tag(board_id=board_id, name=name, color=color)
            db.session.add(tag)
        return TagView.from_model(tag)

    def card_tag_ids(self, card_id):
        with self._read("list card tags"):
            rows = db.session.execute(
                db.select(card_tags.c.tag_id).where(card_tags.c.card_id == card_id)
            ).all()
            return {row.tag_id for row in rows}

    def delete_card_tags(self, card_id):
        with self._write("remove card tags"):
            db.session.execute(
                card_tags.delete().where(card_tags.c.card_id == card_id)
            )

    def insert_card_tags(self, card_id, tag_ids):
        """Bulk-insert associations. An empty list is a no-op, not a write."""
        rows = [{"card_id": card_id, "tag_id": tid} for tid in sorted(set(tag_ids))]
        if not rows:
            return
        with self._write("add card tags"):
            db.session.execute(card_tags.insert(), rows)

    # ─── History ─────────────────────────────────────────────────

    def insert_history(self, card_id, from_column, to_column):
        with self._write("record card history"):
            entry = CardHistory(
                card_id=card_id,
                from_column=from_column,
                to_column=to_column,
                timestamp=datetime.now(timezone.utc),
            )
            db.session.add(entry)
        return entry

    def list_history(self, card_id):
        with self._read("list card history"):
            return (
                CardHistory.query
                .filter_by(card_id=card_id)
                .order_by(CardHistory.timestamp)
                .all()
            )
