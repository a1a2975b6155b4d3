"""Kanban board models.

A board owns ordered columns; columns own ordered cards. Tags are
board-scoped and attached to cards through the kanban_card_tags join.
The "Backlog" column is the board's unordered intake list: position -1,
excluded from the board view and fetched separately.
"""

import uuid
from datetime import datetime, timezone

from boardsync.extensions import db


card_tags = db.Table(
    "kanban_card_tags",
    db.Column(
        "card_id",
        db.String(36),
        db.ForeignKey("kanban_cards.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "tag_id",
        db.String(36),
        db.ForeignKey("kanban_tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Board(db.Model):
    __tablename__ = "kanban_boards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(255), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    columns = db.relationship(
        "KanbanColumn",
        backref="board",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="KanbanColumn.position",
    )

    @property
    def has_password(self):
        return self.password_hash is not None

    @property
    def is_expired(self):
        """Check if the board is past its expiration (boards without one never expire)."""
        if self.expires_at is None:
            return False
        expires = self.expires_at
        # SQLite returns naive datetimes; Postgres returns aware ones.
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expires

    def __repr__(self):
        return f"<Board {self.name}>"


class KanbanColumn(db.Model):
    __tablename__ = "kanban_columns"

    BACKLOG_NAME = "Backlog"
    BACKLOG_POSITION = -1

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("kanban_boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    cards = db.relationship(
        "KanbanCard",
        backref="column",
        lazy="dynamic",
        order_by="KanbanCard.position",
    )

    @property
    def is_backlog(self):
        return self.name == self.BACKLOG_NAME

    def __repr__(self):
        return f"<KanbanColumn {self.name}>"


class KanbanCard(db.Model):
    __tablename__ = "kanban_cards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    column_id = db.Column(
        db.String(36),
        db.ForeignKey("kanban_columns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, nullable=True)  # markdown, rendered read-only
    color = db.Column(db.String(7), nullable=True)  # "#rgb" or "#rrggbb"
    due_date = db.Column(db.Date, nullable=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    tags = db.relationship(
        "Tag",
        secondary=card_tags,
        lazy="selectin",
        order_by="Tag.name",
    )

    def __repr__(self):
        return f"<KanbanCard {self.title[:40]}>"


class Tag(db.Model):
    __tablename__ = "kanban_tags"

    MAX_NAME_LENGTH = 50
    DEFAULT_BACKGROUND = "#e5e7eb"
    DEFAULT_TEXT = "#111827"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("kanban_boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    color = db.Column(db.String(7), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    @property
    def background_color(self):
        return self.color or self.DEFAULT_BACKGROUND

    @property
    def text_color(self):
        return "#ffffff" if self.color else self.DEFAULT_TEXT

    def __repr__(self):
        return f"<Tag {self.name}>"
