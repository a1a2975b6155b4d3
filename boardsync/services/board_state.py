"""Local board state — the in-memory snapshot callers render from.

Values are frozen dataclasses, so a BoardSnapshot handed to a caller can
never be changed underneath it. LocalBoardState swaps whole snapshots:

- replace(): wholesale swap, used by the synchronizer.
- apply(): optimistic change to one or more columns in a single swap,
  returns a Checkpoint.
- confirm() / rollback(): settle a checkpoint once the write resolves.

Only the board session writes to it.
"""

from dataclasses import dataclass, field, replace as dc_replace
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TagView:
    id: str
    board_id: str
    name: str
    color: Optional[str] = None

    @classmethod
    def from_model(cls, tag):
        return cls(id=tag.id, board_id=tag.board_id, name=tag.name, color=tag.color)

    def to_dict(self):
        return {
            "id": self.id,
            "board_id": self.board_id,
            "name": self.name,
            "color": self.color,
        }


@dataclass(frozen=True)
class CardView:
    id: str
    column_id: str
    title: str
    position: int
    description: Optional[str] = None
    color: Optional[str] = None
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    tags: Tuple[TagView, ...] = ()

    @classmethod
    def from_model(cls, card):
        return cls(
            id=card.id,
            column_id=card.column_id,
            title=card.title,
            position=card.position,
            description=card.description,
            color=card.color,
            due_date=card.due_date,
            created_at=card.created_at,
            tags=tuple(TagView.from_model(t) for t in card.tags),
        )

    @property
    def tag_ids(self):
        return frozenset(t.id for t in self.tags)

    def to_dict(self):
        return {
            "id": self.id,
            "column_id": self.column_id,
            "title": self.title,
            "description": self.description,
            "color": self.color,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "position": self.position,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "tags": [t.to_dict() for t in self.tags],
        }


@dataclass(frozen=True)
class ColumnView:
    id: str
    board_id: str
    name: str
    position: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, column):
        return cls(
            id=column.id,
            board_id=column.board_id,
            name=column.name,
            position=column.position,
            created_at=column.created_at,
        )


@dataclass(frozen=True)
class BoardSnapshot:
    board_id: str
    columns: Tuple[ColumnView, ...] = ()
    cards: Dict[str, Tuple[CardView, ...]] = field(default_factory=dict)
    tags: Tuple[TagView, ...] = ()

    def cards_in(self, column_id):
        return self.cards.get(column_id, ())

    def all_cards(self):
        return [card for col in self.columns for card in self.cards_in(col.id)]

    def to_dict(self):
        return {
            "board_id": self.board_id,
            "columns": [
                {
                    "id": col.id,
                    "name": col.name,
                    "position": col.position,
                    "created_at": col.created_at.isoformat() if col.created_at else None,
                    "cards": [c.to_dict() for c in self.cards_in(col.id)],
                }
                for col in self.columns
            ],
            "tags": [t.to_dict() for t in self.tags],
        }


@dataclass
class Checkpoint:
    """Board state captured just before an optimistic change."""

    previous: BoardSnapshot
    settled: bool = False


class LocalBoardState:
    """Process-local board state, owned by one BoardSession."""

    def __init__(self, board_id):
        self._snapshot = BoardSnapshot(board_id=board_id)

    @property
    def board_id(self):
        return self._snapshot.board_id

    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    def replace(self, snapshot: BoardSnapshot) -> None:
        self._snapshot = snapshot

    # -------------------- optimistic transitions --------------------

    def apply(self, changes: Dict[str, List[CardView]]) -> Checkpoint:
        """Replace the card lists of the given columns in one swap."""
        checkpoint = Checkpoint(previous=self._snapshot)
        cards = dict(self._snapshot.cards)
        for column_id, column_cards in changes.items():
            cards[column_id] = tuple(column_cards)
        self._snapshot = dc_replace(self._snapshot, cards=cards)
        return checkpoint

    def confirm(self, checkpoint: Checkpoint) -> None:
        checkpoint.settled = True

    def rollback(self, checkpoint: Checkpoint) -> None:
        if checkpoint.settled:
            return
        self._snapshot = checkpoint.previous
        checkpoint.settled = True

    # -------------------- single-card helpers --------------------

    def upsert_card(self, card: CardView) -> None:
        """Insert or replace a card, keeping each column ordered by position."""
        cards = dict(self._snapshot.cards)
        for column_id, column_cards in cards.items():
            if any(c.id == card.id for c in column_cards):
                cards[column_id] = tuple(c for c in column_cards if c.id != card.id)
        target = list(cards.get(card.column_id, ()))
        target.append(card)
        target.sort(key=lambda c: c.position)
        cards[card.column_id] = tuple(target)
        self._snapshot = dc_replace(self._snapshot, cards=cards)

    def remove_card(self, card_id) -> Optional[CardView]:
        found = self.find_card(card_id)
        if found is None:
            return None
        cards = dict(self._snapshot.cards)
        cards[found.column_id] = tuple(
            c for c in cards[found.column_id] if c.id != card_id
        )
        self._snapshot = dc_replace(self._snapshot, cards=cards)
        return found

    def add_tag(self, tag: TagView) -> None:
        tags = sorted(self._snapshot.tags + (tag,), key=lambda t: t.name)
        self._snapshot = dc_replace(self._snapshot, tags=tuple(tags))

    # -------------------- lookups --------------------

    def column(self, column_id) -> Optional[ColumnView]:
        for col in self._snapshot.columns:
            if col.id == column_id:
                return col
        return None

    def find_column_by_name(self, name) -> Optional[ColumnView]:
        wanted = (name or "").strip().lower()
        for col in self._snapshot.columns:
            if col.name.lower() == wanted:
                return col
        return None

    def cards_in(self, column_id) -> Tuple[CardView, ...]:
        return self._snapshot.cards_in(column_id)

    def find_card(self, card_id) -> Optional[CardView]:
        for column_cards in self._snapshot.cards.values():
            for card in column_cards:
                if card.id == card_id:
                    return card
        return None

    def find_card_by_title(self, title) -> Optional[CardView]:
        wanted = (title or "").strip().lower()
        for card in self._snapshot.all_cards():
            if card.title.lower() == wanted:
                return card
        return None

    def tags_by_id(self, tag_ids) -> Tuple[TagView, ...]:
        wanted = set(tag_ids)
        return tuple(t for t in self._snapshot.tags if t.id in wanted)
