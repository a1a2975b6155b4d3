"""Board service — one BoardSession per board, the mutation executor.

A session owns the board's LocalBoardState and applies every change to
it. Failure handling differs by operation:

  reorder / move   optimistic; on write failure, resync from the store
                   (falling back to the checkpoint if the resync also
                   fails), then re-raise PersistenceError. Reordering the
                   Backlog (outside the view) writes to the store only.
  add              waits for the persisted id; state untouched on failure.
  update           state changes only after the write succeeds.
  delete           optimistic removal; a failed delete is logged and left
                   for the next resync to restore.

Tag reconciliation (add/update) and history records (move) are secondary
steps: their failures come back on MutationResult.partial_failures and
never undo the primary write.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from boardsync.errors import (
    NotFoundError,
    PartialFailureError,
    PersistenceError,
    ValidationError,
)
from boardsync.services import (
    history_service,
    position_service,
    sync_service,
    tag_service,
    validation,
)
from boardsync.services.board_state import CardView, LocalBoardState
from boardsync.services.board_store import BoardStore

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    card: Optional[CardView] = None
    partial_failures: List[PartialFailureError] = field(default_factory=list)

    @property
    def complete(self):
        """True when every step, secondary ones included, succeeded."""
        return not self.partial_failures


def _renumber(cards, column_id=None):
    """Reposition cards 0..n-1 in list order, optionally re-homing them."""
    positions = position_service.number([c.id for c in cards])
    return [
        replace(c, position=positions[c.id], column_id=column_id or c.column_id)
        for c in cards
    ]


def _position_rows(cards):
    return [{"id": c.id, "position": c.position, "column_id": c.column_id} for c in cards]


class BoardSession:
    """Controller for one board: local state plus the operations on it."""

    def __init__(self, board_id, store=None):
        self.board_id = board_id
        self.store = store or BoardStore()
        self.state = LocalBoardState(board_id)

    # -------------------- loading --------------------

    def load(self):
        """Initial load. Raises NotFoundError for an unknown board."""
        if self.store.get_board(self.board_id) is None:
            raise NotFoundError(f"Board {self.board_id} not found.")
        return sync_service.resync(self.store, self.state)

    def resync(self):
        return sync_service.resync(self.store, self.state)

    def snapshot(self):
        return self.state.snapshot()

    # -------------------- ordering --------------------

    def reorder_card(self, column_id, card_id, from_index, to_index):
        """Move a card to to_index within its column and renumber the column.

        from_index is what the caller saw; the card's actual slot in local
        state wins if they disagree.
        """
        if self.state.column(column_id) is None:
            return self._reorder_outside_view(column_id, card_id, to_index)

        column_cards = list(self.state.cards_in(column_id))
        by_id = {c.id: c for c in column_cards}
        if card_id not in by_id:
            raise NotFoundError(f"Card {card_id} is not in column {column_id}.")

        ordered_ids = [c.id for c in column_cards]
        if from_index is not None and ordered_ids.index(card_id) != from_index:
            logger.debug(
                f"Reorder of {card_id}: caller index {from_index}, "
                f"actual {ordered_ids.index(card_id)}"
            )

        positions = position_service.allocate(ordered_ids, card_id, to_index)
        new_cards = sorted(
            (replace(by_id[cid], position=pos) for cid, pos in positions.items()),
            key=lambda c: c.position,
        )
        if tuple(new_cards) == tuple(column_cards):
            return MutationResult(card=by_id[card_id])

        checkpoint = self.state.apply({column_id: new_cards})
        self._write_positions(checkpoint, _position_rows(new_cards), f"reorder of card {card_id}")
        return MutationResult(card=self.state.find_card(card_id))

    def _reorder_outside_view(self, column_id, card_id, to_index):
        """Reorder the Backlog, which is not part of the board view.

        Cards are read from the store in display order and renumbered
        0..n-1 there; local state is not involved, so a failed write
        simply raises PersistenceError.
        """
        self._require_board_column(column_id)
        column_cards = self.store.list_backlog_cards(column_id)
        by_id = {c.id: c for c in column_cards}
        if card_id not in by_id:
            raise NotFoundError(f"Card {card_id} is not in column {column_id}.")

        ordered_ids = [c.id for c in column_cards]
        positions = position_service.allocate(ordered_ids, card_id, to_index)
        if all(by_id[cid].position == pos for cid, pos in positions.items()):
            return MutationResult(card=by_id[card_id])

        self.store.update_positions([
            {"id": cid, "position": pos, "column_id": column_id}
            for cid, pos in positions.items()
        ])
        return MutationResult(card=replace(by_id[card_id], position=positions[card_id]))

    def move_card(self, card_id, source_column_id, dest_column_id, to_index):
        """Move a card into another column at to_index.

        Both columns are renumbered from 0 and swapped into local state
        together. The source may be a column outside the board view (the
        Backlog); its remaining cards are then renumbered in the store only.
        source_column_id defaults to the card's current column.
        """
        if source_column_id is None:
            source_column_id = self.get_card(card_id).column_id
        if source_column_id == dest_column_id:
            return self.reorder_card(source_column_id, card_id, None, to_index)
        if self.state.column(dest_column_id) is None:
            raise NotFoundError(f"Column {dest_column_id} is not on this board.")

        source_in_view = self.state.column(source_column_id) is not None
        if source_in_view:
            source_cards = list(self.state.cards_in(source_column_id))
        else:
            self._require_board_column(source_column_id)
            source_cards = self.store.list_backlog_cards(source_column_id)

        card = next((c for c in source_cards if c.id == card_id), None)
        if card is None:
            raise NotFoundError(f"Card {card_id} is not in column {source_column_id}.")

        remaining = _renumber([c for c in source_cards if c.id != card_id])
        dest_cards = list(self.state.cards_in(dest_column_id))
        dest_ids = position_service.place([c.id for c in dest_cards], card_id, to_index)
        by_id = {c.id: c for c in dest_cards}
        by_id[card_id] = card
        new_dest = _renumber([by_id[cid] for cid in dest_ids], column_id=dest_column_id)

        changes = {dest_column_id: new_dest}
        if source_in_view:
            changes[source_column_id] = remaining
        checkpoint = self.state.apply(changes)
        self._write_positions(
            checkpoint, _position_rows(remaining + new_dest), f"move of card {card_id}"
        )

        result = MutationResult(card=self.state.find_card(card_id))
        failure = history_service.record(self.store, card_id, source_column_id, dest_column_id)
        if failure is not None:
            result.partial_failures.append(failure)
        return result

    def _write_positions(self, checkpoint, rows, description):
        try:
            self.store.update_positions(rows)
        except PersistenceError as e:
            logger.error(f"Board {self.board_id}: {description} failed, resyncing: {e}")
            self._recover(checkpoint)
            raise
        self.state.confirm(checkpoint)

    def _recover(self, checkpoint):
        try:
            sync_service.resync(self.store, self.state)
        except PersistenceError as e:
            logger.error(
                f"Board {self.board_id}: resync failed, rolling back optimistic change: {e}"
            )
            self.state.rollback(checkpoint)
        else:
            self.state.confirm(checkpoint)

    # -------------------- card CRUD --------------------

    def add_card(self, column_id, title, description=None, color=None,
                 due_date=None, tag_ids=()):
        """Append a new card to a column.

        Nothing is added to local state until the store returns the row,
        since every later operation keys off the persisted id.

        Raises:
            ValidationError: Empty title, bad color or due date, or a tag
                that is not on this board.
            NotFoundError: Column is not on this board.
            PersistenceError: Insert failed; local state unchanged.
        """
        title = validation.clean_title(title)
        description = validation.clean_description(description)
        color = validation.clean_color(color)
        due_date = validation.clean_due_date(due_date)
        desired = self._require_board_tags(tag_ids or ())

        in_view = self.state.column(column_id) is not None
        if in_view:
            position = len(self.state.cards_in(column_id))
        else:
            # Backlog: newest card on top
            self._require_board_column(column_id)
            backlog = self.store.list_backlog_cards(column_id)
            position = backlog[0].position - 1 if backlog else 0

        card = self.store.insert_card(column_id, title, description, color, due_date, position)
        result = MutationResult()

        try:
            tag_service.reconcile(self.store, card.id, frozenset(), desired)
            card = replace(card, tags=self.state.tags_by_id(desired))
        except PersistenceError as e:
            logger.warning(f"Card {card.id} created but tags not saved: {e}")
            result.partial_failures.append(
                PartialFailureError("tags", f"Card saved but tags not saved: {e}")
            )

        if in_view:
            self.state.upsert_card(card)
        result.card = card
        return result

    def update_card(self, card_id, title, description=None, color=None,
                    due_date=None, tag_ids=None):
        """Save scalar fields, then replace the tag set if tag_ids is given.

        Raises:
            ValidationError: Empty title, bad color or due date, or a tag
                that is not on this board.
            NotFoundError: Card is not on this board.
            PersistenceError: Scalar write failed; local state unchanged.
        """
        title = validation.clean_title(title)
        description = validation.clean_description(description)
        color = validation.clean_color(color)
        due_date = validation.clean_due_date(due_date)
        desired = self._require_board_tags(tag_ids) if tag_ids is not None else None

        existing = self.get_card(card_id)

        fields = {
            "title": title,
            "description": description,
            "color": color,
            "due_date": due_date,
        }
        try:
            self.store.update_card(card_id, fields)
        except PersistenceError as e:
            logger.error(f"Update of card {card_id} not saved: {e}")
            raise

        result = MutationResult()
        tags = existing.tags
        if desired is not None:
            try:
                current = self.store.card_tag_ids(card_id)
                tag_service.reconcile(self.store, card_id, current, desired)
                tags = self.state.tags_by_id(desired)
            except PersistenceError as e:
                logger.warning(f"Card {card_id} saved but tags not saved: {e}")
                result.partial_failures.append(
                    PartialFailureError("tags", f"Card saved but tags not saved: {e}")
                )
                # the delete half of the replace may have gone through
                tags = self._stored_tags(card_id, fallback=tags)

        updated = replace(existing, tags=tags, **fields)
        if self.state.find_card(card_id) is not None:
            self.state.upsert_card(updated)
        result.card = updated
        return result

    def delete_card(self, card_id):
        """Remove a card from local state, then from the store.

        A failed delete is logged, not rolled back: the card reappears on
        the next resync if it really survived.
        """
        removed = self.state.remove_card(card_id)
        if removed is None:
            # Not in the board view (Backlog card, or already gone)
            if self.store.get_card(card_id) is None:
                return MutationResult()
            self.get_card(card_id)
        try:
            self.store.delete_card(card_id)
        except PersistenceError as e:
            logger.warning(f"Delete of card {card_id} failed after local removal: {e}")
        return MutationResult(card=removed)

    # -------------------- tags --------------------

    def create_tag(self, name, color=None):
        tag = tag_service.create_tag(self.store, self.board_id, name, color)
        self.state.add_tag(tag)
        return tag

    # -------------------- lookups --------------------

    def get_card(self, card_id):
        """A card of this board, from local state or (for the Backlog) the store.

        Raises:
            NotFoundError: Unknown card, or a card on another board.
        """
        card = self.state.find_card(card_id)
        if card is not None:
            return card
        card = self.store.get_card(card_id)
        if card is None or not self._is_board_column(card.column_id):
            raise NotFoundError(f"Card {card_id} not found.")
        return card

    def card_history(self, card_id):
        self.get_card(card_id)
        return history_service.list_for_card(self.store, card_id)

    # -------------------- helpers --------------------

    def _require_board_tags(self, tag_ids):
        desired = frozenset(tag_ids)
        known = {t.id for t in self.state.tags_by_id(desired)}
        unknown = desired - known
        if unknown:
            raise ValidationError(f"Unknown tag(s) for this board: {', '.join(sorted(unknown))}")
        return desired

    def _stored_tags(self, card_id, fallback):
        try:
            return self.state.tags_by_id(self.store.card_tag_ids(card_id))
        except PersistenceError as e:
            logger.warning(f"Could not re-read tags of card {card_id}: {e}")
            return fallback

    def _is_board_column(self, column_id):
        if self.state.column(column_id) is not None:
            return True
        column = self.store.find_column(column_id)
        return column is not None and column.board_id == self.board_id

    def _require_board_column(self, column_id):
        if not self._is_board_column(column_id):
            raise NotFoundError(f"Column {column_id} is not on this board.")
