"""Tag service — board tag creation and card-tag reconciliation.

Reconciliation is replace-all: when the card has existing associations
they are all deleted, then exactly the desired set is inserted. The UI
always submits the complete desired set, and this keeps a shrinking tag
set from leaving stale rows behind. The returned TagDelta still reports
the minimal semantic change (added/removed).
"""

import logging
from dataclasses import dataclass

from boardsync.services import validation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagDelta:
    added: frozenset
    removed: frozenset

    @property
    def changed(self):
        return bool(self.added or self.removed)


def diff(current_tag_ids, desired_tag_ids):
    current = frozenset(current_tag_ids or ())
    desired = frozenset(desired_tag_ids or ())
    return TagDelta(added=desired - current, removed=current - desired)


def reconcile(store, card_id, current_tag_ids, desired_tag_ids):
    """Make the card's associations equal desired_tag_ids.

    Args:
        store: BoardStore (or anything with delete_card_tags / insert_card_tags).
        card_id: Card UUID string.
        current_tag_ids: Tag ids currently associated with the card.
        desired_tag_ids: Tag ids the card should end up with.

    Returns:
        TagDelta describing the semantic change.

    Raises:
        PersistenceError: If either write fails. Callers treat this as a
            secondary failure; it never undoes the card write before it.
    """
    current = frozenset(current_tag_ids or ())
    desired = frozenset(desired_tag_ids or ())
    delta = diff(current, desired)

    if current:
        store.delete_card_tags(card_id)
    # insert_card_tags is a no-op for an empty set
    store.insert_card_tags(card_id, desired)

    if delta.changed:
        logger.info(
            f"Card {card_id} tags: +{sorted(delta.added)} -{sorted(delta.removed)}"
        )
    return delta


def create_tag(store, board_id, name, color=None):
    """Validate and persist a new board tag.

    Raises:
        ValidationError: Empty/whitespace name, name over 50 chars, bad color.
        PersistenceError: If the insert fails.
    """
    name = validation.clean_tag_name(name)
    color = validation.clean_color(color)
    tag = store.insert_tag(board_id, name, color)
    logger.info(f"Created tag {tag.name!r} on board {board_id}")
    return tag
