"""Board synchronizer — full refetch that replaces local state wholesale.

Used once at initial load and as the recovery path after any ordering
write fails. Fetch order: non-Backlog columns by position, their cards
(with tags) by position, then board tags by name. Nothing is swapped in
until every fetch has succeeded.
"""

import logging

from boardsync.services.board_state import BoardSnapshot

logger = logging.getLogger(__name__)


def fetch_snapshot(store, board_id):
    columns = store.list_columns(board_id)
    cards = store.list_cards([col.id for col in columns])
    tags = store.list_tags(board_id)

    by_column = {col.id: [] for col in columns}
    for card in cards:
        by_column.setdefault(card.column_id, []).append(card)

    return BoardSnapshot(
        board_id=board_id,
        columns=tuple(columns),
        cards={cid: tuple(column_cards) for cid, column_cards in by_column.items()},
        tags=tuple(tags),
    )


def resync(store, state):
    """Reload the board from the store and swap it into state.

    Raises:
        PersistenceError: If any fetch fails. state is left untouched.
    """
    snapshot = fetch_snapshot(store, state.board_id)
    state.replace(snapshot)
    logger.info(
        f"Resynced board {state.board_id}: {len(snapshot.columns)} columns, "
        f"{len(snapshot.all_cards())} cards, {len(snapshot.tags)} tags"
    )
    return snapshot
