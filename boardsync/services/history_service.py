"""History service — append-only audit trail for cross-column moves.

record() is best-effort: the move it describes has already been saved,
so any failure here is logged and reported back as a PartialFailureError
value, never raised.
"""

import logging

from boardsync.errors import PartialFailureError

logger = logging.getLogger(__name__)

UNKNOWN_COLUMN = "Unknown"


def record(store, card_id, from_column_id, to_column_id):
    """Append a history row for a card moved between columns.

    Column ids are resolved to display names with one lookup; a name
    that cannot be resolved is written as "Unknown".

    Returns:
        None on success, or a PartialFailureError describing the failure.
    """
    try:
        names = store.column_names([from_column_id, to_column_id])
        store.insert_history(
            card_id,
            names.get(from_column_id, UNKNOWN_COLUMN),
            names.get(to_column_id, UNKNOWN_COLUMN),
        )
    except Exception as e:
        logger.warning(f"History record failed for card {card_id}: {e}")
        return PartialFailureError("history", f"Move saved but history not recorded: {e}")
    return None


def list_for_card(store, card_id):
    """History rows for a card as JSON-safe dicts, oldest first."""
    return [
        {
            "id": entry.id,
            "card_id": entry.card_id,
            "from_column": entry.from_column,
            "to_column": entry.to_column,
            "timestamp": entry.timestamp.isoformat() if entry.timestamp else None,
        }
        for entry in store.list_history(card_id)
    ]
