"""Position allocator — ordering keys for cards within a column.

Pure functions, no I/O. Every call site renumbers the whole affected
column, so positions are contiguous (0, 1, 2, ...) after each reorder.
"""


def clamp_index(index, length):
    """Clamp an insertion index into [0, length]."""
    return max(0, min(int(index), length))


def place(ordered_ids, card_id, target_index):
    """Return a new id list with card_id removed and reinserted at target_index."""
    remaining = [cid for cid in ordered_ids if cid != card_id]
    remaining.insert(clamp_index(target_index, len(remaining)), card_id)
    return remaining


def number(ordered_ids):
    """Assign 0-indexed positions in list order: {id: position}."""
    return {cid: index for index, cid in enumerate(ordered_ids)}


def allocate(ordered_ids, card_id, target_index):
    """Compute positions for every card after placing card_id at target_index.

    Args:
        ordered_ids: Card ids in current display order.
        card_id: The card being placed. Need not already be in the list.
        target_index: Desired index in the resulting list. Out-of-range
            values are clamped, never an error.

    Returns:
        dict mapping card id -> integer position. Empty (a no-op) when
        ordered_ids is empty; to seed an empty column use place() and
        number() directly.
    """
    if not ordered_ids:
        return {}
    return number(place(ordered_ids, card_id, target_index))
