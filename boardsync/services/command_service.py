"""Command service — a text front-end over BoardSession.

Commands (two-letter aliases in brackets):
  create [cr] <title>                 add a card to the first column
  move   [mv] <title> to <column>     move a card to the end of a column
  delete [dl] <title>                 delete a card
  list   [l]                          list columns and their cards
  help   [h]                          show this help

Cards and columns are matched by case-insensitive title/name. User
mistakes and engine errors (validation, not found, persistence) come
back as CommandResponse(success=False, ...) instead of raising.
"""

import re
from dataclasses import dataclass

from boardsync.errors import BoardError

TO_RE = re.compile(r"\s+to\s+", re.IGNORECASE)

ALIASES = {
    "create": "create", "cr": "create",
    "move": "move", "mv": "move",
    "delete": "delete", "dl": "delete",
    "list": "list", "l": "list",
    "help": "help", "h": "help",
}

HELP_TEXT = (
    "Commands:\n"
    "  create (cr) <title>              add a card to the first column\n"
    "  move (mv) <title> to <column>    move a card to a column\n"
    "  delete (dl) <title>              delete a card\n"
    "  list (l)                         list columns and cards\n"
    "  help (h)                         show this help"
)


@dataclass(frozen=True)
class CommandResponse:
    success: bool
    message: str

    def to_dict(self):
        return {"success": self.success, "message": self.message}


def _ok(message):
    return CommandResponse(True, message)


def _fail(message):
    return CommandResponse(False, message)


def execute(session, line):
    """Parse and run one command line against a loaded BoardSession."""
    line = (line or "").strip()
    if not line:
        return _fail('Type a command or "help".')

    word, _, rest = line.partition(" ")
    command = ALIASES.get(word.lower())
    if command is None:
        return _fail(f'Unknown command "{word}". Type "help" for a list of commands.')

    handler = _HANDLERS[command]
    try:
        return handler(session, rest.strip())
    except BoardError as e:
        return _fail(str(e))


def _create(session, title):
    if not title:
        return _fail("Usage: create <title>")
    columns = session.snapshot().columns
    if not columns:
        return _fail("This board has no columns.")
    result = session.add_card(columns[0].id, title)
    return _ok(f'Created "{result.card.title}" in {columns[0].name}.')


def _splits(args):
    """Every (title, column) reading of "<title> to <column>", leftmost first."""
    splits = []
    pos = 0
    while True:
        match = TO_RE.search(args, pos)
        if match is None:
            return splits
        title, column_name = args[:match.start()], args[match.end():]
        if title.strip() and column_name.strip():
            splits.append((title, column_name))
        pos = match.start() + 1


def _move(session, args):
    splits = _splits(args)
    if not splits:
        return _fail("Usage: move <title> to <column>")

    # Titles and column names may themselves contain "to"; take the first
    # reading that names both an existing card and an existing column.
    for title, column_name in splits:
        card = session.state.find_card_by_title(title)
        dest = session.state.find_column_by_name(column_name)
        if card is not None and dest is not None:
            break
    else:
        for title, column_name in splits:
            if session.state.find_card_by_title(title) is not None:
                return _fail(f'Column "{column_name.strip()}" not found.')
        return _fail(f'Card "{splits[0][0].strip()}" not found.')

    if dest.id == card.column_id:
        return _fail(f'"{card.title}" is already in {dest.name}.')

    result = session.move_card(
        card.id, card.column_id, dest.id, len(session.state.cards_in(dest.id))
    )
    message = f'Moved "{card.title}" to {dest.name}.'
    if not result.complete:
        message += " (history not recorded)"
    return _ok(message)


def _delete(session, title):
    if not title:
        return _fail("Usage: delete <title>")
    card = session.state.find_card_by_title(title)
    if card is None:
        return _fail(f'Card "{title}" not found.')
    session.delete_card(card.id)
    return _ok(f'Deleted "{card.title}".')


def _list(session, _args):
    snapshot = session.snapshot()
    if not snapshot.columns:
        return _ok("This board has no columns.")
    lines = []
    for column in snapshot.columns:
        cards = snapshot.cards_in(column.id)
        lines.append(f"{column.name} ({len(cards)})")
        lines.extend(f"  - {card.title}" for card in cards)
    return _ok("\n".join(lines))


def _help(_session, _args):
    return _ok(HELP_TEXT)


_HANDLERS = {
    "create": _create,
    "move": _move,
    "delete": _delete,
    "list": _list,
    "help": _help,
}
