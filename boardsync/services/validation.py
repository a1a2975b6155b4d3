"""Input validation for cards and tags.

All user text is sanitized with bleach.clean() to strip HTML tags;
markdown in card descriptions survives untouched. Every check raises
ValidationError before anything reaches the store.
"""

import re
from datetime import date, datetime

import bleach

from boardsync.errors import ValidationError
from boardsync.models.kanban import Tag

HEX_COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


def sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(text, tags=[], strip=True).strip()


def clean_title(title):
    title = sanitize(title) if isinstance(title, str) else None
    if not title:
        raise ValidationError("Title is required.")
    return title


def clean_description(description):
    description = sanitize(description) if isinstance(description, str) else None
    return description or None


def clean_color(color):
    """Empty means "no color"; otherwise #rgb or #rrggbb."""
    if color is None or color == "":
        return None
    if not isinstance(color, str) or not HEX_COLOR_RE.match(color.strip()):
        raise ValidationError(
            f"Invalid color '{color}'. Use a hex value like #f00 or #ff0000."
        )
    return color.strip()


def clean_due_date(value):
    """Accept a date, an ISO "YYYY-MM-DD" string, or nothing."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid due date '{value}'. Use YYYY-MM-DD.") from None


def clean_tag_name(name):
    name = sanitize(name) if isinstance(name, str) else None
    if not name:
        raise ValidationError("Tag name is required.")
    if len(name) > Tag.MAX_NAME_LENGTH:
        raise ValidationError(
            f"Tag name must be at most {Tag.MAX_NAME_LENGTH} characters."
        )
    return name
