# Models package — import all models here so Alembic can discover them.

from boardsync.models.kanban import (  # noqa: F401
    Board,
    KanbanCard,
    KanbanColumn,
    Tag,
    card_tags,
)
from boardsync.models.card_history import CardHistory  # noqa: F401
