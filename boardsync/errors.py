"""Error taxonomy for board mutations.

- ValidationError: input rejected before any write (empty title, bad hex
  color, bad tag name). Subclasses ValueError like the rest of the
  service-layer input checks.
- PersistenceError: the store rejected a read or write.
- PartialFailureError: a secondary step (tag reconciliation, history
  record) failed after the primary write succeeded. Collected on the
  mutation result and logged, never raised to callers.
- NotFoundError: a mutation referenced an unknown board/column/card.
"""


class BoardError(Exception):
    """Base class for every error raised by the board engine."""


class ValidationError(BoardError, ValueError):
    pass


class NotFoundError(BoardError, LookupError):
    pass


class PersistenceError(BoardError):
    pass


class PartialFailureError(BoardError):
    """Secondary step failure. `step` names it ("tags" or "history")."""

    def __init__(self, step, message):
        super().__init__(message)
        self.step = step
