"""Card history model.

Append-only log of cross-column moves. Column names are captured as
display strings at the moment of the move, so renaming or deleting a
column later does not rewrite history. Rows outlive the card they
describe; card_id is deliberately not a foreign key.
"""

import uuid

from boardsync.extensions import db


class CardHistory(db.Model):
    __tablename__ = "kanban_card_history"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    card_id = db.Column(db.String(36), nullable=False, index=True)
    from_column = db.Column(db.String(255), nullable=False)
    to_column = db.Column(db.String(255), nullable=False)
    timestamp = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    def __repr__(self):
        return f"<CardHistory {self.from_column} -> {self.to_column}>"
