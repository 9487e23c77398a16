import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class BallotEntry(SQLModel, table=True):
    """One immutable (item, outcome, timestamp) record of the ballot log."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    item_id: str = Field(index=True)
    outcome: str
    vote_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
