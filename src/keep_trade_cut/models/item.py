import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, Double
from sqlmodel import Field, SQLModel


class Item(SQLModel, table=True):
    """A votable item with its cached rating projection."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(index=True)
    color: str
    rating: float | None = Field(default=50.0, sa_column=Column(Double, nullable=True))
    total_votes: int = 0
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
