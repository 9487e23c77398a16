"""Storage contract consumed by the vote service."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from keep_trade_cut.models import BallotEntry, Item


@runtime_checkable
class BallotStore(Protocol):
    """Protocol for item and ballot-log storage backends."""

    async def get_items(self) -> list[Item]:
        """Get every item with its cached rating."""
        ...

    async def get_ballots_for_item(self, item_id: str) -> list[BallotEntry]:
        """Get an item's ballots in ascending timestamp order."""
        ...

    async def persist_rating(self, item_id: str, rating: float, total_votes: int) -> None:
        """Store a recomputed rating and vote count."""
        ...

    async def append_ballots(self, entries: Sequence[BallotEntry]) -> None:
        """Append entries to the ballot log."""
        ...
