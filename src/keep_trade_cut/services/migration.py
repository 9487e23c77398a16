"""Import of legacy three-column votes into the ballot log."""

from __future__ import annotations

import csv
import json
import uuid
from collections.abc import Collection, Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path

import structlog
from pydantic import BaseModel, field_validator

from keep_trade_cut.models import BallotEntry
from keep_trade_cut.ranking import Outcome
from keep_trade_cut.services.submission import VoteService

logger = structlog.get_logger()

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
VOTE_SPACING = timedelta(seconds=3)
OUTCOME_OFFSETS = {
    Outcome.KEEP: timedelta(seconds=0),
    Outcome.TRADE: timedelta(seconds=1),
    Outcome.CUT: timedelta(seconds=2),
}


class LegacyVote(BaseModel):
    """A vote stored as one row with keep, trade and cut columns."""

    keep: str | None = None
    trade: str | None = None
    cut: str | None = None
    created_at: datetime | None = None

    @field_validator("keep", "trade", "cut", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v if v is None else str(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def blank_timestamp_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def timestamp(self) -> datetime:
        """Creation time as an aware UTC datetime, the epoch when unknown."""
        if self.created_at is None:
            return EPOCH
        if self.created_at.tzinfo is None:
            return self.created_at.replace(tzinfo=UTC)
        return self.created_at

    @property
    def item_ids(self) -> list[str]:
        """Ids of the columns that are present, in keep, trade, cut order."""
        return [item_id for item_id in (self.keep, self.trade, self.cut) if item_id is not None]

    @property
    def has_duplicates(self) -> bool:
        return len(set(self.item_ids)) != len(self.item_ids)


def load_legacy_votes(path: str | Path) -> list[LegacyVote]:
    """Read legacy votes from a CSV file or a JSON Lines file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If a row is malformed.
    """
    source = Path(path)
    if not source.exists():
        msg = f"Vote file not found: {source}"
        raise FileNotFoundError(msg)

    with source.open(encoding="utf-8", newline="") as f:
        if source.suffix.lower() == ".csv":
            rows = list(csv.DictReader(f))
        else:
            rows = [json.loads(line) for line in f if line.strip()]

    return [LegacyVote.model_validate(row) for row in rows]


def expand_legacy_votes(
    votes: Sequence[LegacyVote], known_items: Collection[str] | None = None
) -> list[BallotEntry]:
    """Convert legacy votes into ballot entries in chronological order.

    Votes are sorted by creation time. Vote ``i`` gets ballots at
    ``created_at + i * 3s`` plus 0s, 1s and 2s for keep, trade and cut, so
    replaying by timestamp follows the order votes were cast. Missing columns
    produce no ballot.

    A vote naming the same item twice, or naming an item outside
    ``known_items``, is skipped as a whole so no vote lands half-applied.

    Args:
        votes: Legacy votes in any order.
        known_items: Ids of existing items. None accepts every id.

    Returns:
        Ballot entries, one per present column of each accepted vote.
    """
    entries = []
    ordered = sorted(votes, key=lambda v: v.timestamp)
    duplicated = unknown = 0
    for index, vote in enumerate(ordered):
        if vote.has_duplicates:
            duplicated += 1
            continue
        if known_items is not None and any(i not in known_items for i in vote.item_ids):
            unknown += 1
            continue
        vote_id = str(uuid.uuid4())
        base_time = vote.timestamp + index * VOTE_SPACING
        for outcome, item_id in (
            (Outcome.KEEP, vote.keep),
            (Outcome.TRADE, vote.trade),
            (Outcome.CUT, vote.cut),
        ):
            if item_id is None:
                continue
            entries.append(
                BallotEntry(
                    item_id=item_id,
                    outcome=outcome.value,
                    vote_id=vote_id,
                    created_at=base_time + OUTCOME_OFFSETS[outcome],
                )
            )

    if duplicated:
        logger.warning("legacy_votes_skipped", reason="duplicate_items", count=duplicated)
    if unknown:
        logger.warning("legacy_votes_skipped", reason="unknown_items", count=unknown)
    return entries


async def import_legacy_votes(
    service: VoteService, votes: Sequence[LegacyVote]
) -> dict[str, tuple[float, int]]:
    """Append legacy votes to the ballot log and rebuild every rating.

    Votes that reference unknown items or repeat an item are skipped whole.

    Returns:
        Item id to (rating, total_votes) after the rebuild.
    """
    known = {item.id for item in await service.store.get_items()}
    entries = expand_legacy_votes(votes, known_items=known)
    if entries:
        await service.store.append_ballots(entries)
    logger.info("legacy_votes_imported", votes=len(votes), ballots=len(entries))
    return await service.rebuild_ratings()
