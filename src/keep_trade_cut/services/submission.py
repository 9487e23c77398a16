"""Vote validation, ballot logging and rating recomputation."""

from __future__ import annotations

import asyncio
import math
import uuid
from collections import defaultdict
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from keep_trade_cut.core.config import AppConfig
from keep_trade_cut.core.errors import DuplicateSelection, OutOfSet, VotingError
from keep_trade_cut.models import BallotEntry
from keep_trade_cut.ranking import Outcome, RatingEngine, create_rating_engine
from keep_trade_cut.services.match import MATCHUP_SIZE, Matchup, MatchupSelector, RecentHistory
from keep_trade_cut.services.storage import BallotStore

logger = structlog.get_logger()


@dataclass
class VoteReceipt:
    """Outcome of an accepted vote.

    Attributes:
        vote_id: Identifier shared by the vote's three ballot entries.
        ratings: Item id to (rating, total_votes) after recomputation.
    """

    vote_id: str
    ratings: dict[str, tuple[float, int]] = field(default_factory=dict)


@dataclass
class RatingDrift:
    """A cached rating that disagrees with a replay of the ballot log."""

    item_id: str
    stored_rating: float | None
    stored_votes: int
    replayed_rating: float
    replayed_votes: int


def validate_ballot(offered: Collection[str], keep_id: str, trade_id: str, cut_id: str) -> None:
    """Check a proposed vote against the matchup on offer.

    Args:
        offered: Item ids of the matchup currently shown.
        keep_id: Item picked to keep.
        trade_id: Item picked to trade.
        cut_id: Item picked to cut.

    Raises:
        VotingError: If the offered matchup is not exactly three distinct items.
        DuplicateSelection: If the three ids are not pairwise distinct.
        OutOfSet: If an id is not part of the offered matchup.
    """
    if len(offered) != MATCHUP_SIZE or len(set(offered)) != MATCHUP_SIZE:
        msg = f"A matchup offers exactly {MATCHUP_SIZE} distinct items, got {list(offered)}"
        raise VotingError(msg, "Vote on the matchup returned by the selector.")
    chosen = (keep_id, trade_id, cut_id)
    if len(set(chosen)) != len(chosen):
        raise DuplicateSelection(chosen)
    for item_id in chosen:
        if item_id not in offered:
            raise OutOfSet(item_id, offered)


def build_ballot_entries(
    keep_id: str,
    trade_id: str,
    cut_id: str,
    vote_id: str | None = None,
    created_at: datetime | None = None,
) -> list[BallotEntry]:
    """Split a vote into its keep, trade and cut ballot entries."""
    vote_id = vote_id or str(uuid.uuid4())
    created_at = created_at or datetime.now(UTC)
    return [
        BallotEntry(item_id=item_id, outcome=outcome.value, vote_id=vote_id, created_at=created_at)
        for item_id, outcome in (
            (keep_id, Outcome.KEEP),
            (trade_id, Outcome.TRADE),
            (cut_id, Outcome.CUT),
        )
    ]


class VoteService:
    """Records votes and keeps cached ratings in step with the ballot log.

    Ratings are never adjusted incrementally: after every append the affected
    items are replayed from their full history. Replays of the same item are
    serialized with a per-item lock so a slow replay cannot overwrite a newer
    one; replays of different items run concurrently.
    """

    def __init__(
        self,
        config: AppConfig,
        store: BallotStore,
        engine: RatingEngine | None = None,
    ) -> None:
        """Initialize vote service.

        Args:
            config: Application configuration.
            store: Item and ballot-log storage.
            engine: Rating engine. Built from config when omitted.
        """
        self.config = config
        self.store = store
        self.engine = engine or create_rating_engine(config)
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def submit_vote(
        self,
        offered: Collection[str],
        keep_id: str,
        trade_id: str,
        cut_id: str,
    ) -> VoteReceipt:
        """Validate a vote, append its ballots and refresh the three ratings.

        Raises:
            VotingError: If the offered matchup is not exactly three distinct items.
            DuplicateSelection: If the three ids are not pairwise distinct.
            OutOfSet: If an id is not part of the offered matchup.
        """
        validate_ballot(offered, keep_id, trade_id, cut_id)
        entries = build_ballot_entries(keep_id, trade_id, cut_id)
        await self.store.append_ballots(entries)

        item_ids = [entry.item_id for entry in entries]
        results = await asyncio.gather(*(self.recompute_item(i) for i in item_ids))

        receipt = VoteReceipt(vote_id=entries[0].vote_id, ratings=dict(zip(item_ids, results)))
        logger.info("vote_recorded", vote_id=receipt.vote_id, items=item_ids)
        return receipt

    async def recompute_item(self, item_id: str) -> tuple[float, int]:
        """Replay one item's ballot history and persist the result."""
        async with self._locks[item_id]:
            ballots = await self.store.get_ballots_for_item(item_id)
            rating, total_votes = self.engine.recompute_rating(ballots)
            await self.store.persist_rating(item_id, rating, total_votes)

        logger.debug("rating_recomputed", item_id=item_id, rating=rating, votes=total_votes)
        return rating, total_votes

    async def rebuild_ratings(self) -> dict[str, tuple[float, int]]:
        """Replay every item from the ballot log and persist the results."""
        items = await self.store.get_items()
        results = await asyncio.gather(*(self.recompute_item(item.id) for item in items))
        logger.info("ratings_rebuilt", items=len(items))
        return {item.id: result for item, result in zip(items, results)}

    async def audit_ratings(self, tolerance: float = 1e-9) -> list[RatingDrift]:
        """Compare cached ratings against a replay without writing anything."""
        drifts = []
        for item in await self.store.get_items():
            ballots = await self.store.get_ballots_for_item(item.id)
            rating, total_votes = self.engine.recompute_rating(ballots)
            stored = item.rating
            if (
                stored is None
                or not math.isclose(stored, rating, abs_tol=tolerance)
                or item.total_votes != total_votes
            ):
                drifts.append(
                    RatingDrift(
                        item_id=item.id,
                        stored_rating=stored,
                        stored_votes=item.total_votes,
                        replayed_rating=rating,
                        replayed_votes=total_votes,
                    )
                )

        if drifts:
            logger.warning("rating_drift", items=[d.item_id for d in drifts])
        return drifts


class VotingSession:
    """One voter's sequence of matchups and votes.

    Owns the recent-history window, so concurrent sessions never affect each
    other's matchup variety.
    """

    def __init__(
        self,
        service: VoteService,
        selector: MatchupSelector,
        history: RecentHistory | None = None,
    ) -> None:
        self.service = service
        self.selector = selector
        self.history = history if history is not None else selector.new_history()
        self.current: Matchup | None = None

    async def next_matchup(self) -> Matchup:
        """Select and offer the next matchup.

        Raises:
            InsufficientItems: If fewer than three items exist.
        """
        items = await self.service.store.get_items()
        self.current = self.selector.select(items, self.history)
        return self.current

    async def vote(self, keep_id: str, trade_id: str, cut_id: str) -> VoteReceipt:
        """Submit a vote on the matchup currently on offer."""
        if self.current is None:
            msg = "No matchup is on offer"
            raise VotingError(msg, "Call next_matchup() before voting.")
        receipt = await self.service.submit_vote(self.current.ids, keep_id, trade_id, cut_id)
        self.current = None
        return receipt
