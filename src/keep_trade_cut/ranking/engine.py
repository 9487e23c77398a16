"""Keep / trade / cut rating calculations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from keep_trade_cut.core.config import RatingConfig
from keep_trade_cut.core.errors import InvalidOutcome
from keep_trade_cut.ranking.base import Ballot, Outcome

DEFAULT_CONFIG = RatingConfig()


@dataclass
class ItemStats:
    """Ballot breakdown for one item.

    Attributes:
        keep_votes: Number of keep ballots.
        trade_votes: Number of trade ballots.
        cut_votes: Number of cut ballots.
        total_votes: Number of ballots of any outcome.
        confidence: Confidence in the item's rating (0.0-1.0).
    """

    keep_votes: int = 0
    trade_votes: int = 0
    cut_votes: int = 0
    total_votes: int = 0
    confidence: float = 0.0


def parse_outcome(outcome: object) -> Outcome:
    """Convert an outcome tag to an Outcome.

    Raises:
        InvalidOutcome: If the tag is not keep, trade or cut.
    """
    try:
        return Outcome(outcome)
    except ValueError as e:
        raise InvalidOutcome(outcome) from e


def outcome_impact(outcome: object, config: RatingConfig = DEFAULT_CONFIG) -> float:
    """Look up the raw rating impact of an outcome."""
    impacts = {
        Outcome.KEEP: config.keep_impact,
        Outcome.TRADE: config.trade_impact,
        Outcome.CUT: config.cut_impact,
    }
    return impacts[parse_outcome(outcome)]


def confidence(vote_count: int, full_confidence_votes: int = 20) -> float:
    """Calculate confidence in a rating backed by ``vote_count`` ballots.

    Linear ramp that saturates once ``full_confidence_votes`` ballots are seen:
    confidence = min(1, vote_count / full_confidence_votes)

    Args:
        vote_count: Number of ballots observed for the item.
        full_confidence_votes: Ballot count giving full confidence.

    Returns:
        Confidence factor (0.0 to 1.0).
    """
    return min(1.0, max(vote_count, 0) / full_confidence_votes)


def diminish(
    current_rating: float,
    impact: float,
    high_threshold: float = 70.0,
    low_threshold: float = 30.0,
    factor: float = 0.5,
) -> float:
    """Apply diminishing returns near the top and bottom of the scale.

    Positive impacts shrink once an item is already favored, negative impacts
    shrink once it is already disfavored.

    Args:
        current_rating: Rating at the time the ballot is applied.
        impact: Raw outcome impact.
        high_threshold: Ratings at or above this dampen positive impacts.
        low_threshold: Ratings at or below this dampen negative impacts.
        factor: Multiplier applied to a dampened impact.

    Returns:
        Adjusted impact.
    """
    if current_rating >= high_threshold and impact > 0:
        return impact * factor
    if current_rating <= low_threshold and impact < 0:
        return impact * factor
    return impact


def next_rating(
    current_rating: float,
    outcome: object,
    observed_votes: int,
    config: RatingConfig = DEFAULT_CONFIG,
) -> float:
    """Apply one ballot to a rating.

    delta = K * confidence(observed_votes) * diminish(current_rating, impact)

    Args:
        current_rating: Rating before this ballot.
        outcome: "keep", "trade" or "cut".
        observed_votes: Ballots the item had before this one.
        config: Rating constants.

    Returns:
        New rating, clamped to [min_rating, max_rating].

    Raises:
        InvalidOutcome: If the outcome tag is unknown.
    """
    impact = diminish(
        current_rating,
        outcome_impact(outcome, config),
        high_threshold=config.high_threshold,
        low_threshold=config.low_threshold,
        factor=config.diminishing_factor,
    )
    delta = config.k_factor * confidence(observed_votes, config.full_confidence_votes) * impact
    return max(config.min_rating, min(config.max_rating, current_rating + delta))


def order_ballots(ballots: Iterable[Ballot]) -> list[Ballot]:
    """Sort ballots by timestamp, keeping the given order for ties."""
    return sorted(ballots, key=lambda b: b.created_at)


def recompute_rating(
    ballots: Iterable[Ballot],
    config: RatingConfig = DEFAULT_CONFIG,
) -> tuple[float, int]:
    """Rebuild an item's rating by replaying its full ballot history.

    Each ballot is applied in ascending timestamp order, using its zero-based
    position as the observed vote count.

    Args:
        ballots: Every ballot recorded for the item.
        config: Rating constants.

    Returns:
        Tuple of (final_rating, vote_count).
    """
    rating = config.base_rating
    ordered = order_ballots(ballots)
    for position, ballot in enumerate(ordered):
        rating = next_rating(rating, ballot.outcome, position, config)
    return rating, len(ordered)


def simulate_progression(
    outcomes: Sequence[object],
    starting_rating: float | None = None,
    config: RatingConfig = DEFAULT_CONFIG,
) -> list[float]:
    """Ratings after each outcome of a sequence, starting value included."""
    rating = config.base_rating if starting_rating is None else starting_rating
    progression = [rating]
    for position, outcome in enumerate(outcomes):
        rating = next_rating(rating, outcome, position, config)
        progression.append(rating)
    return progression


def item_stats(ballots: Sequence[Ballot], config: RatingConfig = DEFAULT_CONFIG) -> ItemStats:
    """Count ballots per outcome for one item.

    Raises:
        InvalidOutcome: If a ballot carries an unknown outcome tag.
    """
    stats = ItemStats(
        total_votes=len(ballots),
        confidence=confidence(len(ballots), config.full_confidence_votes),
    )
    for ballot in ballots:
        outcome = parse_outcome(ballot.outcome)
        if outcome is Outcome.KEEP:
            stats.keep_votes += 1
        elif outcome is Outcome.TRADE:
            stats.trade_votes += 1
        else:
            stats.cut_votes += 1
    return stats


class RatingEngine:
    """Rating engine bound to one set of constants.

    Stateless: every method is a pure function of its arguments and the
    configuration, so one instance can be shared freely.
    """

    def __init__(self, config: RatingConfig | None = None) -> None:
        """Initialize rating engine.

        Args:
            config: Rating constants. Defaults to RatingConfig().
        """
        self.config = config or RatingConfig()

    @property
    def base_rating(self) -> float:
        return self.config.base_rating

    def confidence(self, vote_count: int) -> float:
        return confidence(vote_count, self.config.full_confidence_votes)

    def diminish(self, current_rating: float, impact: float) -> float:
        return diminish(
            current_rating,
            impact,
            high_threshold=self.config.high_threshold,
            low_threshold=self.config.low_threshold,
            factor=self.config.diminishing_factor,
        )

    def next_rating(self, current_rating: float, outcome: object, observed_votes: int) -> float:
        return next_rating(current_rating, outcome, observed_votes, self.config)

    def recompute_rating(self, ballots: Iterable[Ballot]) -> tuple[float, int]:
        return recompute_rating(ballots, self.config)

    def simulate_progression(
        self, outcomes: Sequence[object], starting_rating: float | None = None
    ) -> list[float]:
        return simulate_progression(outcomes, starting_rating, self.config)

    def item_stats(self, ballots: Sequence[Ballot]) -> ItemStats:
        return item_stats(ballots, self.config)
