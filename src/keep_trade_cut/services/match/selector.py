"""Tier-based matchup selection for Keep / Trade / Cut."""

from __future__ import annotations

import math
import random
from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from keep_trade_cut.core.config import SelectorConfig
from keep_trade_cut.core.errors import InsufficientItems

logger = structlog.get_logger()

MATCHUP_SIZE = 3


@dataclass
class Candidate:
    """An item as seen by the selector.

    Attributes:
        id: Unique item identifier.
        rating: Stored rating, None if the item was never rated.
        name: Display name.
        color: Hex color value.
        total_votes: Ballots recorded for the item.
    """

    id: str
    rating: float | None = None
    name: str = ""
    color: str = ""
    total_votes: int = 0


@dataclass
class Matchup:
    """Three items shown together.

    Attributes:
        items: The selected items, in presentation order.
        tier: Lower bound of the rating tier they came from, None for a
            random fallback.
    """

    items: tuple[Any, ...]
    tier: float | None = None

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.items)


@dataclass
class RecentHistory:
    """Session-scoped window of recently shown matchups (most recent last).

    Attributes:
        max_size: Number of matchups remembered.
        resets: How many times the window was cleared to free up items.
    """

    max_size: int = 10
    resets: int = 0
    _entries: deque[tuple[str, ...]] = field(init=False, repr=False, default_factory=deque)

    def __post_init__(self) -> None:
        self._entries = deque(maxlen=self.max_size)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[str, ...]]:
        return iter(self._entries)

    @property
    def last(self) -> tuple[str, ...] | None:
        return self._entries[-1] if self._entries else None

    def item_ids(self) -> set[str]:
        """All item ids appearing in the window."""
        return {item_id for entry in self._entries for item_id in entry}

    def record(self, item_ids: Sequence[str]) -> None:
        """Append a matchup, dropping the oldest beyond max_size."""
        self._entries.append(tuple(item_ids))

    def reset(self) -> None:
        """Clear the window entirely."""
        self._entries.clear()
        self.resets += 1


def effective_rating(item: Any, base_rating: float = 50.0) -> float:
    """Stored rating of an item, or the base rating when it has none."""
    rating = getattr(item, "rating", None)
    return base_rating if rating is None else float(rating)


def tier_key(rating: float, tier_width: float = 10.0) -> float:
    """Lower bound of the half-open tier containing ``rating``."""
    return math.floor(rating / tier_width) * tier_width


def group_into_tiers(
    items: Sequence[Any],
    tier_width: float = 10.0,
    base_rating: float = 50.0,
) -> dict[float, list[Any]]:
    """Bucket items into fixed-width rating tiers.

    Tiers are half-open, so an item rated exactly 60.0 belongs to the 60 tier.
    Items keep their input order inside each tier.

    Args:
        items: Items to bucket.
        tier_width: Width of a tier in rating points.
        base_rating: Rating assumed for unrated items.

    Returns:
        Mapping of tier lower bound to the items in that tier.
    """
    tiers: dict[float, list[Any]] = {}
    for item in items:
        key = tier_key(effective_rating(item, base_rating), tier_width)
        tiers.setdefault(key, []).append(item)
    return tiers


def rank_tiers(
    tiers: dict[float, list[Any]], base_rating: float = 50.0
) -> list[tuple[float, list[Any]]]:
    """Sort tiers by descending average rating, then descending tier key."""

    def _average(members: list[Any]) -> float:
        return sum(effective_rating(m, base_rating) for m in members) / len(members)

    return sorted(
        tiers.items(),
        key=lambda entry: (_average(entry[1]), entry[0]),
        reverse=True,
    )


def middle_window(count: int, window: int = 3) -> tuple[int, int]:
    """Index range of up to ``window`` entries centred on the middle of a list.

    The range is clamped to ``[0, count)``.

    Args:
        count: Length of the ranked list.
        window: Maximum number of entries in the range.

    Returns:
        Tuple of (start, end) suitable for slicing.
    """
    middle = count // 2
    before = (window - 1) // 2
    start = max(0, middle - before)
    end = min(count, middle - before + window)
    return start, end


class MatchupSelector:
    """Pick three closely rated items that were not shown recently.

    Attributes:
        config: Selector configuration.
        base_rating: Rating assumed for unrated items.
        rng: Random source used for every choice.
    """

    def __init__(
        self,
        config: SelectorConfig | None = None,
        base_rating: float = 50.0,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> None:
        """Initialize matchup selector.

        Args:
            config: Selector configuration. Defaults to SelectorConfig().
            base_rating: Rating assumed for unrated items.
            rng: Random source. Takes precedence over seed.
            seed: Seed for a private random source when rng is not given.
        """
        self.config = config or SelectorConfig()
        self.base_rating = base_rating
        self.rng = rng or random.Random(seed)  # noqa: S311

    def new_history(self) -> RecentHistory:
        """Create an empty history window sized for this selector."""
        return RecentHistory(max_size=self.config.history_size)

    def select(self, items: Sequence[Any], history: RecentHistory) -> Matchup:
        """Select the next matchup and record it in ``history``.

        1. Items shown in any matchup of the history window are excluded
        2. If fewer than three remain, the window is cleared once and the full
           list is used again, still avoiding the matchup just shown when
           enough items are left to do so
        3. Remaining items are grouped into rating tiers; tiers with too few
           members are dropped
        4. Without a usable tier, three items are drawn uniformly at random
        5. Otherwise tiers are ranked by average rating and one is drawn from
           the middle of the ranking, away from the extremes, and three of its
           items are sampled

        Args:
            items: Every item that can be shown. Each needs ``id`` and
                ``rating`` attributes.
            history: Session history window, updated in place.

        Returns:
            The selected matchup.

        Raises:
            InsufficientItems: If fewer than three items exist.
        """
        if len(items) < MATCHUP_SIZE:
            raise InsufficientItems(len(items), MATCHUP_SIZE)

        pool = self._eligible(items, history.item_ids())
        if len(pool) < MATCHUP_SIZE:
            last_shown = set(history.last or ())
            history.reset()
            logger.debug("history_reset", available=len(pool), resets=history.resets)
            pool = self._eligible(items, last_shown)
            if len(pool) < MATCHUP_SIZE:
                pool = list(items)

        matchup = self._pick_from_pool(pool)
        history.record(matchup.ids)
        logger.debug("matchup_selected", items=list(matchup.ids), tier=matchup.tier)
        return matchup

    def _eligible(self, items: Sequence[Any], excluded: set[str]) -> list[Any]:
        return [item for item in items if item.id not in excluded]

    def _pick_from_pool(self, pool: list[Any]) -> Matchup:
        tiers = group_into_tiers(pool, self.config.tier_width, self.base_rating)
        viable = {
            key: members
            for key, members in tiers.items()
            if len(members) >= self.config.min_tier_size
        }

        if not viable:
            return Matchup(items=tuple(self.rng.sample(pool, MATCHUP_SIZE)))

        ranked = rank_tiers(viable, self.base_rating)
        start, end = middle_window(len(ranked), self.config.tier_window)
        key, members = self.rng.choice(ranked[start:end])
        return Matchup(items=tuple(self.rng.sample(members, MATCHUP_SIZE)), tier=key)
