"""Ranking module for Keep / Trade / Cut.

Turns an item's ballot log into a bounded rating and a confidence score.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from keep_trade_cut.ranking.base import Ballot, Outcome
from keep_trade_cut.ranking.engine import (
    ItemStats,
    RatingEngine,
    confidence,
    diminish,
    item_stats,
    next_rating,
    order_ballots,
    outcome_impact,
    parse_outcome,
    recompute_rating,
    simulate_progression,
)

if TYPE_CHECKING:
    from keep_trade_cut.core.config import AppConfig


def create_rating_engine(config: AppConfig) -> RatingEngine:
    """Create rating engine based on config.

    Args:
        config: Application configuration.

    Returns:
        Configured rating engine.
    """
    return RatingEngine(config.rating)


__all__ = [
    "Ballot",
    "ItemStats",
    "Outcome",
    "RatingEngine",
    "confidence",
    "create_rating_engine",
    "diminish",
    "item_stats",
    "next_rating",
    "order_ballots",
    "outcome_impact",
    "parse_outcome",
    "recompute_rating",
    "simulate_progression",
]
