from .selector import (
    MATCHUP_SIZE,
    Candidate,
    Matchup,
    MatchupSelector,
    RecentHistory,
    effective_rating,
    group_into_tiers,
    middle_window,
    rank_tiers,
    tier_key,
)

__all__ = [
    "MATCHUP_SIZE",
    "Candidate",
    "Matchup",
    "MatchupSelector",
    "RecentHistory",
    "effective_rating",
    "group_into_tiers",
    "middle_window",
    "rank_tiers",
    "tier_key",
]
