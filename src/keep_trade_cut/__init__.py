"""Keep / Trade / Cut.

Rate items from three-way keep, trade and cut ballots and pick competitive
matchups to vote on next.
"""

from keep_trade_cut.ranking import RatingEngine, confidence, next_rating, recompute_rating
from keep_trade_cut.services.match import MatchupSelector, RecentHistory

__version__ = "0.1.0"
__all__ = [
    "MatchupSelector",
    "RatingEngine",
    "RecentHistory",
    "__version__",
    "confidence",
    "next_rating",
    "recompute_rating",
]
