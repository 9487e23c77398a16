from keep_trade_cut.ranking.base import Outcome

from .ballot import BallotEntry
from .item import Item

__all__ = ["BallotEntry", "Item", "Outcome"]
