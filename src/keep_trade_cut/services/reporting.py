"""Rankings report generation for Keep / Trade / Cut."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass

from tabulate import tabulate

from keep_trade_cut.models import BallotEntry, Item
from keep_trade_cut.ranking import RatingEngine


@dataclass
class RankingRow:
    """One line of the rankings table."""

    rank: int
    item_id: str
    name: str
    color: str
    rating: float
    total_votes: int
    confidence: float
    keep_votes: int
    trade_votes: int
    cut_votes: int


def build_rankings(
    items: Sequence[Item],
    ballots: Sequence[BallotEntry],
    engine: RatingEngine,
) -> list[RankingRow]:
    """Rank items by rating with a per-outcome ballot breakdown.

    Args:
        items: Items with their cached ratings.
        ballots: The ballot log.
        engine: Rating engine providing the base rating and confidence.

    Returns:
        Rows sorted by rating descending, ties broken by name.
    """
    by_item: dict[str, list[BallotEntry]] = defaultdict(list)
    for ballot in ballots:
        by_item[ballot.item_id].append(ballot)

    def _rating(item: Item) -> float:
        return engine.base_rating if item.rating is None else item.rating

    ordered = sorted(items, key=lambda item: (-_rating(item), item.name))
    rows = []
    for rank, item in enumerate(ordered, 1):
        stats = engine.item_stats(by_item.get(item.id, []))
        rows.append(
            RankingRow(
                rank=rank,
                item_id=item.id,
                name=item.name,
                color=item.color,
                rating=_rating(item),
                total_votes=item.total_votes,
                confidence=engine.confidence(item.total_votes),
                keep_votes=stats.keep_votes,
                trade_votes=stats.trade_votes,
                cut_votes=stats.cut_votes,
            )
        )
    return rows


def format_rankings(rows: Sequence[RankingRow], tablefmt: str = "github") -> str:
    """Render rankings as a text table."""
    table = [
        [
            r.rank,
            r.name,
            r.color,
            f"{r.rating:.1f}",
            f"{r.confidence:.0%}",
            r.keep_votes,
            r.trade_votes,
            r.cut_votes,
        ]
        for r in rows
    ]
    headers = ["Rank", "Item", "Color", "Rating", "Confidence", "Keep", "Trade", "Cut"]
    return tabulate(table, headers=headers, tablefmt=tablefmt, disable_numparse=True)
