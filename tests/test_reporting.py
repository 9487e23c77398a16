"""Tests for rankings reports."""

from keep_trade_cut.models import BallotEntry, Item
from keep_trade_cut.ranking import RatingEngine
from keep_trade_cut.services.reporting import build_rankings, format_rankings


def _item(item_id, name, rating, total_votes=0):
    return Item(id=item_id, name=name, color="#445566", rating=rating, total_votes=total_votes)


class TestBuildRankings:
    """Tests for build_rankings."""

    def test_sorted_by_rating(self):
        """Test items are ranked by descending rating, ties broken by name."""
        items = [
            _item("1", "Bravo", 50.0),
            _item("2", "Alpha", 50.0),
            _item("3", "Charlie", 71.5, 20),
            _item("4", "Delta", 12.0, 10),
        ]
        rows = build_rankings(items, [], RatingEngine())

        assert [r.name for r in rows] == ["Charlie", "Alpha", "Bravo", "Delta"]
        assert [r.rank for r in rows] == [1, 2, 3, 4]
        assert rows[0].confidence == 1.0
        assert rows[3].confidence == 0.5

    def test_unrated_item_uses_base_rating(self):
        """Test an item without a cached rating is listed at the base rating."""
        rows = build_rankings([_item("1", "Alpha", None)], [], RatingEngine())
        assert rows[0].rating == 50.0

    def test_outcome_breakdown(self):
        """Test ballots are tallied per item and outcome."""
        ballots = [
            BallotEntry(item_id="1", outcome="keep", vote_id="v1"),
            BallotEntry(item_id="2", outcome="cut", vote_id="v1"),
            BallotEntry(item_id="1", outcome="trade", vote_id="v2"),
            BallotEntry(item_id="1", outcome="keep", vote_id="v3"),
        ]
        rows = build_rankings(
            [_item("1", "Alpha", 55.0, 3), _item("2", "Bravo", 45.0, 1)], ballots, RatingEngine()
        )

        alpha, bravo = rows
        assert (alpha.keep_votes, alpha.trade_votes, alpha.cut_votes) == (2, 1, 0)
        assert (bravo.keep_votes, bravo.trade_votes, bravo.cut_votes) == (0, 0, 1)

    def test_no_items(self):
        """Test an empty store gives no rows."""
        assert build_rankings([], [], RatingEngine()) == []


class TestFormatRankings:
    """Tests for format_rankings."""

    def test_github_table(self):
        """Test rankings render as a Markdown table."""
        rows = build_rankings([_item("1", "Alpha", 55.25, 4)], [], RatingEngine())
        table = format_rankings(rows)

        lines = table.splitlines()
        assert lines[0].startswith("|")
        assert "Rating" in lines[0]
        assert "Alpha" in lines[2]
        assert "55.2" in lines[2]
        assert "20%" in lines[2]
