"""Tests for DuckDB-backed vote storage."""

import json
import tempfile
from pathlib import Path

import pytest

from keep_trade_cut.core.config import AppConfig
from keep_trade_cut.core.errors import UnknownItemError
from keep_trade_cut.models import Item
from keep_trade_cut.ranking import RatingEngine
from keep_trade_cut.services.reporting import build_rankings
from keep_trade_cut.services.storage import BallotStore, ReportStore, VoteStore
from keep_trade_cut.services.submission import VoteService, build_ballot_entries


@pytest.fixture
async def store():
    with tempfile.TemporaryDirectory() as tmpdir:
        vote_store = VoteStore(AppConfig(output_dir=str(Path(tmpdir) / "data")))
        yield vote_store
        await vote_store.close()


class TestStoragePaths:
    """Tests for storage file locations."""

    async def test_database_under_output_dir(self, store):
        """Test the database file lives in the configured output directory."""
        expected = Path(store.config.output_dir) / store.config.database
        assert store.paths.database_path == expected
        assert expected.exists()
        assert store.paths.ballot_log_path.parent == expected.parent


class TestItems:
    """Tests for item persistence."""

    async def test_add_item_defaults(self, store):
        """Test new items start at the base rating with no votes."""
        item = await store.add_item("Crimson", "#DC143C")

        assert item.id
        assert item.rating == 50.0
        assert item.total_votes == 0

    async def test_add_item_with_id(self, store):
        """Test an explicit id is kept."""
        item = await store.add_item("Teal", "#008080", item_id="teal")
        fetched = await store.get_item("teal")
        assert fetched.name == "Teal"
        assert item.id == "teal"

    async def test_get_items_ordered_by_name(self, store):
        """Test items are listed alphabetically."""
        for name in ("Olive", "Amber", "Navy"):
            await store.add_item(name, "#000000")

        assert [item.name for item in await store.get_items()] == ["Amber", "Navy", "Olive"]

    async def test_unknown_item(self, store):
        """Test looking up a missing item raises."""
        with pytest.raises(UnknownItemError, match="missing"):
            await store.get_item("missing")

    async def test_persist_rating(self, store):
        """Test cached ratings are stored at full precision."""
        item = await store.add_item("Crimson", "#DC143C")
        await store.persist_rating(item.id, 49.77123456789, 3)
        await store.persist_rating(item.id, 49.77123456789, 3)

        fetched = await store.get_item(item.id)
        assert fetched.rating == 49.77123456789
        assert fetched.total_votes == 3

    async def test_persist_rating_unknown_item(self, store):
        """Test persisting a rating for a missing item raises."""
        with pytest.raises(UnknownItemError):
            await store.persist_rating("missing", 51.0, 2)

    async def test_failed_write_is_not_committed(self, store):
        """Test a write that raises leaves the table unchanged."""

        def _add_then_fail(session):
            session.add(Item(name="Ghost", color="#000000"))
            raise RuntimeError("write failed")

        with pytest.raises(RuntimeError, match="write failed"):
            await store.items._write(_add_then_fail)
        assert await store.get_items() == []


class TestBallots:
    """Tests for the ballot log."""

    async def test_satisfies_protocol(self, store):
        """Test the DuckDB store matches the storage contract."""
        assert isinstance(store, BallotStore)

    async def test_append_and_query(self, store):
        """Test appended ballots are returned per item in timestamp order."""
        first = build_ballot_entries("a", "b", "c", vote_id="v1")
        second = build_ballot_entries("c", "a", "b", vote_id="v2")
        await store.append_ballots(first)
        await store.append_ballots(second)

        ballots = await store.get_ballots_for_item("a")
        assert [(b.vote_id, b.outcome) for b in ballots] == [("v1", "keep"), ("v2", "trade")]
        assert await store.count_ballots() == 6
        assert len(await store.get_all_ballots()) == 6

    async def test_empty_item_history(self, store):
        """Test an item without ballots has an empty history."""
        assert await store.get_ballots_for_item("nobody") == []
        assert await store.count_ballots() == 0

    async def test_jsonl_backup(self, store):
        """Test each appended ballot is also written to the JSONL backup."""
        await store.append_ballots(build_ballot_entries("a", "b", "c", vote_id="v1"))

        lines = store.paths.ballot_log_path.read_text(encoding="utf-8").splitlines()
        records = [json.loads(line) for line in lines]
        assert [r["outcome"] for r in records] == ["keep", "trade", "cut"]
        assert {r["vote_id"] for r in records} == {"v1"}


class TestVoteFlow:
    """End-to-end voting against the database."""

    async def test_votes_update_cached_ratings(self, store):
        """Test a vote persists ratings that equal the receipt."""
        ids = [(await store.add_item(name, "#123456")).id for name in ("A", "B", "C")]
        service = VoteService(store.config, store)

        await service.submit_vote(tuple(ids), ids[0], ids[1], ids[2])
        receipt = await service.submit_vote(tuple(ids), ids[0], ids[1], ids[2])

        keep_item = await store.get_item(ids[0])
        assert keep_item.rating == pytest.approx(50.1)
        assert keep_item.total_votes == 2
        assert receipt.ratings[ids[0]] == (keep_item.rating, 2)
        assert (await store.get_item(ids[2])).rating == pytest.approx(49.9)
        assert await service.audit_ratings() == []

    async def test_rebuild_after_reopen(self, store):
        """Test ratings are rebuilt from the log by a fresh store."""
        ids = [(await store.add_item(name, "#123456")).id for name in ("A", "B", "C")]
        service = VoteService(store.config, store)
        for _ in range(4):
            await service.submit_vote(tuple(ids), ids[0], ids[1], ids[2])
        expected = (await store.get_item(ids[0])).rating

        await store.persist_rating(ids[0], 0.0, 0)
        reopened = VoteStore(store.config)
        try:
            results = await VoteService(reopened.config, reopened).rebuild_ratings()
            assert results[ids[0]] == (expected, 4)
        finally:
            await reopened.close()


class TestReportStore:
    """Tests for rankings export."""

    async def test_save_rankings(self, store):
        """Test rankings are written as Markdown, CSV and JSON."""
        await store.add_item("Crimson", "#DC143C")
        rows = build_rankings(await store.get_items(), [], RatingEngine())
        paths = await ReportStore(store.paths).save_rankings(rows)

        assert [p.name for p in paths] == [
            "leaderboard.md",
            "leaderboard.csv",
            "leaderboard.json",
        ]
        assert all(p.parent.name == "reports" for p in paths)
        assert "Crimson" in paths[0].read_text(encoding="utf-8")
        data = json.loads(paths[2].read_text(encoding="utf-8"))
        assert data[0]["rank"] == 1
        assert data[0]["rating"] == 50.0
