"""Tests for the command line interface."""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from keep_trade_cut import __version__
from keep_trade_cut.cli import app

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    data = {
        "output_dir": str(tmp_path / "data"),
        "seed": 7,
        "items": [
            {"name": "Crimson", "color": "#DC143C"},
            {"name": "Ocean", "color": "#0066CC"},
            {"name": "Forest", "color": "#228B22"},
        ],
    }
    path.write_text(yaml.dump(data))
    return path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_info():
    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0
    assert "keep-trade-cut vote" in result.output


def test_validate(config_path: Path):
    result = runner.invoke(app, ["validate", str(config_path)])
    assert result.exit_code == 0
    assert "Configuration is valid" in result.output
    assert "Seed items: 3" in result.output
    assert "Database: ktc.duckdb" in result.output
    assert not (config_path.parent / "data").exists()


def test_validate_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_init_is_idempotent(config_path: Path):
    first = runner.invoke(app, ["init", str(config_path)])
    assert first.exit_code == 0
    assert "Items added: 3" in first.output

    second = runner.invoke(app, ["init", str(config_path)])
    assert second.exit_code == 0
    assert "Items added: 0" in second.output


def test_add_item_rejects_bad_color(config_path: Path):
    result = runner.invoke(app, ["add-item", str(config_path), "Teal", "teal"])
    assert result.exit_code == 1
    assert "Invalid input" in result.output


def test_vote_then_rankings(config_path: Path):
    assert runner.invoke(app, ["init", str(config_path)]).exit_code == 0

    result = runner.invoke(app, ["vote", str(config_path), "--rounds", "2"], input="1\n2\n3\n" * 2)
    assert result.exit_code == 0, result.output
    assert "Thanks for voting" in result.output

    rankings = runner.invoke(app, ["rankings", str(config_path), "--export"])
    assert rankings.exit_code == 0
    assert "Crimson" in rankings.output
    assert (config_path.parent / "data" / "reports" / "leaderboard.csv").exists()

    check = runner.invoke(app, ["rebuild", str(config_path), "--check"])
    assert check.exit_code == 0
    assert "match the ballot log" in check.output


def test_vote_reprompts_on_duplicate(config_path: Path):
    assert runner.invoke(app, ["init", str(config_path)]).exit_code == 0

    result = runner.invoke(
        app, ["vote", str(config_path), "--rounds", "1"], input="1\n1\n2\n1\n2\n3\n"
    )
    assert result.exit_code == 0, result.output
    assert "Duplicate Selection" in result.output


def test_vote_needs_three_items(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"output_dir": str(tmp_path / "data")}))

    result = runner.invoke(app, ["vote", str(path)])
    assert result.exit_code == 1
    assert "Insufficient Items" in result.output


def test_import_votes(config_path: Path, tmp_path: Path):
    assert runner.invoke(app, ["init", str(config_path)]).exit_code == 0
    votes = tmp_path / "votes.csv"
    votes.write_text("keep,trade,cut,created_at\nghost,a,b,\n")

    result = runner.invoke(app, ["import-votes", str(config_path), str(votes)])
    assert result.exit_code == 0
    assert "Imported 1 votes" in result.output
