"""CLI for Keep / Trade / Cut."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import pydantic
import structlog
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from keep_trade_cut import __version__
from keep_trade_cut.core.config import AppConfig, ItemSeed, load_config
from keep_trade_cut.core.errors import ConfigurationError, VotingError
from keep_trade_cut.ranking import create_rating_engine
from keep_trade_cut.services.match import Matchup, MatchupSelector
from keep_trade_cut.services.migration import import_legacy_votes, load_legacy_votes
from keep_trade_cut.services.reporting import build_rankings, format_rankings
from keep_trade_cut.services.storage import ReportStore, VoteStore
from keep_trade_cut.services.submission import VoteService, VotingSession

T = TypeVar("T")

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="keep-trade-cut",
    help="Keep / Trade / Cut - rate items from three-way preference ballots",
    add_completion=False,
)
console = Console()

ConfigArg = Annotated[Path, typer.Argument(help="Path to config YAML file")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"keep-trade-cut v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Keep / Trade / Cut CLI."""


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _run_with_store(
    config_path: Path,
    verbose: bool,
    action: Callable[[AppConfig, VoteStore], Awaitable[T]],
) -> T:
    """Load config, open the store, run an async action and report failures."""
    _configure_logging(verbose)
    try:
        config = load_config(config_path)

        async def _run() -> T:
            store = VoteStore(config)
            try:
                return await action(config, store)
            finally:
                await store.close()

        return asyncio.run(_run())

    except typer.Exit:
        raise
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except (ConfigurationError, VotingError) as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1) from e


@app.command()
def init(config_path: ConfigArg, verbose: VerboseOpt = False) -> None:
    """Create the database and add the items listed in the config."""

    async def _init(config: AppConfig, store: VoteStore) -> None:
        existing = {item.name for item in await store.get_items()}
        added = 0
        for seed in config.items:
            if seed.name in existing:
                continue
            await store.add_item(seed.name, seed.color)
            added += 1
        console.print(f"[green]Store ready:[/green] {store.paths.database_path}")
        console.print(f"  Items added: {added} (already present: {len(existing)})")

    _run_with_store(config_path, verbose, _init)


@app.command("add-item")
def add_item(
    config_path: ConfigArg,
    name: Annotated[str, typer.Argument(help="Display name")],
    color: Annotated[str, typer.Argument(help="Hex color, e.g. '#DC143C'")],
    verbose: VerboseOpt = False,
) -> None:
    """Add a single item with the base rating."""

    async def _add(_config: AppConfig, store: VoteStore) -> None:
        seed = ItemSeed(name=name, color=color)
        item = await store.add_item(seed.name, seed.color)
        console.print(f"[green]Added[/green] {item.name} ({item.color}) as {item.id}")

    _run_with_store(config_path, verbose, _add)


def _show_matchup(matchup: Matchup, config: AppConfig) -> None:
    engine = create_rating_engine(config)
    tier = "random" if matchup.tier is None else f"{matchup.tier:g}+"
    table = Table(title=f"Matchup (tier: {tier})")
    table.add_column("#", justify="right")
    table.add_column("Item")
    table.add_column("Color")
    table.add_column("Rating", justify="right")
    table.add_column("Confidence", justify="right")
    for index, item in enumerate(matchup.items, 1):
        rating = engine.base_rating if item.rating is None else item.rating
        table.add_row(
            str(index),
            item.name,
            f"[{item.color}]■[/] {item.color}",
            f"{rating:.1f}",
            f"{engine.confidence(item.total_votes):.0%}",
        )
    console.print(table)


def _prompt_choice(label: str, matchup: Matchup) -> str:
    index = typer.prompt(f"{label} which item? [1-3]", type=int)
    if not 1 <= index <= len(matchup.items):
        msg = f"Choose a number between 1 and {len(matchup.items)}, got {index}"
        raise VotingError(msg)
    return matchup.ids[index - 1]


@app.command()
def vote(
    config_path: ConfigArg,
    rounds: Annotated[int, typer.Option("--rounds", "-n", help="Number of matchups")] = 5,
    verbose: VerboseOpt = False,
) -> None:
    """Vote interactively: keep one, trade one and cut one of three items."""

    async def _vote(config: AppConfig, store: VoteStore) -> None:
        service = VoteService(config, store)
        selector = MatchupSelector(
            config.selector, base_rating=config.rating.base_rating, seed=config.seed
        )
        session = VotingSession(service, selector)

        for round_num in range(1, rounds + 1):
            matchup = await session.next_matchup()
            console.print(f"\n[bold]Round {round_num}/{rounds}[/bold]")
            _show_matchup(matchup, config)
            while True:
                try:
                    keep_id = _prompt_choice("Keep", matchup)
                    trade_id = _prompt_choice("Trade", matchup)
                    cut_id = _prompt_choice("Cut", matchup)
                    receipt = await session.vote(keep_id, trade_id, cut_id)
                    break
                except VotingError as e:
                    console.print(f"[red]{e}")

            names = {item.id: item.name for item in matchup.items}
            for item_id, (rating, total) in receipt.ratings.items():
                console.print(f"  {names[item_id]}: {rating:.2f} ({total} votes)")

        console.print("\n[bold green]Thanks for voting![/bold green]")

    _run_with_store(config_path, verbose, _vote)


@app.command()
def rankings(
    config_path: ConfigArg,
    export: Annotated[
        bool, typer.Option("--export", help="Write Markdown, CSV and JSON reports")
    ] = False,
    verbose: VerboseOpt = False,
) -> None:
    """Show items ranked by rating."""

    async def _rankings(config: AppConfig, store: VoteStore) -> None:
        items = await store.get_items()
        ballots = await store.get_all_ballots()
        rows = build_rankings(items, ballots, create_rating_engine(config))
        if not rows:
            console.print("[yellow]No items yet.[/yellow]")
            return
        console.print(format_rankings(rows))
        if export:
            paths = await ReportStore(store.paths).save_rankings(rows)
            for path in paths:
                console.print(f"Saved {path}")

    _run_with_store(config_path, verbose, _rankings)


@app.command()
def rebuild(
    config_path: ConfigArg,
    check: Annotated[
        bool, typer.Option("--check", help="Only report cached ratings that differ from a replay")
    ] = False,
    verbose: VerboseOpt = False,
) -> None:
    """Replay the ballot log and rewrite every cached rating."""

    async def _rebuild(config: AppConfig, store: VoteStore) -> None:
        service = VoteService(config, store)
        if check:
            drifts = await service.audit_ratings()
            if not drifts:
                console.print("[green]All cached ratings match the ballot log.[/green]")
                return
            for d in drifts:
                console.print(
                    f"[yellow]{d.item_id}[/yellow]: stored {d.stored_rating} "
                    f"({d.stored_votes} votes), replayed {d.replayed_rating:.4f} "
                    f"({d.replayed_votes} votes)"
                )
            raise typer.Exit(1)

        results = await service.rebuild_ratings()
        console.print(f"[green]Rebuilt {len(results)} ratings.[/green]")

    _run_with_store(config_path, verbose, _rebuild)


@app.command("import-votes")
def import_votes(
    config_path: ConfigArg,
    votes_path: Annotated[Path, typer.Argument(help="CSV or JSONL file of legacy votes")],
    verbose: VerboseOpt = False,
) -> None:
    """Import legacy votes with keep, trade and cut columns."""

    async def _import(config: AppConfig, store: VoteStore) -> None:
        votes = load_legacy_votes(votes_path)
        service = VoteService(config, store)
        results = await import_legacy_votes(service, votes)
        console.print(f"[green]Imported {len(votes)} votes.[/green]")
        console.print(f"  Ratings rebuilt: {len(results)}")

    _run_with_store(config_path, verbose, _import)


@app.command()
def validate(config_path: ConfigArg) -> None:
    """Validate a configuration file without running."""
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Base rating: {config.rating.base_rating}")
        console.print(f"  K-factor: {config.rating.k_factor}")
        console.print(f"  Tier width: {config.selector.tier_width}")
        console.print(f"  History size: {config.selector.history_size}")
        console.print(f"  Seed items: {len(config.items)}")
        console.print(f"  Output directory: {config.output_dir}")
        console.print(f"  Database: {config.database}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Keep / Trade / Cut[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Create the store and seed items")
    console.print("  uv run keep-trade-cut init config.yaml\n")

    console.print("  # Vote on ten matchups")
    console.print("  uv run keep-trade-cut vote config.yaml --rounds 10\n")

    console.print("  # Show and export rankings")
    console.print("  uv run keep-trade-cut rankings config.yaml --export\n")

    console.print("  # Check cached ratings against the ballot log")
    console.print("  uv run keep-trade-cut rebuild config.yaml --check\n")

    console.print("  # Import legacy votes")
    console.print("  uv run keep-trade-cut import-votes config.yaml votes.csv")


if __name__ == "__main__":
    app()
