"""Unified vote storage layer backed by DuckDB."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import structlog
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

from keep_trade_cut.core.config import AppConfig
from keep_trade_cut.models import BallotEntry, Item

from .ballot_repository import BallotRepository
from .item_repository import ItemRepository
from .paths import StoragePaths

logger = structlog.get_logger()


class VoteStore:
    """Persistence layer for items and the ballot log.

    Handles:
    - SQLModel-based storage for items and ballot entries (DuckDB)
    - JSONL backup of the ballot log
    """

    def __init__(self, config: AppConfig) -> None:
        """Initialize vote store.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.paths = StoragePaths(Path(config.output_dir), config.database)
        self.base_dir = self.paths.ensure_base_dir()
        self._engine = None
        self._init_db()
        self.items = ItemRepository(self._engine, base_rating=config.rating.base_rating)
        self.ballots = BallotRepository(self._engine, self.paths)

    def _init_db(self) -> None:
        """Initialize DuckDB database and create tables."""
        db_url = f"duckdb:///{self.paths.database_path}"
        # Use NullPool to avoid connection pooling issues on Windows
        self._engine = create_engine(db_url, poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine)
        logger.info("store_init", path=str(self.paths.database_path))

    # ==================== Item operations ====================

    async def add_item(self, name: str, color: str, item_id: str | None = None) -> Item:
        return await self.items.add_item(name, color, item_id)

    async def get_items(self) -> list[Item]:
        return await self.items.get_items()

    async def get_item(self, item_id: str) -> Item:
        return await self.items.get_item(item_id)

    async def persist_rating(self, item_id: str, rating: float, total_votes: int) -> None:
        await self.items.persist_rating(item_id, rating, total_votes)

    # ==================== Ballot operations ====================

    async def append_ballots(self, entries: Sequence[BallotEntry]) -> None:
        await self.ballots.append_ballots(entries)

    async def get_ballots_for_item(self, item_id: str) -> list[BallotEntry]:
        return await self.ballots.get_ballots_for_item(item_id)

    async def get_all_ballots(self) -> list[BallotEntry]:
        return await self.ballots.get_all_ballots()

    async def count_ballots(self) -> int:
        return await self.ballots.count_ballots()

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine:
            self._engine.dispose()
