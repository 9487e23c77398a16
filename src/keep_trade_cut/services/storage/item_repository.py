"""Database persistence for items and their cached ratings."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from keep_trade_cut.core.errors import UnknownItemError
from keep_trade_cut.models import Item

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class ItemRepository(AsyncRepository[Item]):
    """Persist and query items."""

    model = Item

    def __init__(self, engine: Engine, base_rating: float = 50.0) -> None:
        super().__init__(engine)
        self._base_rating = base_rating

    async def add_item(self, name: str, color: str, item_id: str | None = None) -> Item:
        """Create an item with the base rating and no votes."""
        item = Item(name=name, color=color, rating=self._base_rating, total_votes=0)
        if item_id is not None:
            item.id = item_id

        def _save(session: Session) -> Item:
            session.add(item)
            return item

        saved = await self._write(_save)
        logger.info("item_added", item_id=saved.id, name=saved.name)
        return saved

    async def get_items(self) -> list[Item]:
        """Get every item, ordered by name."""

        def _get(session: Session) -> list[Item]:
            statement = select(Item).order_by(col(Item.name), col(Item.id))
            return list(session.exec(statement).all())

        return await self._read(_get)

    async def get_item(self, item_id: str) -> Item:
        """Get a single item.

        Raises:
            UnknownItemError: If no item has this id.
        """
        item = await self._get(item_id)
        if item is None:
            raise UnknownItemError(item_id)
        return item

    async def persist_rating(self, item_id: str, rating: float, total_votes: int) -> None:
        """Store a recomputed rating. Writing the same values twice is harmless.

        Raises:
            UnknownItemError: If no item has this id.
        """

        def _save(session: Session) -> bool:
            item = session.get(Item, item_id)
            if item is None:
                return False
            item.rating = rating
            item.total_votes = total_votes
            item.updated_at = datetime.now(UTC)
            session.add(item)
            return True

        if not await self._write(_save):
            raise UnknownItemError(item_id)
