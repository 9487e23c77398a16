"""Database persistence for the append-only ballot log."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlmodel import Session, col, func, select

from keep_trade_cut.models import BallotEntry

from .paths import StoragePaths
from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class BallotRepository(AsyncRepository[BallotEntry]):
    """Append and query ballot entries."""

    model = BallotEntry

    def __init__(self, engine: Engine, paths: StoragePaths) -> None:
        super().__init__(engine)
        self._paths = paths

    async def append_ballots(self, entries: Sequence[BallotEntry]) -> None:
        """Append ballot entries to the database and the JSONL backup."""
        records = [entry.model_dump() for entry in entries]

        def _db_save(session: Session) -> None:
            session.add_all(list(entries))

        await self._write(_db_save)

        def _save_jsonl() -> None:
            with self._paths.ballot_log_path.open("a", encoding="utf-8") as f:
                for record in records:
                    f.write(json.dumps(record, default=str) + "\n")

        await asyncio.to_thread(_save_jsonl)

    async def get_ballots_for_item(self, item_id: str) -> list[BallotEntry]:
        """Get an item's ballots in replay order (timestamp, then id)."""

        def _get(session: Session) -> list[BallotEntry]:
            statement = (
                select(BallotEntry)
                .where(BallotEntry.item_id == item_id)
                .order_by(col(BallotEntry.created_at), col(BallotEntry.id))
            )
            return list(session.exec(statement).all())

        return await self._read(_get)

    async def get_all_ballots(self) -> list[BallotEntry]:
        """Get the whole ballot log in replay order."""

        def _get(session: Session) -> list[BallotEntry]:
            statement = select(BallotEntry).order_by(
                col(BallotEntry.created_at), col(BallotEntry.id)
            )
            return list(session.exec(statement).all())

        return await self._read(_get)

    async def count_ballots(self) -> int:
        """Number of entries in the ballot log."""

        def _count(session: Session) -> int:
            return session.exec(select(func.count()).select_from(BallotEntry)).one()

        return await self._read(_count)
