"""Async access to SQLModel tables for the item and ballot repositories."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, TypeVar

from sqlmodel import Session, SQLModel

if TYPE_CHECKING:
    from sqlalchemy import Engine

ModelT = TypeVar("ModelT", bound=SQLModel)
R = TypeVar("R")


class AsyncRepository(Generic[ModelT]):
    """Run blocking DuckDB session work on worker threads.

    Reads and writes are split: ``_write`` commits once the callback returns,
    ``_read`` never commits. Sessions keep objects loaded after commit so rows
    can be handed back to async callers.
    """

    model: type[ModelT]

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    async def _read(self, fn: Callable[[Session], R]) -> R:
        def _run() -> R:
            with self._session() as session:
                return fn(session)

        return await asyncio.to_thread(_run)

    async def _write(self, fn: Callable[[Session], R]) -> R:
        def _run() -> R:
            with self._session() as session:
                result = fn(session)
                session.commit()
                return result

        return await asyncio.to_thread(_run)

    async def _get(self, key: str) -> ModelT | None:
        """Load one row of ``model`` by primary key."""
        return await self._read(lambda session: session.get(self.model, key))
