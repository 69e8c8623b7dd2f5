"""Engine and session lifecycle for the room credential database."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///data/inspiradraw.db"

# Plain driver prefixes mapped to their async counterparts
_ASYNC_DRIVERS = {
    "sqlite:///": "sqlite+aiosqlite:///",
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


def resolve_database_url(url: str | None = None) -> str:
    """Pick the room database URL and switch it to an async driver.

    Args:
        url: Explicit URL. Falls back to DATABASE_URL, then a local SQLite file.

    Returns:
        A URL usable with create_async_engine.
    """
    url = url or os.environ.get("DATABASE_URL") or DEFAULT_DATABASE_URL
    for prefix, replacement in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return replacement + url.removeprefix(prefix)
    return url


class DatabaseManager:
    """Owns the async engine and session factory for the rooms table.

    Nothing touches the database or the filesystem until init() runs, so
    the manager can be built at app construction time.
    """

    def __init__(self, url: str | None = None) -> None:
        self.url = resolve_database_url(url)
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    async def init(self) -> None:
        """Open the engine and create the rooms table if it is missing."""
        from advanced_alchemy.base import UUIDAuditBase

        from inspiradraw.storage.db.models import RoomModel  # noqa: F401

        parsed = make_url(self.url)
        connect_args: dict[str, object] = {}
        if parsed.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            if parsed.database and parsed.database != ":memory:":
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_async_engine(
            self.url,
            echo=os.environ.get("DATABASE_ECHO", "").lower() == "true",
            connect_args=connect_args,
        )
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False, autoflush=False)

        async with self._engine.begin() as conn:
            await conn.run_sync(UUIDAuditBase.metadata.create_all)
        logger.info("Room database ready", backend=parsed.get_backend_name())

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessions = None

    @property
    def engine(self) -> AsyncEngine:
        """The live engine.

        Raises:
            RuntimeError: If init() has not run.
        """
        if self._engine is None:
            msg = "Room database is not initialized"
            raise RuntimeError(msg)
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session that commits on exit and rolls back on error."""
        if self._sessions is None:
            msg = "Room database is not initialized"
            raise RuntimeError(msg)

        async with self._sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
