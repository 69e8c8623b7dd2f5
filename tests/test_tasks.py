"""Tests for background task implementations."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import update

from inspiradraw.core.tasks import TaskQueueSettings, run_cleanup_old_rooms
from inspiradraw.storage.db.models import RoomModel
from inspiradraw.storage.db.setup import DatabaseManager
from inspiradraw.storage.db.storage import DatabaseCredentialStore


async def _seed(database_url: str) -> None:
    db = DatabaseManager(database_url)
    await db.init()
    try:
        store = DatabaseCredentialStore(db)
        await store.create_room("old-room", "hash")
        await store.create_room("new-room", None)
        async with db.session() as session:
            await session.execute(
                update(RoomModel)
                .where(RoomModel.room_id == "old-room")
                .values(created_at=datetime.now(UTC) - timedelta(days=45))
            )
    finally:
        await db.close()


async def _remaining(database_url: str) -> list[str]:
    db = DatabaseManager(database_url)
    await db.init()
    try:
        return [record.room_id for record in await DatabaseCredentialStore(db).list_rooms()]
    finally:
        await db.close()


class TestTaskQueueSettings:
    """Tests for task queue settings."""

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test reading settings from the environment."""
        monkeypatch.setenv("TASK_QUEUE_ENABLED", "false")
        monkeypatch.setenv("ROOM_RETENTION_DAYS", "7")

        settings = TaskQueueSettings.from_env()

        assert settings.enabled is False
        assert settings.room_retention_days == 7


class TestCleanupOldRooms:
    """Tests for the persisted room cleanup."""

    def test_deletes_only_expired_rooms(self, tmp_path: Path) -> None:
        """Test that rooms past the retention window are removed."""
        database_url = f"sqlite+aiosqlite:///{tmp_path}/tasks.db"
        asyncio.run(_seed(database_url))

        result = run_cleanup_old_rooms(retention_days=30, database_url=database_url)

        assert result["task"] == "cleanup_old_rooms"
        assert result["deleted"] == 1
        assert result["retention_days"] == 30
        assert asyncio.run(_remaining(database_url)) == ["new-room"]

    def test_retention_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the retention period defaults to ROOM_RETENTION_DAYS."""
        monkeypatch.setenv("ROOM_RETENTION_DAYS", "90")
        database_url = f"sqlite+aiosqlite:///{tmp_path}/tasks.db"
        asyncio.run(_seed(database_url))

        result = run_cleanup_old_rooms(database_url=database_url)

        assert result["retention_days"] == 90
        assert result["deleted"] == 0
