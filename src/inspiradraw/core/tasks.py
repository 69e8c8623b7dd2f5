"""Task queue configuration and scheduled tasks using Huey.

Runs out-of-process jobs against the persisted room records:
- Room cleanup (records older than the retention period)

Live sessions are swept in-process by RoomJanitor instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from huey import SqliteHuey

logger = structlog.get_logger(__name__)

# Lazy Huey instance - only created when tasks extra is installed
_huey_instance: SqliteHuey | None = None


@dataclass
class TaskQueueSettings:
    """Task queue configuration settings.

    Attributes:
        enabled: Whether task queue is enabled.
        db_path: Path to Huey's SQLite database for task storage.
        immediate: Run tasks immediately (for testing).
        utc: Use UTC timezone for scheduling.
        room_retention_days: Age after which a persisted room is deleted.
    """

    enabled: bool = True
    db_path: str = "./huey_tasks.db"
    immediate: bool = False
    utc: bool = True
    room_retention_days: int = 30

    @classmethod
    def from_env(cls) -> TaskQueueSettings:
        """Create settings from environment variables.

        Environment variables:
            TASK_QUEUE_ENABLED: Set to "false" to disable task queue.
            TASK_QUEUE_DB_PATH: Path to Huey SQLite database.
            TASK_QUEUE_IMMEDIATE: Set to "true" for immediate execution (testing).
            ROOM_RETENTION_DAYS: Days a persisted room is kept (default: 30).

        Returns:
            TaskQueueSettings configured from environment.
        """
        return cls(
            enabled=os.environ.get("TASK_QUEUE_ENABLED", "true").lower() != "false",
            db_path=os.environ.get("TASK_QUEUE_DB_PATH", "./huey_tasks.db"),
            immediate=os.environ.get("TASK_QUEUE_IMMEDIATE", "false").lower() == "true",
            room_retention_days=int(os.environ.get("ROOM_RETENTION_DAYS", "30")),
        )


def get_huey(settings: TaskQueueSettings | None = None) -> SqliteHuey:
    """Get or create the Huey task queue instance.

    Args:
        settings: Task queue settings. If None, loads from environment.

    Returns:
        Configured SqliteHuey instance.

    Raises:
        ImportError: If huey is not installed (tasks extra not installed).
    """
    global _huey_instance  # noqa: PLW0603

    if _huey_instance is not None:
        return _huey_instance

    try:
        from huey import SqliteHuey
    except ImportError as e:
        msg = "Huey is not installed. Install with: pip install inspiradraw[tasks]"
        raise ImportError(msg) from e

    if settings is None:
        settings = TaskQueueSettings.from_env()

    db_path = Path(settings.db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _huey_instance = SqliteHuey(
        name="inspiradraw",
        filename=str(db_path),
        immediate=settings.immediate,
        utc=settings.utc,
    )

    return _huey_instance


# ============================================================================
# Scheduled Tasks
# ============================================================================


def register_tasks() -> None:
    """Register all scheduled tasks with Huey.

    This must be called after Huey is configured to register the periodic tasks.
    """
    huey = get_huey()

    from huey import crontab

    # Daily at 4 AM
    @huey.periodic_task(crontab(minute="0", hour="4"))
    def cleanup_old_rooms_task() -> dict[str, Any]:
        """Delete persisted rooms older than the retention period."""
        return run_cleanup_old_rooms()


# ============================================================================
# Task Implementations
# ============================================================================


def run_cleanup_old_rooms(retention_days: int | None = None, database_url: str | None = None) -> dict[str, Any]:
    """Delete persisted room records created before the retention cutoff.

    Args:
        retention_days: Override for ROOM_RETENTION_DAYS.
        database_url: Override for DATABASE_URL.

    Returns:
        Dict with cleanup results.
    """
    import asyncio

    from inspiradraw.exceptions import StoreUnavailableError

    if retention_days is None:
        retention_days = TaskQueueSettings.from_env().room_retention_days
    cutoff = datetime.now(UTC) - timedelta(days=retention_days)

    async def _cleanup() -> int:
        from inspiradraw.storage.db.setup import DatabaseManager
        from inspiradraw.storage.db.storage import DatabaseCredentialStore

        db = DatabaseManager(database_url)
        await db.init()
        try:
            return await DatabaseCredentialStore(db).delete_rooms_before(cutoff)
        finally:
            await db.close()

    try:
        deleted = asyncio.run(_cleanup())
    except StoreUnavailableError as e:
        logger.error("Room cleanup failed", error=str(e))
        deleted = 0

    logger.info("Room cleanup completed", deleted_rooms=deleted, retention_days=retention_days)

    return {
        "task": "cleanup_old_rooms",
        "deleted": deleted,
        "retention_days": retention_days,
        "timestamp": datetime.now(UTC).isoformat(),
    }


# ============================================================================
# On-Demand Tasks (can be called directly or queued)
# ============================================================================


def enqueue_room_cleanup() -> None:
    """Enqueue a room cleanup task for immediate execution."""
    huey = get_huey()

    @huey.task()
    def _cleanup_now() -> dict[str, Any]:
        return run_cleanup_old_rooms()

    _cleanup_now()
