"""Join announcements, disconnect cleanup and periodic sweeps."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

from inspiradraw.config import RealtimeSettings
from inspiradraw.realtime.messages import UserConnectedMessage, UserDisconnectedMessage

if TYPE_CHECKING:
    from collections.abc import Callable

    from inspiradraw.realtime.manager import ConnectionManager
    from inspiradraw.rooms.models import Admission
    from inspiradraw.rooms.registry import RoomRegistry
    from inspiradraw.rooms.tokens import PendingAuthStore
    from inspiradraw.services.telemetry import TelemetryService

logger = structlog.get_logger(__name__)


class PresenceService:
    """Keeps peers informed about who joins and leaves a room."""

    def __init__(
        self,
        registry: RoomRegistry,
        connections: ConnectionManager,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self._registry = registry
        self._connections = connections
        self._telemetry = telemetry

    async def announce_join(self, connection_id: str, admission: Admission) -> None:
        """Tell the other members of a room that a connection joined."""
        await self._connections.broadcast(
            self._registry.recipients(admission.room_id, exclude=connection_id),
            UserConnectedMessage(name=admission.member.name, user_id=connection_id, users=admission.users),
        )

    async def disconnect(self, connection_id: str) -> list[str]:
        """Remove a closed connection from every room it joined.

        All registry changes happen before the first send is awaited, so
        no other handler can observe a half-removed connection.

        Args:
            connection_id: The closed connection.

        Returns:
            Ids of the rooms the connection was removed from.
        """
        departures: list[tuple[str, UserDisconnectedMessage, list[str]]] = []
        for room_id in self._registry.rooms_for(connection_id):
            member = self._registry.remove_member(room_id, connection_id)
            if member is None:
                continue

            if self._registry.remove_if_empty(room_id):
                if self._telemetry:
                    self._telemetry.track_room_closed(room_id)
                continue

            departures.append(
                (
                    room_id,
                    UserDisconnectedMessage(name=member.name, user_id=connection_id),
                    self._registry.recipients(room_id),
                )
            )

        for _room_id, message, recipients in departures:
            await self._connections.broadcast(recipients, message)

        return [room_id for room_id, _, _ in departures]


class RoomJanitor:
    """Runs the periodic token purge and empty-room sweep on the event loop.

    Usage:
        janitor = RoomJanitor(registry, tokens, settings)
        await janitor.start()
        ...
        await janitor.stop()
    """

    def __init__(
        self,
        registry: RoomRegistry,
        tokens: PendingAuthStore,
        settings: RealtimeSettings | None = None,
    ) -> None:
        self._registry = registry
        self._tokens = tokens
        self._settings = settings or RealtimeSettings()
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        """Check whether the sweep tasks are scheduled."""
        return bool(self._tasks)

    async def start(self) -> None:
        """Schedule the sweep tasks. Calling it twice is a no-op."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._run_every(self._settings.token_sweep_interval, self.purge_tokens)),
            asyncio.create_task(self._run_every(self._settings.room_sweep_interval, self.sweep_rooms)),
        ]
        logger.info(
            "Room janitor started",
            token_sweep_interval=self._settings.token_sweep_interval,
            room_sweep_interval=self._settings.room_sweep_interval,
        )

    async def stop(self) -> None:
        """Cancel the sweep tasks and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Room janitor stopped")

    def purge_tokens(self) -> int:
        """Drop expired pending-auth tokens."""
        removed = self._tokens.purge_expired()
        if removed:
            logger.debug("Purged expired tokens", removed=removed)
        return removed

    def sweep_rooms(self) -> list[str]:
        """Drop empty rooms that outlived the retention window."""
        return self._registry.sweep(timedelta(seconds=self._settings.room_retention_seconds))

    async def _run_every(self, interval: float, job: Callable[[], object]) -> None:
        try:
            while True:
                await asyncio.sleep(interval)
                try:
                    job()
                except Exception:
                    logger.exception("Periodic sweep failed")
        except asyncio.CancelledError:
            pass
