"""Stats API controller for telemetry and analytics."""

from __future__ import annotations

from typing import Any, ClassVar

from litestar import Controller, get

from inspiradraw.rooms.registry import RoomRegistry
from inspiradraw.services.telemetry import TelemetryService


class StatsController(Controller):
    """Controller for stats and telemetry endpoints."""

    path = "/stats"
    tags: ClassVar[list[str]] = ["Stats"]

    @get("/")
    async def get_stats(self, telemetry: TelemetryService, registry: RoomRegistry) -> dict[str, Any]:
        """Get current server statistics.

        Returns:
            Cumulative telemetry counters plus the live room and member counts.
        """
        stats = telemetry.get_stats_dict()
        stats["live_rooms"] = registry.active_rooms
        stats["live_members"] = registry.total_members
        return stats
