"""Health check endpoints for inspiradraw.

Provides /health and /ready endpoints for container orchestration
and load balancer health checks.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from litestar import Controller, get
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from inspiradraw.rooms.registry import RoomRegistry

if TYPE_CHECKING:
    from litestar import Request


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of an individual component."""

    name: str
    status: HealthStatus
    message: str | None = None
    latency_ms: float | None = None


@dataclass
class HealthResponse:
    """Health check response."""

    status: HealthStatus
    version: str = "0.1.0"
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    components: list[ComponentHealth] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "version": self.version,
            "timestamp": self.timestamp,
            "components": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                }
                for c in self.components
            ],
        }


class HealthController(Controller):
    """Liveness and readiness probes."""

    path = ""
    include_in_schema: ClassVar[bool] = True
    tags: ClassVar[list[str]] = ["Health"]

    @get("/health")
    async def health(self, request: Request, registry: RoomRegistry) -> dict[str, Any]:
        """Liveness probe endpoint.

        Returns:
            Overall status with the room registry and database components.
        """
        components = [
            ComponentHealth(
                name="rooms",
                status=HealthStatus.HEALTHY,
                message=f"{registry.active_rooms} live rooms, {registry.total_members} members",
            )
        ]

        db_health = await self._check_database(request)
        if db_health:
            components.append(db_health)

        statuses = [c.status for c in components]
        if HealthStatus.UNHEALTHY in statuses:
            overall_status = HealthStatus.UNHEALTHY
        elif HealthStatus.DEGRADED in statuses:
            overall_status = HealthStatus.DEGRADED
        else:
            overall_status = HealthStatus.HEALTHY

        return HealthResponse(status=overall_status, components=components).to_dict()

    @get("/ready")
    async def ready(self, request: Request) -> dict[str, Any]:
        """Readiness probe endpoint.

        Returns:
            Whether every dependency answered, with individual check results.
        """
        checks: dict[str, bool] = {"application": True}

        db_health = await self._check_database(request)
        if db_health is not None:
            checks["database"] = db_health.status == HealthStatus.HEALTHY

        return {
            "ready": all(checks.values()),
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": checks,
        }

    async def _check_database(self, request: Request) -> ComponentHealth | None:
        """Ping the database when the app runs on the database store."""
        db_manager = getattr(request.app.state, "db_manager", None)
        if db_manager is None:
            return None

        start = time.perf_counter()
        try:
            async with db_manager.session() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, RuntimeError) as e:
            return ComponentHealth(
                name="database",
                status=HealthStatus.UNHEALTHY,
                message=f"Database error: {e!s}",
            )

        return ComponentHealth(
            name="database",
            status=HealthStatus.HEALTHY,
            message="Database connection successful",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
