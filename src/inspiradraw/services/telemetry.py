"""Telemetry and analytics service for inspiradraw.

Tracks connections, room admissions, and relayed events.
Can optionally forward events to Sentry or PostHog.
"""

from __future__ import annotations

import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger(__name__)


@dataclass
class TelemetryStats:
    """Current telemetry statistics snapshot."""

    # Active counts
    active_websocket_connections: int = 0

    # Cumulative counts (since server start)
    total_connections: int = 0
    total_admissions: int = 0
    total_rejections: int = 0
    rejections_by_reason: dict[str, int] = field(default_factory=dict)
    total_rooms_created: int = 0
    total_rooms_closed: int = 0
    total_chat_messages: int = 0
    total_strokes: int = 0
    total_sticky_notes: int = 0

    # Recent activity (last 5 minutes)
    recent_admissions: int = 0
    recent_chat_messages: int = 0

    # Server info
    uptime_seconds: float = 0.0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class TelemetryService:
    """Service for tracking and reporting telemetry data.

    Usage:
        telemetry = TelemetryService()

        telemetry.track_connection_opened()
        telemetry.track_admission(room_id)
        telemetry.track_chat_message(room_id)

        stats = telemetry.get_stats()
    """

    def __init__(self) -> None:
        """Initialize the telemetry service."""
        self._started_at = datetime.now(UTC)
        self._stats = TelemetryStats(started_at=self._started_at)
        self._rejections: Counter[str] = Counter()

        self._recent_events: list[tuple[datetime, str]] = []
        self._recent_window = timedelta(minutes=5)

        self._sentry_enabled = False
        self._posthog_enabled = False
        self._callbacks: list[Callable[[str, dict[str, Any]], None]] = []

        self._init_integrations()

    def _init_integrations(self) -> None:
        """Initialize external service integrations."""
        sentry_dsn = os.environ.get("SENTRY_DSN")
        if sentry_dsn:
            try:
                import sentry_sdk

                sentry_sdk.init(
                    dsn=sentry_dsn,
                    traces_sample_rate=float(os.environ.get("SENTRY_TRACES_RATE", "0.1")),
                    environment=os.environ.get("ENVIRONMENT", "development"),
                )
                self._sentry_enabled = True
                logger.info("Sentry integration enabled")
            except ImportError:
                logger.debug("Sentry SDK not installed, skipping integration")

        posthog_key = os.environ.get("POSTHOG_API_KEY")
        if posthog_key:
            try:
                import posthog

                posthog.project_api_key = posthog_key
                posthog.host = os.environ.get("POSTHOG_HOST", "https://app.posthog.com")
                self._posthog_enabled = True
                logger.info("PostHog integration enabled")
            except ImportError:
                logger.debug("PostHog SDK not installed, skipping integration")

    def add_callback(self, callback: Callable[[str, dict[str, Any]], None]) -> None:
        """Add a callback for telemetry events.

        Args:
            callback: Function called with (event_name, event_data) for each event.
        """
        self._callbacks.append(callback)

    def _emit_event(self, event: str, data: dict[str, Any]) -> None:
        """Emit an event to all integrations and callbacks."""
        self._recent_events.append((datetime.now(UTC), event))
        self._cleanup_recent_events()

        logger.debug("Telemetry event", telemetry_event=event, **data)

        if self._posthog_enabled:
            try:
                import posthog

                posthog.capture(data.get("room_id") or "server", event, data)
            except Exception as e:  # noqa: BLE001
                logger.debug("PostHog capture failed", error=str(e))

        for callback in self._callbacks:
            try:
                callback(event, data)
            except Exception as e:  # noqa: BLE001
                logger.debug("Telemetry callback failed", error=str(e))

    def _cleanup_recent_events(self) -> None:
        cutoff = datetime.now(UTC) - self._recent_window
        self._recent_events = [(ts, ev) for ts, ev in self._recent_events if ts > cutoff]

    # === Connection Tracking ===

    def track_connection_opened(self) -> None:
        """Track a new WebSocket connection."""
        self._stats.active_websocket_connections += 1
        self._stats.total_connections += 1
        self._emit_event("connection_opened", {})

    def track_connection_closed(self) -> None:
        """Track a WebSocket connection closing."""
        self._stats.active_websocket_connections = max(0, self._stats.active_websocket_connections - 1)
        self._emit_event("connection_closed", {})

    # === Room Tracking ===

    def track_room_created(self, room_id: str) -> None:
        """Track a new room persisted through verification or creation."""
        self._stats.total_rooms_created += 1
        self._emit_event("room_created", {"room_id": room_id})

    def track_room_closed(self, room_id: str) -> None:
        """Track a live room session ending."""
        self._stats.total_rooms_closed += 1
        self._emit_event("room_closed", {"room_id": room_id})

    def track_admission(self, room_id: str) -> None:
        """Track a connection admitted into a room."""
        self._stats.total_admissions += 1
        self._emit_event("admission", {"room_id": room_id})

    def track_rejection(self, room_id: str | None, reason: str) -> None:
        """Track a rejected authentication attempt."""
        self._stats.total_rejections += 1
        self._rejections[reason] += 1
        self._emit_event("rejection", {"room_id": room_id, "reason": reason})

    # === Relay Tracking ===

    def track_chat_message(self, room_id: str) -> None:
        """Track a relayed chat message."""
        self._stats.total_chat_messages += 1
        self._emit_event("chat_message", {"room_id": room_id})

    def track_stroke(self, room_id: str) -> None:
        """Track a completed stroke (draw-end)."""
        self._stats.total_strokes += 1
        self._emit_event("stroke", {"room_id": room_id})

    def track_sticky_note(self, room_id: str) -> None:
        """Track a relayed sticky note."""
        self._stats.total_sticky_notes += 1
        self._emit_event("sticky_note", {"room_id": room_id})

    # === Stats API ===

    def get_stats(self) -> TelemetryStats:
        """Get current telemetry statistics.

        Returns:
            Current stats snapshot.
        """
        self._cleanup_recent_events()

        now = datetime.now(UTC)
        self._stats.recent_admissions = sum(1 for _, ev in self._recent_events if ev == "admission")
        self._stats.recent_chat_messages = sum(1 for _, ev in self._recent_events if ev == "chat_message")
        self._stats.rejections_by_reason = dict(self._rejections)
        self._stats.uptime_seconds = (now - self._started_at).total_seconds()

        return self._stats

    def get_stats_dict(self) -> dict[str, Any]:
        """Get stats as a dictionary for JSON serialization."""
        stats = self.get_stats()
        return {
            "active_websocket_connections": stats.active_websocket_connections,
            "total_connections": stats.total_connections,
            "total_admissions": stats.total_admissions,
            "total_rejections": stats.total_rejections,
            "rejections_by_reason": stats.rejections_by_reason,
            "total_rooms_created": stats.total_rooms_created,
            "total_rooms_closed": stats.total_rooms_closed,
            "total_chat_messages": stats.total_chat_messages,
            "total_strokes": stats.total_strokes,
            "total_sticky_notes": stats.total_sticky_notes,
            "recent_admissions": stats.recent_admissions,
            "recent_chat_messages": stats.recent_chat_messages,
            "uptime_seconds": stats.uptime_seconds,
            "started_at": stats.started_at.isoformat(),
        }
