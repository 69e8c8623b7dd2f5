"""Business logic services for inspiradraw."""

from inspiradraw.services.rooms import RoomService, RoomStatus, VerifyResult
from inspiradraw.services.telemetry import TelemetryService, TelemetryStats

__all__ = ["RoomService", "RoomStatus", "TelemetryService", "TelemetryStats", "VerifyResult"]
