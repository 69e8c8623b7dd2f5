"""Real-time WebSocket module for inspiradraw.

This module provides the room WebSocket endpoint, connection management,
event relaying and presence tracking.
"""

from __future__ import annotations

from inspiradraw.realtime.handler import RoomWebSocketHandler, create_websocket_handler
from inspiradraw.realtime.manager import ConnectionManager
from inspiradraw.realtime.messages import InboundCommand, MessageType, OutboundMessage, parse_command
from inspiradraw.realtime.presence import PresenceService, RoomJanitor
from inspiradraw.realtime.relay import EventRelay

__all__ = [
    "ConnectionManager",
    "EventRelay",
    "InboundCommand",
    "MessageType",
    "OutboundMessage",
    "PresenceService",
    "RoomJanitor",
    "RoomWebSocketHandler",
    "create_websocket_handler",
    "parse_command",
]
