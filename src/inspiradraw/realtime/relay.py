"""Routing of chat, drawing and sticky-note events between room members."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

import structlog

from inspiradraw.exceptions import StaleEventError
from inspiradraw.realtime.messages import (
    AddStickyNoteCommand,
    ChatCommand,
    ChatMessage,
    DrawEndCommand,
    DrawMoveCommand,
    DrawStartCommand,
    StickyNoteAddedMessage,
    UserDrawEndMessage,
    UserDrawMoveMessage,
    UserDrawStartMessage,
)

if TYPE_CHECKING:
    from inspiradraw.realtime.manager import ConnectionManager
    from inspiradraw.rooms.registry import RoomRegistry
    from inspiradraw.services.telemetry import TelemetryService

logger = structlog.get_logger(__name__)

RelayCommand = ChatCommand | DrawStartCommand | DrawMoveCommand | DrawEndCommand | AddStickyNoteCommand


class EventRelay:
    """Applies room events to member state and forwards them.

    Chat goes to the whole room including the sender. Drawing and sticky
    notes go to everyone else. Member state is updated before any send is
    awaited, so the next frame from the same connection always sees it.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        connections: ConnectionManager,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self._registry = registry
        self._connections = connections
        self._telemetry = telemetry

    async def handle(self, connection_id: str, command: RelayCommand) -> bool:
        """Relay one event from a connection.

        Events from a connection that is not a member of the named room are
        dropped, as are draw-move events outside a stroke.

        Args:
            connection_id: The sending connection.
            command: The decoded event.

        Returns:
            True if the event was relayed, False if it was dropped.
        """
        try:
            member = self._registry.require_member(command.room, connection_id)
        except StaleEventError:
            logger.debug("Dropped stale event", room_id=command.room, connection_id=connection_id)
            return False

        match command:
            case ChatCommand(room=room, message=text):
                await self._connections.broadcast(
                    self._registry.recipients(room),
                    ChatMessage(name=member.name, message=text, user_id=connection_id),
                )
                if self._telemetry:
                    self._telemetry.track_chat_message(room)

            case DrawStartCommand(room=room, x=x, y=y, color=color):
                member.is_drawing = True
                member.color = color
                await self._connections.broadcast(
                    self._registry.recipients(room, exclude=connection_id),
                    UserDrawStartMessage(x=x, y=y, color=color, user_id=connection_id),
                )

            case DrawMoveCommand(room=room, x=x, y=y):
                if not member.is_drawing:
                    logger.debug("Dropped draw-move outside a stroke", room_id=room, connection_id=connection_id)
                    return False
                await self._connections.broadcast(
                    self._registry.recipients(room, exclude=connection_id),
                    UserDrawMoveMessage(x=x, y=y, user_id=connection_id),
                )

            case DrawEndCommand(room=room):
                member.is_drawing = False
                await self._connections.broadcast(
                    self._registry.recipients(room, exclude=connection_id),
                    UserDrawEndMessage(user_id=connection_id),
                )
                if self._telemetry:
                    self._telemetry.track_stroke(room)

            case AddStickyNoteCommand(room=room, note=note):
                await self._connections.broadcast(
                    self._registry.recipients(room, exclude=connection_id),
                    StickyNoteAddedMessage(note=note, author=member.name),
                )
                if self._telemetry:
                    self._telemetry.track_sticky_note(room)

            case _:
                assert_never(command)

        return True
