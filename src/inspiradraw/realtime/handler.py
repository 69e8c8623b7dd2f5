"""WebSocket handler for room sessions."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, assert_never

import structlog
from litestar import Router, WebSocket, websocket

from inspiradraw.config import TOKEN_COOKIE_NAME
from inspiradraw.exceptions import MalformedMessageError
from inspiradraw.realtime.messages import (
    AddStickyNoteCommand,
    AuthCommand,
    AuthFailedMessage,
    AuthSuccessMessage,
    ChatCommand,
    DrawEndCommand,
    DrawMoveCommand,
    DrawStartCommand,
    InboundCommand,
    parse_command,
)
from inspiradraw.rooms.models import Admission, Rejection

if TYPE_CHECKING:
    from inspiradraw.realtime.manager import ConnectionManager
    from inspiradraw.realtime.presence import PresenceService
    from inspiradraw.realtime.relay import EventRelay
    from inspiradraw.rooms.authenticator import SessionAuthenticator
    from inspiradraw.services.telemetry import TelemetryService

logger = structlog.get_logger(__name__)


class RoomWebSocketHandler:
    """Handler for room WebSocket connections.

    Each connection gets its own receive loop. Frames are decoded into
    typed commands and processed one at a time, so events from a single
    connection are relayed in the order they arrived.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        authenticator: SessionAuthenticator,
        relay: EventRelay,
        presence: PresenceService,
        telemetry: TelemetryService | None = None,
    ) -> None:
        """Initialize the WebSocket handler.

        Args:
            connection_manager: Owner of the open sockets.
            authenticator: Admits connections into rooms.
            relay: Forwards room events.
            presence: Announces joins and cleans up on disconnect.
            telemetry: Optional telemetry sink.
        """
        self._manager = connection_manager
        self._authenticator = authenticator
        self._relay = relay
        self._presence = presence
        self._telemetry = telemetry

    async def handle_connection(self, socket: WebSocket) -> None:
        """Serve one WebSocket connection until it closes.

        Args:
            socket: The WebSocket connection.
        """
        await socket.accept()
        connection_id = self._manager.register(socket)
        if self._telemetry:
            self._telemetry.track_connection_opened()

        try:
            await self._receive_loop(socket, connection_id)
        except Exception:
            logger.exception("WebSocket error", connection_id=connection_id)
        finally:
            await self._presence.disconnect(connection_id)
            self._manager.unregister(connection_id)
            if self._telemetry:
                self._telemetry.track_connection_closed()

    async def _receive_loop(self, socket: WebSocket, connection_id: str) -> None:
        """Main receive loop for WebSocket messages.

        Args:
            socket: The WebSocket connection.
            connection_id: The server-assigned connection id.
        """
        async for message in socket.iter_data():
            try:
                command = parse_command(json.loads(message))
            except (ValueError, MalformedMessageError) as e:
                logger.debug("Dropped malformed frame", connection_id=connection_id, error=str(e))
                continue

            try:
                await self._dispatch(socket, connection_id, command)
            except Exception:
                logger.exception(
                    "Error handling message",
                    message_type=type(command).__name__,
                    connection_id=connection_id,
                )

    async def _dispatch(self, socket: WebSocket, connection_id: str, command: InboundCommand) -> None:
        match command:
            case AuthCommand():
                await self._handle_auth(socket, connection_id, command)
            case ChatCommand() | DrawStartCommand() | DrawMoveCommand() | DrawEndCommand() | AddStickyNoteCommand():
                await self._relay.handle(connection_id, command)
            case _:
                assert_never(command)

    async def _handle_auth(self, socket: WebSocket, connection_id: str, command: AuthCommand) -> None:
        """Authenticate a connection and announce it to the room.

        The pending-auth token may come from the frame or from the cookie
        set by the HTTP verification endpoint.
        """
        token = command.token or socket.cookies.get(TOKEN_COOKIE_NAME)
        result = await self._authenticator.authenticate(
            connection_id,
            command.room,
            password=command.password,
            name=command.name,
            token=token,
        )

        match result:
            case Admission():
                await self._manager.send(
                    connection_id,
                    AuthSuccessMessage(room=result.room_id, user_id=connection_id, users=result.users),
                )
                await self._presence.announce_join(connection_id, result)
                if self._telemetry:
                    self._telemetry.track_admission(result.room_id)
            case Rejection():
                await self._manager.send(connection_id, AuthFailedMessage(reason=result.reason))
                if self._telemetry:
                    self._telemetry.track_rejection(result.room_id, result.reason.value)
            case _:
                assert_never(result)


def create_websocket_handler(
    path: str,
    connection_manager: ConnectionManager,
    authenticator: SessionAuthenticator,
    relay: EventRelay,
    presence: PresenceService,
    telemetry: TelemetryService | None = None,
) -> Router:
    """Create a WebSocket router for room sessions.

    Args:
        path: Path of the WebSocket endpoint.
        connection_manager: The connection manager instance.
        authenticator: The session authenticator.
        relay: The event relay.
        presence: The presence service.
        telemetry: Optional telemetry sink.

    Returns:
        A Litestar Router with the WebSocket handler.
    """
    handler = RoomWebSocketHandler(connection_manager, authenticator, relay, presence, telemetry)

    @websocket(path="/")
    async def room_websocket(socket: WebSocket) -> None:
        """WebSocket endpoint for room sessions.

        Args:
            socket: The WebSocket connection.
        """
        await handler.handle_connection(socket)

    return Router(path=path, route_handlers=[room_websocket], tags=["WebSocket"])
