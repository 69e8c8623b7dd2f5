"""Connection manager for WebSocket sessions."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterable

    from litestar import WebSocket

    from inspiradraw.realtime.messages import OutboundMessage

logger = structlog.get_logger(__name__)


class ConnectionManager:
    """Owns the connection-id to WebSocket mapping and performs sends.

    Room membership lives in the RoomRegistry. This class only knows which
    socket belongs to which connection id, so a relay can address a list
    of ids returned by the registry.
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        self._sockets: dict[str, WebSocket] = {}

    def register(self, websocket: WebSocket) -> str:
        """Track a newly accepted socket.

        Args:
            websocket: The accepted WebSocket.

        Returns:
            The server-assigned connection id.
        """
        connection_id = uuid4().hex
        self._sockets[connection_id] = websocket
        logger.info("Connection opened", connection_id=connection_id, total_connections=len(self._sockets))
        return connection_id

    def unregister(self, connection_id: str) -> None:
        """Forget a socket after it closed.

        Args:
            connection_id: The closed connection.
        """
        if self._sockets.pop(connection_id, None) is not None:
            logger.info("Connection closed", connection_id=connection_id, total_connections=len(self._sockets))

    async def send(self, connection_id: str, message: OutboundMessage) -> bool:
        """Send a message to a single connection.

        Args:
            connection_id: The target connection.
            message: The message to send.

        Returns:
            True if sent successfully, False otherwise.
        """
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            return False
        return await self._send_text(connection_id, websocket, json.dumps(message.to_dict()))

    async def broadcast(self, connection_ids: Iterable[str], message: OutboundMessage) -> None:
        """Send a message to several connections concurrently.

        A failing socket is logged and never stops delivery to the others.

        Args:
            connection_ids: The target connections.
            message: The message to send.
        """
        json_message = json.dumps(message.to_dict())

        tasks = []
        for connection_id in connection_ids:
            websocket = self._sockets.get(connection_id)
            if websocket is not None:
                tasks.append(self._send_text(connection_id, websocket, json_message))

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _send_text(self, connection_id: str, websocket: WebSocket, message: str) -> bool:
        try:
            await websocket.send_text(message)
        except Exception:
            logger.exception("Failed to send message", connection_id=connection_id)
            return False
        return True

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._sockets

    @property
    def total_connections(self) -> int:
        """Get the number of open connections."""
        return len(self._sockets)
