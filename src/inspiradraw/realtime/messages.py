"""WebSocket message types and schemas for real-time communication."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from inspiradraw.exceptions import MalformedMessageError, RejectReason


class MessageType(str, Enum):
    """Types of WebSocket messages."""

    # Client -> Server
    AUTH = "auth"
    SEND_CHAT_MESSAGE = "send-chat-message"
    DRAW_START = "draw-start"
    DRAW_MOVE = "draw-move"
    DRAW_END = "draw-end"
    ADD_STICKY_NOTE = "add-sticky-note"

    # Server -> Client
    AUTH_SUCCESS = "auth-success"
    AUTH_FAILED = "auth-failed"
    USER_CONNECTED = "user-connected"
    USER_DISCONNECTED = "user-disconnected"
    CHAT_MESSAGE = "chat-message"
    USER_DRAW_START = "user-draw-start"
    USER_DRAW_MOVE = "user-draw-move"
    USER_DRAW_END = "user-draw-end"
    STICKY_NOTE_ADDED = "sticky-note-added"


# === Inbound commands ===


@dataclass
class AuthCommand:
    """Request to join a room."""

    room: str | None
    password: str | None = None
    name: str | None = None
    token: str | None = None


@dataclass
class ChatCommand:
    """Chat line sent to a room."""

    room: str
    message: str


@dataclass
class DrawStartCommand:
    """Start of a stroke."""

    room: str
    x: float
    y: float
    color: str


@dataclass
class DrawMoveCommand:
    """Next point of the current stroke."""

    room: str
    x: float
    y: float


@dataclass
class DrawEndCommand:
    """End of the current stroke."""

    room: str


@dataclass
class AddStickyNoteCommand:
    """Sticky note placed on the board."""

    room: str
    note: dict[str, Any]


InboundCommand = (
    AuthCommand | ChatCommand | DrawStartCommand | DrawMoveCommand | DrawEndCommand | AddStickyNoteCommand
)


def _str_field(data: dict[str, Any], key: str, *, required: bool = True) -> str | None:
    value = data.get(key)
    if value is None:
        if required:
            msg = f"Missing field: {key}"
            raise MalformedMessageError(msg)
        return None
    if not isinstance(value, str):
        msg = f"Field {key} must be a string"
        raise MalformedMessageError(msg)
    return value


def _number_field(data: dict[str, Any], key: str) -> float:
    value = data.get(key)
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, int | float) or not math.isfinite(value):
        msg = f"Field {key} must be a number"
        raise MalformedMessageError(msg)
    return value


def parse_command(data: Any) -> InboundCommand:
    """Decode a JSON object into a typed inbound command.

    Args:
        data: The decoded JSON frame.

    Returns:
        The matching command dataclass.

    Raises:
        MalformedMessageError: If the type is unknown or a field is missing
            or has the wrong type.
    """
    if not isinstance(data, dict):
        msg = "Frame must be a JSON object"
        raise MalformedMessageError(msg)

    try:
        msg_type = MessageType(data.get("type"))
    except ValueError as e:
        msg = f"Unknown message type: {data.get('type')!r}"
        raise MalformedMessageError(msg) from e

    if msg_type == MessageType.AUTH:
        return AuthCommand(
            room=_str_field(data, "room", required=False),
            password=_str_field(data, "password", required=False),
            name=_str_field(data, "name", required=False),
            token=_str_field(data, "token", required=False),
        )

    room = _str_field(data, "room")
    if msg_type == MessageType.SEND_CHAT_MESSAGE:
        return ChatCommand(room=room, message=_str_field(data, "message"))
    if msg_type == MessageType.DRAW_START:
        return DrawStartCommand(
            room=room,
            x=_number_field(data, "x"),
            y=_number_field(data, "y"),
            color=_str_field(data, "color"),
        )
    if msg_type == MessageType.DRAW_MOVE:
        return DrawMoveCommand(room=room, x=_number_field(data, "x"), y=_number_field(data, "y"))
    if msg_type == MessageType.DRAW_END:
        return DrawEndCommand(room=room)
    if msg_type == MessageType.ADD_STICKY_NOTE:
        note = data.get("note")
        if not isinstance(note, dict):
            msg = "Field note must be an object"
            raise MalformedMessageError(msg)
        return AddStickyNoteCommand(room=room, note=note)

    msg = f"Message type {msg_type.value} is not accepted from clients"
    raise MalformedMessageError(msg)


# === Outbound messages ===


@dataclass
class AuthSuccessMessage:
    """Sent to a connection that was admitted."""

    room: str
    user_id: str
    users: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.AUTH_SUCCESS.value,
            "room": self.room,
            "userId": self.user_id,
            "users": self.users,
        }


@dataclass
class AuthFailedMessage:
    """Sent to a connection whose admission was rejected."""

    reason: RejectReason

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"type": MessageType.AUTH_FAILED.value, "reason": self.reason.value}


@dataclass
class UserConnectedMessage:
    """Sent to the other members when someone joins."""

    name: str
    user_id: str
    users: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.USER_CONNECTED.value,
            "name": self.name,
            "userId": self.user_id,
            "users": self.users,
        }


@dataclass
class UserDisconnectedMessage:
    """Sent to the remaining members when someone leaves."""

    name: str
    user_id: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"type": MessageType.USER_DISCONNECTED.value, "name": self.name, "userId": self.user_id}


@dataclass
class ChatMessage:
    """A chat line stamped by the server."""

    name: str
    message: str
    user_id: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary. The timestamp is milliseconds since the epoch."""
        return {
            "type": MessageType.CHAT_MESSAGE.value,
            "name": self.name,
            "message": self.message,
            "timestamp": int(self.timestamp.timestamp() * 1000),
            "userId": self.user_id,
        }


@dataclass
class UserDrawStartMessage:
    """Relayed stroke start."""

    x: float
    y: float
    color: str
    user_id: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.USER_DRAW_START.value,
            "x": self.x,
            "y": self.y,
            "color": self.color,
            "userId": self.user_id,
        }


@dataclass
class UserDrawMoveMessage:
    """Relayed stroke point."""

    x: float
    y: float
    user_id: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"type": MessageType.USER_DRAW_MOVE.value, "x": self.x, "y": self.y, "userId": self.user_id}


@dataclass
class UserDrawEndMessage:
    """Relayed stroke end."""

    user_id: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"type": MessageType.USER_DRAW_END.value, "userId": self.user_id}


@dataclass
class StickyNoteAddedMessage:
    """Relayed sticky note, tagged with its author's name."""

    note: dict[str, Any]
    author: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary. Server fields win over note keys."""
        return {**self.note, "type": MessageType.STICKY_NOTE_ADDED.value, "author": self.author}


OutboundMessage = (
    AuthSuccessMessage
    | AuthFailedMessage
    | UserConnectedMessage
    | UserDisconnectedMessage
    | ChatMessage
    | UserDrawStartMessage
    | UserDrawMoveMessage
    | UserDrawEndMessage
    | StickyNoteAddedMessage
)
