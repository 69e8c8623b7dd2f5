"""Custom exceptions for inspiradraw."""

from __future__ import annotations

from enum import Enum


class RejectReason(str, Enum):
    """Reasons an authentication attempt can be rejected."""

    INVALID_ROOM = "invalid-room"
    NOT_FOUND = "not-found"
    BAD_PASSWORD = "bad-password"
    ERROR = "error"


class InspiraError(Exception):
    """Base exception class for all inspiradraw errors."""


class RoomValidationError(InspiraError):
    """Raised when a room id or password is missing or malformed.

    Raised before any credential store access.

    Attributes:
        field: Name of the offending field, if known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Description of the validation failure.
            field: Name of the offending field.
        """
        self.field = field
        super().__init__(message)


class AuthRejectedError(InspiraError):
    """Raised when a connection cannot be admitted into a room.

    Attributes:
        reason: The rejection reason sent back to the connection.
        room_id: The room the connection tried to join.
    """

    def __init__(self, reason: RejectReason, room_id: str | None = None) -> None:
        """Initialize the exception with a rejection reason.

        Args:
            reason: Why the attempt was rejected.
            room_id: The room the connection tried to join.
        """
        self.reason = reason
        self.room_id = room_id
        super().__init__(f"Authentication rejected: {reason.value}")


class StoreUnavailableError(InspiraError):
    """Raised when the credential store cannot complete an operation."""


class StaleEventError(InspiraError):
    """Raised when an event targets a room or member that is no longer present.

    Attributes:
        room_id: The room named by the event.
        connection_id: The sending connection.
    """

    def __init__(self, room_id: str, connection_id: str) -> None:
        """Initialize the exception.

        Args:
            room_id: The room named by the event.
            connection_id: The sending connection.
        """
        self.room_id = room_id
        self.connection_id = connection_id
        super().__init__(f"Connection {connection_id} is not a member of room {room_id}")


class MalformedMessageError(InspiraError):
    """Raised when an inbound WebSocket frame cannot be decoded into a command."""


class RoomNotFoundError(InspiraError):
    """Raised when a room with the specified ID cannot be found.

    Attributes:
        room_id: The ID of the room that was not found.
    """

    def __init__(self, room_id: str) -> None:
        """Initialize the exception with the room ID.

        Args:
            room_id: The ID of the room that was not found.
        """
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class RoomExistsError(InspiraError):
    """Raised when creating a room whose ID is already taken."""

    def __init__(self, room_id: str) -> None:
        """Initialize the exception with the room ID.

        Args:
            room_id: The ID that is already in use.
        """
        self.room_id = room_id
        super().__init__(f"Room {room_id} already exists")


class InvalidPasswordError(InspiraError):
    """Raised when a supplied password does not match the stored credential."""

    def __init__(self, room_id: str) -> None:
        """Initialize the exception with the room ID.

        Args:
            room_id: The room whose password did not match.
        """
        self.room_id = room_id
        super().__init__(f"Invalid password for room {room_id}")
