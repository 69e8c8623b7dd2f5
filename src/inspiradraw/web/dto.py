"""Data Transfer Objects (DTOs) for the inspiradraw API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inspiradraw.services.rooms import RoomStatus, VerifyResult


# Request DTOs


@dataclass
class VerifyRoomDTO:
    """DTO for verifying a room id and password.

    Both fields are optional at the schema level so that a missing value
    is reported as a room validation error rather than a generic one.

    Attributes:
        room_id: The room identifier.
        password: The plaintext room password.
    """

    room_id: str | None = None
    password: str | None = None


@dataclass
class CreateRoomDTO:
    """DTO for creating a room explicitly.

    Attributes:
        room_id: The room identifier.
        password: Optional password. Omit or leave empty for an open room.
    """

    room_id: str | None = None
    password: str | None = None


@dataclass
class ChangePasswordDTO:
    """DTO for replacing a room password.

    Attributes:
        current_password: The password in use now.
        new_password: The replacement. Empty opens the room.
    """

    current_password: str | None = None
    new_password: str | None = None


# Response DTOs


@dataclass
class VerifyResponseDTO:
    """DTO for verification responses.

    Attributes:
        exists: Whether the room exists.
        valid_password: Whether the password was accepted.
        redirect: Room page to open next. Never carries the password.
        token: One-time token for the WebSocket handshake.
    """

    exists: bool
    valid_password: bool
    redirect: str | None = None
    token: str | None = None


@dataclass
class CreateRoomResponseDTO:
    """DTO for room creation responses."""

    success: bool


@dataclass
class RoomStatusDTO:
    """DTO for room status responses.

    Attributes:
        room_id: The room identifier.
        exists: Whether the room is persisted or live.
        live: Whether a session is running for the room.
        member_count: Number of connected members.
        has_password: Whether joining needs a password.
    """

    room_id: str
    exists: bool
    live: bool
    member_count: int
    has_password: bool


# Conversion helper functions


def verify_to_response(result: VerifyResult) -> VerifyResponseDTO:
    """Convert a VerifyResult to a VerifyResponseDTO."""
    return VerifyResponseDTO(
        exists=result.exists,
        valid_password=result.valid_password,
        redirect=result.redirect,
        token=result.token,
    )


def status_to_response(status: RoomStatus) -> RoomStatusDTO:
    """Convert a RoomStatus to a RoomStatusDTO."""
    return RoomStatusDTO(
        room_id=status.room_id,
        exists=status.exists,
        live=status.live,
        member_count=status.member_count,
        has_password=status.has_password,
    )
