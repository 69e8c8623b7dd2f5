"""Live room and member models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from inspiradraw.config import DEFAULT_MEMBER_COLOR, DEFAULT_MEMBER_NAME
from inspiradraw.exceptions import RejectReason  # noqa: TC001


@dataclass
class RoomRecord:
    """Persisted room credential, as held by the credential store.

    Attributes:
        room_id: The room identifier.
        password_hash: One-way password verifier, or None for an open room.
        created_at: When the record was first stored.
        updated_at: When the record last changed.
    """

    room_id: str
    password_hash: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class Member:
    """A connection's presence record within a room.

    Attributes:
        connection_id: Server-assigned id of the owning connection.
        name: Display name, not guaranteed unique.
        color: Current pen color.
        is_drawing: True only between a draw-start and its draw-end.
        joined_at: When the connection was admitted.
    """

    connection_id: str
    name: str = DEFAULT_MEMBER_NAME
    color: str = DEFAULT_MEMBER_COLOR
    is_drawing: bool = False
    joined_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "userId": self.connection_id,
            "name": self.name,
            "color": self.color,
            "isDrawing": self.is_drawing,
        }


@dataclass
class Room:
    """A live collaboration session.

    Attributes:
        room_id: The room identifier, opaque to the server.
        credential: Password hash, or None for an open room.
        created_at: When the room entered the registry.
        members: Connection id to Member mapping.
    """

    room_id: str
    credential: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    members: dict[str, Member] = field(default_factory=dict)

    @property
    def requires_password(self) -> bool:
        """Check if joining this room needs a password."""
        return self.credential is not None

    @property
    def is_empty(self) -> bool:
        """Check if nobody is connected to this room."""
        return not self.members

    def member_list(self) -> list[dict[str, Any]]:
        """Serialize every current member."""
        return [member.to_dict() for member in self.members.values()]


@dataclass
class Admission:
    """Successful authentication outcome.

    Attributes:
        room_id: The room the connection was admitted into.
        member: The member record created for the connection.
        users: Serialized member list including the new member.
    """

    room_id: str
    member: Member
    users: list[dict[str, Any]]


@dataclass
class Rejection:
    """Failed authentication outcome. Never accompanied by a state change."""

    room_id: str | None
    reason: RejectReason
