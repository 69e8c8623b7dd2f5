"""In-process registry of live rooms and their members."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Final, Literal

import structlog

from inspiradraw.config import DEFAULT_MEMBER_COLOR, DEFAULT_MEMBER_NAME
from inspiradraw.exceptions import RoomNotFoundError, StaleEventError
from inspiradraw.rooms.models import Member, Room

logger = structlog.get_logger(__name__)


class _Keep(Enum):
    CREDENTIAL = "keep"


#: Passed to create_or_get to leave a live room's cached credential alone.
KEEP_CREDENTIAL: Final = _Keep.CREDENTIAL


class RoomRegistry:
    """Single source of truth for who is in which room right now.

    Membership is kept as a bidirectional relation: each Room maps
    connection ids to Members, and each connection id maps to the set of
    room ids it joined. Both sides are updated together so a disconnect
    only visits the rooms that connection actually joined.

    Every method is synchronous. Callers running on the event loop can
    check and mutate state without another handler interleaving, as long
    as they do not await between the two.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._rooms: dict[str, Room] = {}
        self._memberships: dict[str, set[str]] = {}

    def create_or_get(
        self, room_id: str, credential: str | None | Literal[_Keep.CREDENTIAL] = KEEP_CREDENTIAL
    ) -> Room:
        """Return the live room, creating it if it is not tracked yet.

        Args:
            room_id: The room identifier.
            credential: Password hash read from the credential store, or None
                for an open room. It replaces the cached credential of an
                existing room. KEEP_CREDENTIAL leaves the cache as it is, and
                a new room then starts open.

        Returns:
            The live Room.
        """
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id=room_id, credential=None if credential is KEEP_CREDENTIAL else credential)
            self._rooms[room_id] = room
            logger.info("Room session opened", room_id=room_id)
        elif credential is not KEEP_CREDENTIAL:
            room.credential = credential
        return room

    def get(self, room_id: str) -> Room | None:
        """Get a live room.

        Args:
            room_id: The room identifier.

        Returns:
            The Room or None if it is not live.
        """
        return self._rooms.get(room_id)

    def remove_if_empty(self, room_id: str) -> bool:
        """Delete a room if it has no members left.

        Args:
            room_id: The room identifier.

        Returns:
            True if the room was deleted.
        """
        room = self._rooms.get(room_id)
        if room is None or not room.is_empty:
            return False

        del self._rooms[room_id]
        logger.info("Room session closed", room_id=room_id)
        return True

    def add_member(
        self,
        room_id: str,
        connection_id: str,
        name: str = DEFAULT_MEMBER_NAME,
        color: str = DEFAULT_MEMBER_COLOR,
    ) -> Member:
        """Admit a connection into a live room.

        A connection that is already a member keeps its record; only the
        display name is refreshed.

        Args:
            room_id: The room identifier.
            connection_id: The connection being admitted.
            name: Display name.
            color: Initial pen color.

        Returns:
            The Member record.

        Raises:
            RoomNotFoundError: If the room is not live.
        """
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)

        member = room.members.get(connection_id)
        if member is not None:
            member.name = name
            return member

        member = Member(connection_id=connection_id, name=name, color=color)
        room.members[connection_id] = member
        self._memberships.setdefault(connection_id, set()).add(room_id)

        logger.info(
            "Member joined",
            room_id=room_id,
            connection_id=connection_id,
            member_name=name,
            total_members=len(room.members),
        )
        return member

    def remove_member(self, room_id: str, connection_id: str) -> Member | None:
        """Remove a connection from a room.

        The room itself is left in place; call `remove_if_empty` afterwards.

        Args:
            room_id: The room identifier.
            connection_id: The leaving connection.

        Returns:
            The removed Member, or None if it was not a member.
        """
        rooms = self._memberships.get(connection_id)
        if rooms is not None:
            rooms.discard(room_id)
            if not rooms:
                del self._memberships[connection_id]

        room = self._rooms.get(room_id)
        if room is None:
            return None

        member = room.members.pop(connection_id, None)
        if member is not None:
            logger.info(
                "Member left",
                room_id=room_id,
                connection_id=connection_id,
                remaining_members=len(room.members),
            )
        return member

    def get_member(self, room_id: str, connection_id: str) -> Member | None:
        """Get a connection's member record in a room.

        Args:
            room_id: The room identifier.
            connection_id: The connection.

        Returns:
            The Member or None.
        """
        room = self._rooms.get(room_id)
        if room is None:
            return None
        return room.members.get(connection_id)

    def require_member(self, room_id: str, connection_id: str) -> Member:
        """Get a member record or fail for a stale event.

        Raises:
            StaleEventError: If the room is gone or the connection is not in it.
        """
        member = self.get_member(room_id, connection_id)
        if member is None:
            raise StaleEventError(room_id, connection_id)
        return member

    def rooms_for(self, connection_id: str) -> list[str]:
        """List the rooms a connection is currently a member of."""
        return sorted(self._memberships.get(connection_id, ()))

    def recipients(self, room_id: str, exclude: str | None = None) -> list[str]:
        """List connection ids that should receive a room broadcast.

        Args:
            room_id: The room identifier.
            exclude: Optional connection id to leave out (usually the sender).

        Returns:
            Connection ids of the room's members.
        """
        room = self._rooms.get(room_id)
        if room is None:
            return []
        return [connection_id for connection_id in room.members if connection_id != exclude]

    def sweep(self, retention: timedelta, now: datetime | None = None) -> list[str]:
        """Delete empty rooms older than the retention window.

        Covers rooms that were verified but never joined.

        Args:
            retention: Minimum age of an empty room before it is dropped.
            now: Reference time, defaults to the current UTC time.

        Returns:
            The ids of the deleted rooms.
        """
        cutoff = (now or datetime.now(UTC)) - retention
        stale = [room_id for room_id, room in self._rooms.items() if room.is_empty and room.created_at < cutoff]
        for room_id in stale:
            del self._rooms[room_id]

        if stale:
            logger.info("Swept idle rooms", removed=len(stale))
        return stale

    def clear(self) -> None:
        """Drop every room and membership."""
        self._rooms.clear()
        self._memberships.clear()

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    @property
    def room_ids(self) -> list[str]:
        """Get the ids of all live rooms."""
        return list(self._rooms)

    @property
    def active_rooms(self) -> int:
        """Get the number of live rooms."""
        return len(self._rooms)

    @property
    def total_members(self) -> int:
        """Get the number of members across all rooms."""
        return sum(len(room.members) for room in self._rooms.values())
