"""In-memory credential store for inspiradraw."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

from inspiradraw.exceptions import RoomExistsError, RoomNotFoundError
from inspiradraw.rooms.models import RoomRecord


class InMemoryCredentialStore:
    """In-memory credential store.

    Returns copies of stored records so callers cannot modify them.

    Note:
        All rooms are lost when the application stops. Suitable for
        development, testing, or ephemeral deployments.

    Attributes:
        _rooms: Internal dictionary mapping room IDs to records.
    """

    def __init__(self) -> None:
        """Initialize the store with no rooms."""
        self._rooms: dict[str, RoomRecord] = {}

    async def get_room(self, room_id: str) -> RoomRecord | None:
        """Retrieve a room record.

        Args:
            room_id: The room identifier.

        Returns:
            A copy of the record if found, None otherwise.
        """
        record = self._rooms.get(room_id)
        return replace(record) if record else None

    async def create_room(self, room_id: str, password_hash: str | None) -> RoomRecord:
        """Store a new room record.

        Args:
            room_id: The room identifier.
            password_hash: The password verifier, or None.

        Returns:
            A copy of the stored record.

        Raises:
            RoomExistsError: If the room already exists.
        """
        if room_id in self._rooms:
            raise RoomExistsError(room_id)

        record = RoomRecord(room_id=room_id, password_hash=password_hash)
        self._rooms[room_id] = record
        return replace(record)

    async def update_password(self, room_id: str, password_hash: str | None) -> RoomRecord:
        """Replace a room's password verifier.

        Raises:
            RoomNotFoundError: If the room does not exist.
        """
        record = self._rooms.get(room_id)
        if record is None:
            raise RoomNotFoundError(room_id)

        updated = replace(record, password_hash=password_hash, updated_at=datetime.now(UTC))
        self._rooms[room_id] = updated
        return replace(updated)

    async def delete_room(self, room_id: str) -> bool:
        """Delete a room record.

        Returns:
            True if the record was deleted, False if it did not exist.
        """
        return self._rooms.pop(room_id, None) is not None

    async def list_rooms(self) -> list[RoomRecord]:
        """List all room records, newest first."""
        records = [replace(record) for record in self._rooms.values()]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    async def delete_rooms_before(self, cutoff: datetime) -> int:
        """Delete room records created before a cutoff.

        Returns:
            The number of deleted records.
        """
        stale = [room_id for room_id, record in self._rooms.items() if record.created_at < cutoff]
        for room_id in stale:
            del self._rooms[room_id]
        return len(stale)

    def __len__(self) -> int:
        return len(self._rooms)
