"""Credential store protocol definition for inspiradraw."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from inspiradraw.rooms.models import RoomRecord


@runtime_checkable
class CredentialStoreProtocol(Protocol):
    """Protocol defining the credential store interface.

    The store holds one record per room id with a one-way password
    verifier. It never sees plaintext passwords.
    """

    async def get_room(self, room_id: str) -> RoomRecord | None:
        """Retrieve a room record.

        Args:
            room_id: The room identifier.

        Returns:
            The record if found, None otherwise.

        Raises:
            StoreUnavailableError: If the lookup fails.
        """
        ...

    async def create_room(self, room_id: str, password_hash: str | None) -> RoomRecord:
        """Store a new room record.

        Args:
            room_id: The room identifier.
            password_hash: The password verifier, or None for an open room.

        Returns:
            The stored record.

        Raises:
            RoomExistsError: If a record for the id already exists.
            StoreUnavailableError: If the write fails.
        """
        ...

    async def update_password(self, room_id: str, password_hash: str | None) -> RoomRecord:
        """Replace a room's password verifier.

        Args:
            room_id: The room identifier.
            password_hash: The new verifier.

        Returns:
            The updated record.

        Raises:
            RoomNotFoundError: If the room does not exist.
            StoreUnavailableError: If the write fails.
        """
        ...

    async def delete_room(self, room_id: str) -> bool:
        """Delete a room record.

        Args:
            room_id: The room identifier.

        Returns:
            True if the record was deleted, False if it did not exist.

        Raises:
            StoreUnavailableError: If the delete fails.
        """
        ...

    async def list_rooms(self) -> list[RoomRecord]:
        """List all room records, newest first.

        Raises:
            StoreUnavailableError: If the lookup fails.
        """
        ...

    async def delete_rooms_before(self, cutoff: datetime) -> int:
        """Delete room records created before a cutoff.

        Args:
            cutoff: Records created earlier than this are removed.

        Returns:
            The number of deleted records.

        Raises:
            StoreUnavailableError: If the delete fails.
        """
        ...
