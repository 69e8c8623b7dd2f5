"""Tests for the in-memory credential store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from inspiradraw.exceptions import RoomExistsError, RoomNotFoundError
from inspiradraw.storage.base import CredentialStoreProtocol
from inspiradraw.storage.memory import InMemoryCredentialStore

ROOM_ID = "abcd-efgh-1234"


class TestInMemoryCredentialStore:
    """Tests for room record operations in InMemoryCredentialStore."""

    def test_satisfies_protocol(self, store: InMemoryCredentialStore) -> None:
        """Test that the store implements the credential store protocol."""
        assert isinstance(store, CredentialStoreProtocol)

    async def test_create_and_get(self, store: InMemoryCredentialStore) -> None:
        """Test storing and reading a room."""
        await store.create_room(ROOM_ID, "hash-1")

        record = await store.get_room(ROOM_ID)

        assert record is not None
        assert record.room_id == ROOM_ID
        assert record.password_hash == "hash-1"

    async def test_returns_copies(self, store: InMemoryCredentialStore) -> None:
        """Test that callers cannot change stored records in place."""
        await store.create_room(ROOM_ID, "hash-1")

        record = await store.get_room(ROOM_ID)
        record.password_hash = "tampered"

        assert (await store.get_room(ROOM_ID)).password_hash == "hash-1"

    async def test_create_duplicate(self, store: InMemoryCredentialStore) -> None:
        """Test that room ids are unique."""
        await store.create_room(ROOM_ID, "hash-1")

        with pytest.raises(RoomExistsError):
            await store.create_room(ROOM_ID, None)

    async def test_update_password(self, store: InMemoryCredentialStore) -> None:
        """Test replacing a password bumps updated_at."""
        created = await store.create_room(ROOM_ID, "hash-1")

        updated = await store.update_password(ROOM_ID, None)

        assert updated.password_hash is None
        assert updated.updated_at >= created.updated_at

    async def test_update_missing(self, store: InMemoryCredentialStore) -> None:
        """Test updating an unknown room."""
        with pytest.raises(RoomNotFoundError):
            await store.update_password(ROOM_ID, "hash")

    async def test_delete_and_list(self, store: InMemoryCredentialStore) -> None:
        """Test deleting and listing rooms."""
        await store.create_room("room-a", None)
        await store.create_room("room-b", None)

        assert await store.delete_room("room-a") is True
        assert await store.delete_room("room-a") is False
        assert [record.room_id for record in await store.list_rooms()] == ["room-b"]
        assert len(store) == 1

    async def test_delete_rooms_before(self, store: InMemoryCredentialStore) -> None:
        """Test that only records older than the cutoff are deleted."""
        await store.create_room("old-room", None)
        await store.create_room("new-room", None)
        store._rooms["old-room"].created_at = datetime.now(UTC) - timedelta(days=60)

        deleted = await store.delete_rooms_before(datetime.now(UTC) - timedelta(days=30))

        assert deleted == 1
        assert await store.get_room("old-room") is None
