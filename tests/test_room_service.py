"""Tests for the HTTP-facing room service."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from inspiradraw.exceptions import (
    InvalidPasswordError,
    RoomExistsError,
    RoomNotFoundError,
    RoomValidationError,
)
from inspiradraw.rooms.passwords import PasswordHasher
from inspiradraw.rooms.registry import RoomRegistry
from inspiradraw.rooms.tokens import PendingAuthStore
from inspiradraw.services.rooms import MAX_ROOM_ID_LENGTH, RoomService, validate_room_id
from inspiradraw.services.telemetry import TelemetryService
from inspiradraw.storage.memory import InMemoryCredentialStore

ROOM_ID = "abcd-efgh-1234"
PASSWORD = "hunter2"


class TestValidateRoomId:
    """Tests for room id validation."""

    @pytest.mark.parametrize("room_id", [None, "", "   ", "x" * (MAX_ROOM_ID_LENGTH + 1)])
    def test_invalid(self, room_id: str | None) -> None:
        """Test that blank and oversized ids are refused."""
        with pytest.raises(RoomValidationError) as exc_info:
            validate_room_id(room_id)

        assert exc_info.value.field == "room_id"

    def test_valid(self) -> None:
        """Test that any other id is accepted unchanged."""
        assert validate_room_id("Room With Spaces/and-slashes") == "Room With Spaces/and-slashes"


class TestVerify:
    """Tests for room verification."""

    async def test_new_room_is_created(
        self,
        room_service: RoomService,
        store: InMemoryCredentialStore,
        registry: RoomRegistry,
        tokens: PendingAuthStore,
        telemetry: TelemetryService,
    ) -> None:
        """Test that verifying an unknown room creates it with the given password."""
        result = await room_service.verify(ROOM_ID, PASSWORD)

        assert result.exists is True
        assert result.valid_password is True
        assert result.redirect == f"/room/{ROOM_ID}"
        assert result.token is not None
        assert len(store) == 1
        assert (await store.get_room(ROOM_ID)).password_hash != PASSWORD
        assert ROOM_ID in registry
        assert tokens.consume(result.token, ROOM_ID) is True
        assert telemetry.get_stats().total_rooms_created == 1

    async def test_redirect_is_quoted(self, room_service: RoomService) -> None:
        """Test that the redirect path escapes the room id."""
        result = await room_service.verify("team room/1", PASSWORD)

        assert result.redirect == "/room/team%20room%2F1"

    async def test_repeat_verification_never_writes(
        self, room_service: RoomService, store: InMemoryCredentialStore
    ) -> None:
        """Test that verifying a known room only checks the password."""
        await room_service.verify(ROOM_ID, PASSWORD)
        original_hash = (await store.get_room(ROOM_ID)).password_hash

        with (
            patch.object(store, "create_room", wraps=store.create_room) as create_spy,
            patch.object(store, "update_password", wraps=store.update_password) as update_spy,
        ):
            second = await room_service.verify(ROOM_ID, PASSWORD)
            third = await room_service.verify(ROOM_ID, "wrong")

        assert second.valid_password is True
        assert third.valid_password is False
        create_spy.assert_not_called()
        update_spy.assert_not_called()
        assert (await store.get_room(ROOM_ID)).password_hash == original_hash

    async def test_bad_password(self, room_service: RoomService, tokens: PendingAuthStore) -> None:
        """Test that a wrong password yields no token and no redirect."""
        await room_service.verify(ROOM_ID, PASSWORD)
        issued = len(tokens)

        result = await room_service.verify(ROOM_ID, "wrong")

        assert result.exists is True
        assert result.valid_password is False
        assert result.redirect is None
        assert result.token is None
        assert len(tokens) == issued

    async def test_missing_password(self, room_service: RoomService, store: InMemoryCredentialStore) -> None:
        """Test that a missing password is refused before touching the store."""
        with pytest.raises(RoomValidationError) as exc_info:
            await room_service.verify(ROOM_ID, "")

        assert exc_info.value.field == "password"
        assert len(store) == 0

    async def test_missing_room_id(self, room_service: RoomService) -> None:
        """Test that a missing room id is refused."""
        with pytest.raises(RoomValidationError):
            await room_service.verify(None, PASSWORD)

    async def test_open_room_accepts_any_password(
        self, room_service: RoomService, store: InMemoryCredentialStore
    ) -> None:
        """Test that an open room verifies with any password."""
        await store.create_room(ROOM_ID, None)

        result = await room_service.verify(ROOM_ID, "anything")

        assert result.valid_password is True

    async def test_refreshes_live_credential(
        self,
        room_service: RoomService,
        store: InMemoryCredentialStore,
        registry: RoomRegistry,
        hasher: PasswordHasher,
    ) -> None:
        """Test that verification copies the stored credential into the live room."""
        stored_hash = await hasher.hash(PASSWORD)
        await store.create_room(ROOM_ID, stored_hash)
        registry.create_or_get(ROOM_ID, "stale-hash")

        await room_service.verify(ROOM_ID, PASSWORD)

        assert registry.get(ROOM_ID).credential == stored_hash

    async def test_open_room_clears_live_credential(
        self, room_service: RoomService, store: InMemoryCredentialStore, registry: RoomRegistry
    ) -> None:
        """Test that a room stored as open drops a stale cached password."""
        await store.create_room(ROOM_ID, None)
        registry.create_or_get(ROOM_ID, "stale-hash")

        await room_service.verify(ROOM_ID, "anything")

        assert registry.get(ROOM_ID).credential is None

    async def test_unencodable_password_on_new_room(
        self, room_service: RoomService, store: InMemoryCredentialStore
    ) -> None:
        """Test that a password that is not valid text cannot create a room."""
        with pytest.raises(RoomValidationError):
            await room_service.verify(ROOM_ID, "\ud800")

        assert await store.get_room(ROOM_ID) is None


class TestRoomManagement:
    """Tests for explicit room creation and password changes."""

    async def test_create_room(self, room_service: RoomService, registry: RoomRegistry) -> None:
        """Test that explicit creation stores the room but does not open a session."""
        record = await room_service.create_room(ROOM_ID, PASSWORD)

        assert record.room_id == ROOM_ID
        assert record.password_hash is not None
        assert ROOM_ID not in registry

    async def test_create_open_room(self, room_service: RoomService) -> None:
        """Test that an empty password creates an open room."""
        record = await room_service.create_room(ROOM_ID, "")

        assert record.password_hash is None

    async def test_create_existing_room(self, room_service: RoomService) -> None:
        """Test that room ids are unique."""
        await room_service.create_room(ROOM_ID, PASSWORD)

        with pytest.raises(RoomExistsError):
            await room_service.create_room(ROOM_ID, "other")

    async def test_change_password(
        self, room_service: RoomService, registry: RoomRegistry, hasher: PasswordHasher
    ) -> None:
        """Test that a new password replaces the old one in store and registry."""
        await room_service.verify(ROOM_ID, PASSWORD)

        await room_service.change_password(ROOM_ID, PASSWORD, "new-password")

        assert (await room_service.verify(ROOM_ID, PASSWORD)).valid_password is False
        assert (await room_service.verify(ROOM_ID, "new-password")).valid_password is True
        assert await hasher.verify("new-password", registry.get(ROOM_ID).credential)

    async def test_change_password_to_open(self, room_service: RoomService, registry: RoomRegistry) -> None:
        """Test that an empty new password opens the room."""
        await room_service.verify(ROOM_ID, PASSWORD)

        await room_service.change_password(ROOM_ID, PASSWORD, "")

        status = await room_service.room_status(ROOM_ID)
        assert status.has_password is False
        assert registry.get(ROOM_ID).credential is None

    async def test_change_password_wrong_current(self, room_service: RoomService) -> None:
        """Test that the current password must match."""
        await room_service.create_room(ROOM_ID, PASSWORD)

        with pytest.raises(InvalidPasswordError):
            await room_service.change_password(ROOM_ID, "wrong", "new-password")

    async def test_change_password_unknown_room(self, room_service: RoomService) -> None:
        """Test that changing the password of a missing room fails."""
        with pytest.raises(RoomNotFoundError):
            await room_service.change_password(ROOM_ID, PASSWORD, "new-password")


class TestRoomStatus:
    """Tests for room status and listing."""

    async def test_unknown_room(self, room_service: RoomService) -> None:
        """Test the status of a room nobody created."""
        status = await room_service.room_status(ROOM_ID)

        assert status.exists is False
        assert status.live is False
        assert status.member_count == 0
        assert status.has_password is False

    async def test_live_room(self, room_service: RoomService, registry: RoomRegistry) -> None:
        """Test the status of a verified room with a member."""
        await room_service.verify(ROOM_ID, PASSWORD)
        registry.add_member(ROOM_ID, "conn-1")

        status = await room_service.room_status(ROOM_ID)

        assert status.exists is True
        assert status.live is True
        assert status.member_count == 1
        assert status.has_password is True

    async def test_list_and_delete(self, room_service: RoomService) -> None:
        """Test listing and deleting stored rooms."""
        await room_service.create_room("room-a")
        await room_service.create_room("room-b")

        assert {record.room_id for record in await room_service.list_rooms()} == {"room-a", "room-b"}
        assert await room_service.delete_room("room-a") is True
        assert await room_service.delete_room("room-a") is False
        assert [record.room_id for record in await room_service.list_rooms()] == ["room-b"]
