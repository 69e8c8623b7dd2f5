"""Tests for the live room registry."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from inspiradraw.config import DEFAULT_MEMBER_COLOR, DEFAULT_MEMBER_NAME
from inspiradraw.exceptions import RoomNotFoundError, StaleEventError
from inspiradraw.rooms.registry import RoomRegistry

ROOM_ID = "abcd-efgh-1234"
OTHER_ROOM_ID = "wxyz-qrst-9876"


class TestRoomLifecycle:
    """Tests for creating, looking up and removing rooms."""

    def test_create_or_get_creates_once(self, registry: RoomRegistry) -> None:
        """Test that a second call returns the same room."""
        first = registry.create_or_get(ROOM_ID, "hash-1")
        second = registry.create_or_get(ROOM_ID)

        assert first is second
        assert len(registry) == 1
        assert ROOM_ID in registry

    def test_create_or_get_refreshes_credential(self, registry: RoomRegistry) -> None:
        """Test that a credential from the store replaces the cached one."""
        registry.create_or_get(ROOM_ID, "old-hash")
        room = registry.create_or_get(ROOM_ID, "new-hash")

        assert room.credential == "new-hash"
        assert room.requires_password

    def test_create_or_get_opens_room(self, registry: RoomRegistry) -> None:
        """Test that an explicit None clears the cached credential and omitting it keeps it."""
        registry.create_or_get(ROOM_ID, "old-hash")

        kept = registry.create_or_get(ROOM_ID)
        assert kept.credential == "old-hash"

        opened = registry.create_or_get(ROOM_ID, None)
        assert opened.credential is None
        assert not opened.requires_password

    def test_get_unknown_room(self, registry: RoomRegistry) -> None:
        """Test that an unknown room is not live."""
        assert registry.get(ROOM_ID) is None

    def test_remove_if_empty_removes_empty_room(self, registry: RoomRegistry) -> None:
        """Test that an empty room is deleted."""
        registry.create_or_get(ROOM_ID)

        assert registry.remove_if_empty(ROOM_ID) is True
        assert registry.get(ROOM_ID) is None

    def test_remove_if_empty_keeps_occupied_room(self, registry: RoomRegistry) -> None:
        """Test that a room with members is kept."""
        registry.create_or_get(ROOM_ID)
        registry.add_member(ROOM_ID, "conn-1")

        assert registry.remove_if_empty(ROOM_ID) is False
        assert ROOM_ID in registry

    def test_clear(self, registry: RoomRegistry) -> None:
        """Test that clear drops rooms and memberships."""
        registry.create_or_get(ROOM_ID)
        registry.add_member(ROOM_ID, "conn-1")
        registry.clear()

        assert len(registry) == 0
        assert registry.rooms_for("conn-1") == []


class TestMembership:
    """Tests for members joining and leaving rooms."""

    @pytest.fixture
    def live_registry(self, registry: RoomRegistry) -> RoomRegistry:
        registry.create_or_get(ROOM_ID)
        registry.create_or_get(OTHER_ROOM_ID)
        return registry

    def test_add_member_defaults(self, live_registry: RoomRegistry) -> None:
        """Test that a new member starts with the default name and color, not drawing."""
        member = live_registry.add_member(ROOM_ID, "conn-1")

        assert member.name == DEFAULT_MEMBER_NAME
        assert member.color == DEFAULT_MEMBER_COLOR
        assert member.is_drawing is False
        assert member.to_dict() == {
            "userId": "conn-1",
            "name": DEFAULT_MEMBER_NAME,
            "color": DEFAULT_MEMBER_COLOR,
            "isDrawing": False,
        }

    def test_add_member_to_unknown_room(self, registry: RoomRegistry) -> None:
        """Test that joining a room that is not live fails."""
        with pytest.raises(RoomNotFoundError):
            registry.add_member(ROOM_ID, "conn-1")

    def test_add_member_twice_refreshes_name(self, live_registry: RoomRegistry) -> None:
        """Test that rejoining keeps one member record and updates its name."""
        first = live_registry.add_member(ROOM_ID, "conn-1", name="Alice")
        first.is_drawing = True
        second = live_registry.add_member(ROOM_ID, "conn-1", name="Alicia")

        assert first is second
        assert second.name == "Alicia"
        assert second.is_drawing is True
        assert len(live_registry.get(ROOM_ID).members) == 1

    def test_duplicate_names_allowed(self, live_registry: RoomRegistry) -> None:
        """Test that display names need not be unique."""
        live_registry.add_member(ROOM_ID, "conn-1", name="Player")
        live_registry.add_member(ROOM_ID, "conn-2", name="Player")

        assert len(live_registry.get(ROOM_ID).members) == 2

    def test_relation_is_bidirectional(self, live_registry: RoomRegistry) -> None:
        """Test that the connection side mirrors the room side."""
        live_registry.add_member(ROOM_ID, "conn-1")
        live_registry.add_member(OTHER_ROOM_ID, "conn-1")

        assert live_registry.rooms_for("conn-1") == sorted([ROOM_ID, OTHER_ROOM_ID])

        live_registry.remove_member(ROOM_ID, "conn-1")

        assert live_registry.rooms_for("conn-1") == [OTHER_ROOM_ID]
        assert "conn-1" not in live_registry.get(ROOM_ID).members

    def test_remove_member_not_present(self, live_registry: RoomRegistry) -> None:
        """Test that removing a stranger is a no-op."""
        assert live_registry.remove_member(ROOM_ID, "conn-404") is None

    def test_members_match_outstanding_joins(self, live_registry: RoomRegistry) -> None:
        """Test that members equal the joins not yet matched by a leave."""
        for conn in ("a", "b", "c", "d"):
            live_registry.add_member(ROOM_ID, conn)
        live_registry.remove_member(ROOM_ID, "b")
        live_registry.add_member(ROOM_ID, "e")
        live_registry.remove_member(ROOM_ID, "d")

        assert set(live_registry.get(ROOM_ID).members) == {"a", "c", "e"}
        assert live_registry.total_members == 3

    def test_require_member_raises_for_stale_event(self, live_registry: RoomRegistry) -> None:
        """Test that an event from a non-member is stale."""
        with pytest.raises(StaleEventError):
            live_registry.require_member(ROOM_ID, "conn-1")

        with pytest.raises(StaleEventError):
            live_registry.require_member("gone-room", "conn-1")

    def test_recipients(self, live_registry: RoomRegistry) -> None:
        """Test recipient lists with and without the sender."""
        live_registry.add_member(ROOM_ID, "conn-1")
        live_registry.add_member(ROOM_ID, "conn-2")
        live_registry.add_member(OTHER_ROOM_ID, "conn-3")

        assert sorted(live_registry.recipients(ROOM_ID)) == ["conn-1", "conn-2"]
        assert live_registry.recipients(ROOM_ID, exclude="conn-1") == ["conn-2"]
        assert live_registry.recipients("gone-room") == []


class TestSweep:
    """Tests for the idle room sweep."""

    def test_sweep_removes_old_empty_rooms(self, registry: RoomRegistry) -> None:
        """Test that only empty rooms past the retention window are dropped."""
        old_empty = registry.create_or_get("old-empty")
        old_empty.created_at = datetime.now(UTC) - timedelta(hours=2)
        old_busy = registry.create_or_get("old-busy")
        old_busy.created_at = datetime.now(UTC) - timedelta(hours=2)
        registry.add_member("old-busy", "conn-1")
        registry.create_or_get("new-empty")

        removed = registry.sweep(timedelta(hours=1))

        assert removed == ["old-empty"]
        assert sorted(registry.room_ids) == ["new-empty", "old-busy"]
