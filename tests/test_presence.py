"""Tests for presence announcements and the room janitor."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock

from inspiradraw.config import RealtimeSettings
from inspiradraw.realtime.manager import ConnectionManager
from inspiradraw.realtime.presence import PresenceService, RoomJanitor
from inspiradraw.rooms.models import Admission
from inspiradraw.rooms.registry import RoomRegistry
from inspiradraw.rooms.tokens import PendingAuthStore
from inspiradraw.services.telemetry import TelemetryService

ROOM_ID = "abcd-efgh-1234"
OTHER_ROOM_ID = "wxyz-qrst-9876"


def sent_messages(ws: MagicMock) -> list[dict[str, Any]]:
    """Decode every text frame sent to a mock socket."""
    return [json.loads(call.args[0]) for call in ws.send_text.call_args_list]


class TestPresenceService:
    """Tests for join and leave notifications."""

    async def test_announce_join_skips_newcomer(
        self,
        registry: RoomRegistry,
        connections: ConnectionManager,
        socket_factory: Callable[[], MagicMock],
    ) -> None:
        """Test that only the existing members hear about a join."""
        presence = PresenceService(registry, connections)
        registry.create_or_get(ROOM_ID)
        old_ws, new_ws = socket_factory(), socket_factory()
        old_id, new_id = connections.register(old_ws), connections.register(new_ws)
        registry.add_member(ROOM_ID, old_id, name="Alice")
        member = registry.add_member(ROOM_ID, new_id, name="Bob")
        admission = Admission(room_id=ROOM_ID, member=member, users=registry.get(ROOM_ID).member_list())

        await presence.announce_join(new_id, admission)

        [message] = sent_messages(old_ws)
        assert message["type"] == "user-connected"
        assert message["name"] == "Bob"
        assert message["userId"] == new_id
        assert len(message["users"]) == 2
        assert sent_messages(new_ws) == []

    async def test_disconnect_notifies_and_cleans_up(
        self,
        registry: RoomRegistry,
        connections: ConnectionManager,
        telemetry: TelemetryService,
        socket_factory: Callable[[], MagicMock],
    ) -> None:
        """Test leaving two rooms: the shared one is told, the solo one is closed."""
        presence = PresenceService(registry, connections, telemetry)
        registry.create_or_get(ROOM_ID)
        registry.create_or_get(OTHER_ROOM_ID)
        leaver_ws, stayer_ws = socket_factory(), socket_factory()
        leaver_id, stayer_id = connections.register(leaver_ws), connections.register(stayer_ws)
        registry.add_member(ROOM_ID, leaver_id, name="Alice")
        registry.add_member(ROOM_ID, stayer_id, name="Bob")
        registry.add_member(OTHER_ROOM_ID, leaver_id, name="Alice")

        notified = await presence.disconnect(leaver_id)

        assert notified == [ROOM_ID]
        assert sent_messages(stayer_ws) == [{"type": "user-disconnected", "name": "Alice", "userId": leaver_id}]
        assert sent_messages(leaver_ws) == []
        assert OTHER_ROOM_ID not in registry
        assert registry.rooms_for(leaver_id) == []
        assert list(registry.get(ROOM_ID).members) == [stayer_id]
        assert telemetry.get_stats().total_rooms_closed == 1

    async def test_disconnect_without_rooms(self, registry: RoomRegistry, connections: ConnectionManager) -> None:
        """Test that a connection that never joined leaves quietly."""
        presence = PresenceService(registry, connections)

        assert await presence.disconnect("never-joined") == []

    async def test_last_member_leaving_removes_room(
        self,
        registry: RoomRegistry,
        connections: ConnectionManager,
        socket_factory: Callable[[], MagicMock],
    ) -> None:
        """Test that a room is dropped as soon as it is empty."""
        presence = PresenceService(registry, connections)
        registry.create_or_get(ROOM_ID)
        connection_id = connections.register(socket_factory())
        registry.add_member(ROOM_ID, connection_id)

        await presence.disconnect(connection_id)

        assert ROOM_ID not in registry


class TestRoomJanitor:
    """Tests for the periodic sweeps."""

    def test_purge_tokens(self, registry: RoomRegistry) -> None:
        """Test that expired tokens are purged."""
        tokens = PendingAuthStore(ttl_seconds=0)
        tokens.issue(ROOM_ID)
        janitor = RoomJanitor(registry, tokens)

        assert janitor.purge_tokens() == 1
        assert len(tokens) == 0

    def test_sweep_rooms(self, registry: RoomRegistry, tokens: PendingAuthStore) -> None:
        """Test that only old empty rooms are swept."""
        janitor = RoomJanitor(registry, tokens, RealtimeSettings(room_retention_seconds=60))
        registry.create_or_get("stale").created_at = datetime.now(UTC) - timedelta(minutes=5)
        registry.create_or_get("fresh")

        assert janitor.sweep_rooms() == ["stale"]
        assert registry.room_ids == ["fresh"]

    async def test_start_and_stop(self, registry: RoomRegistry) -> None:
        """Test that the background tasks run until stopped."""
        tokens = PendingAuthStore(ttl_seconds=0)
        janitor = RoomJanitor(
            registry,
            tokens,
            RealtimeSettings(token_sweep_interval=0.01, room_sweep_interval=0.01),
        )

        await janitor.start()
        await janitor.start()
        assert janitor.running is True

        tokens.issue(ROOM_ID)
        await asyncio.sleep(0.1)
        assert len(tokens) == 0

        await janitor.stop()
        assert janitor.running is False

    async def test_failing_job_keeps_running(self, registry: RoomRegistry, tokens: PendingAuthStore) -> None:
        """Test that an error in one sweep does not stop later sweeps."""
        janitor = RoomJanitor(registry, tokens, RealtimeSettings(token_sweep_interval=0.01, room_sweep_interval=60))
        calls = 0

        def flaky() -> int:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("boom")
            return 0

        janitor.purge_tokens = flaky  # type: ignore[method-assign]
        await janitor.start()
        await asyncio.sleep(0.1)
        await janitor.stop()

        assert calls >= 2
