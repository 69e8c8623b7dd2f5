"""Pytest configuration and fixtures for inspiradraw tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from litestar import Litestar
from litestar.testing import TestClient

from inspiradraw.app import create_app
from inspiradraw.config import RealtimeSettings
from inspiradraw.realtime.manager import ConnectionManager
from inspiradraw.rooms.authenticator import SessionAuthenticator
from inspiradraw.rooms.passwords import PasswordHasher
from inspiradraw.rooms.registry import RoomRegistry
from inspiradraw.rooms.tokens import PendingAuthStore
from inspiradraw.services.rooms import RoomService
from inspiradraw.services.telemetry import TelemetryService
from inspiradraw.storage.memory import InMemoryCredentialStore

# Component fixtures


@pytest.fixture
def settings() -> RealtimeSettings:
    """Runtime settings with the cheapest bcrypt cost."""
    return RealtimeSettings(bcrypt_rounds=4)


@pytest.fixture
def store() -> InMemoryCredentialStore:
    """Create a fresh InMemoryCredentialStore instance for each test."""
    return InMemoryCredentialStore()


@pytest.fixture
def registry() -> RoomRegistry:
    """Create an empty room registry."""
    return RoomRegistry()


@pytest.fixture
def hasher(settings: RealtimeSettings) -> PasswordHasher:
    """Create a fast password hasher."""
    return PasswordHasher(rounds=settings.bcrypt_rounds)


@pytest.fixture
def tokens() -> PendingAuthStore:
    """Create an empty pending-auth token store."""
    return PendingAuthStore()


@pytest.fixture
def telemetry() -> TelemetryService:
    """Create a telemetry service."""
    return TelemetryService()


@pytest.fixture
def connections() -> ConnectionManager:
    """Create an empty connection manager."""
    return ConnectionManager()


@pytest.fixture
def authenticator(
    store: InMemoryCredentialStore,
    registry: RoomRegistry,
    hasher: PasswordHasher,
    tokens: PendingAuthStore,
    settings: RealtimeSettings,
) -> SessionAuthenticator:
    """Create a session authenticator over the in-memory components."""
    return SessionAuthenticator(store, registry, hasher, tokens, settings)


@pytest.fixture
def room_service(
    store: InMemoryCredentialStore,
    registry: RoomRegistry,
    hasher: PasswordHasher,
    tokens: PendingAuthStore,
    telemetry: TelemetryService,
) -> RoomService:
    """Create a room service over the in-memory components."""
    return RoomService(store, registry, hasher, tokens, telemetry)


# Fake sockets


@pytest.fixture
def socket_factory() -> Callable[[], MagicMock]:
    """Return a factory of mock WebSockets that record sent text frames."""

    def make_socket() -> MagicMock:
        ws = MagicMock()
        ws.send_text = AsyncMock()
        ws.send_json = AsyncMock()
        return ws

    return make_socket


# App and client fixtures


@pytest.fixture
def app(settings: RealtimeSettings) -> Litestar:
    """Create the application on the in-memory store."""
    return create_app(store_backend="memory", settings=settings, rate_limit=False)


@pytest.fixture
def client(app: Litestar) -> Iterator[TestClient[Litestar]]:
    """Create a test client for the app."""
    with TestClient(app=app) as client:
        yield client
