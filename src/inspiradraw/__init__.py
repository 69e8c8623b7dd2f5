"""InspiraDraw: a Litestar-based room server for collaborative whiteboards.

Browser clients verify a room over HTTP, then open a WebSocket, join the
room, and exchange strokes, sticky notes and chat with everyone else in it.

Key Components:
    - Rooms: RoomRegistry, SessionAuthenticator, PendingAuthStore, PasswordHasher
    - Storage: InMemoryCredentialStore, CredentialStoreProtocol (for custom backends)
    - Services: RoomService (HTTP verification and room management)
    - Realtime: WebSocket handler, EventRelay, PresenceService, RoomJanitor
    - Plugin: InspiraPlugin for Litestar integration

Quick Start:
    >>> from litestar import Litestar
    >>> from inspiradraw import InspiraPlugin, InspiraConfig
    >>>
    >>> app = Litestar(
    ...     plugins=[InspiraPlugin(InspiraConfig())],
    ... )
"""

from __future__ import annotations

__version__ = "0.1.0"

from inspiradraw.config import RealtimeSettings
from inspiradraw.exceptions import (
    AuthRejectedError,
    InspiraError,
    InvalidPasswordError,
    MalformedMessageError,
    RejectReason,
    RoomExistsError,
    RoomNotFoundError,
    RoomValidationError,
    StaleEventError,
    StoreUnavailableError,
)
from inspiradraw.plugin import InspiraConfig, InspiraPlugin
from inspiradraw.realtime import (
    ConnectionManager,
    EventRelay,
    MessageType,
    PresenceService,
    RoomJanitor,
    RoomWebSocketHandler,
    create_websocket_handler,
)
from inspiradraw.rooms import (
    Admission,
    Member,
    PasswordHasher,
    PendingAuthStore,
    Rejection,
    Room,
    RoomRecord,
    RoomRegistry,
    SessionAuthenticator,
)
from inspiradraw.services import RoomService, TelemetryService
from inspiradraw.storage import CredentialStoreProtocol, InMemoryCredentialStore
from inspiradraw.web import create_router

__all__ = [
    "Admission",
    "AuthRejectedError",
    "ConnectionManager",
    "CredentialStoreProtocol",
    "EventRelay",
    "InMemoryCredentialStore",
    "InspiraConfig",
    "InspiraError",
    "InspiraPlugin",
    "InvalidPasswordError",
    "MalformedMessageError",
    "Member",
    "MessageType",
    "PasswordHasher",
    "PendingAuthStore",
    "PresenceService",
    "RealtimeSettings",
    "Rejection",
    "RejectReason",
    "Room",
    "RoomExistsError",
    "RoomJanitor",
    "RoomNotFoundError",
    "RoomRecord",
    "RoomRegistry",
    "RoomService",
    "RoomValidationError",
    "RoomWebSocketHandler",
    "SessionAuthenticator",
    "StaleEventError",
    "StoreUnavailableError",
    "TelemetryService",
    "create_router",
    "create_websocket_handler",
]
