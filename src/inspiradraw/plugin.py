"""Litestar plugin for inspiradraw integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol

from inspiradraw.config import RealtimeSettings
from inspiradraw.realtime.manager import ConnectionManager
from inspiradraw.realtime.presence import PresenceService, RoomJanitor
from inspiradraw.realtime.relay import EventRelay
from inspiradraw.rooms.authenticator import SessionAuthenticator
from inspiradraw.rooms.passwords import PasswordHasher
from inspiradraw.rooms.registry import RoomRegistry
from inspiradraw.rooms.tokens import PendingAuthStore
from inspiradraw.services.rooms import RoomService
from inspiradraw.services.telemetry import TelemetryService
from inspiradraw.storage.memory import InMemoryCredentialStore
from inspiradraw.web.health import HealthController
from inspiradraw.web.router import create_router

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

    from inspiradraw.storage.base import CredentialStoreProtocol


@dataclass
class InspiraConfig:
    """Configuration for the InspiraDraw plugin.

    Attributes:
        store: Credential store backend. If None, InMemoryCredentialStore
            is used.
        settings: Runtime settings. If None, RealtimeSettings defaults are used.
        enable_api: Whether to mount the HTTP room API. Defaults to True.
        enable_websocket: Whether to mount the WebSocket endpoint.
            Defaults to True.
        api_path: Base path for the HTTP room API. Defaults to "/".
        ws_path: Path of the WebSocket endpoint. Defaults to "/ws".
        registry: Optional pre-built RoomRegistry, mainly for tests.
        connection_manager: Optional pre-built ConnectionManager.
        telemetry: Optional pre-built TelemetryService.

    Example:
        >>> from inspiradraw.storage.memory import InMemoryCredentialStore
        >>> config = InspiraConfig(store=InMemoryCredentialStore(), ws_path="/socket")
    """

    store: CredentialStoreProtocol | None = None
    settings: RealtimeSettings | None = None
    enable_api: bool = True
    enable_websocket: bool = True
    api_path: str = "/"
    ws_path: str = "/ws"
    registry: RoomRegistry | None = field(default=None)
    connection_manager: ConnectionManager | None = field(default=None)
    telemetry: TelemetryService | None = field(default=None)


class InspiraPlugin(InitPluginProtocol):
    """Litestar plugin wiring the room server into an application.

    The plugin owns every long-lived object: credential store, room
    registry, pending-auth tokens, connection manager and background
    janitor. They are built once in on_app_init, exposed to handlers
    through dependency injection, and drained on shutdown.

    Example:
        >>> from litestar import Litestar
        >>> from inspiradraw import InspiraPlugin, InspiraConfig
        >>>
        >>> app = Litestar(plugins=[InspiraPlugin(InspiraConfig())])

        Accessing the room service in route handlers:

        >>> from litestar import get
        >>> from inspiradraw.services.rooms import RoomService
        >>>
        >>> @get("/custom")
        ... async def custom_handler(room_service: RoomService) -> dict:
        ...     status = await room_service.room_status("abcd-efgh-1234")
        ...     return {"live": status.live}
    """

    def __init__(self, config: InspiraConfig | None = None) -> None:
        """Initialize the plugin with optional configuration.

        Args:
            config: Plugin configuration. If None, InspiraConfig with default
                values will be used.
        """
        self._config = config or InspiraConfig()
        self._settings = self._config.settings or RealtimeSettings()
        self._store: CredentialStoreProtocol | None = None
        self._registry: RoomRegistry | None = None
        self._tokens: PendingAuthStore | None = None
        self._connection_manager: ConnectionManager | None = None
        self._telemetry: TelemetryService | None = None
        self._room_service: RoomService | None = None
        self._janitor: RoomJanitor | None = None

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Build the room server components and register them with the app.

        Args:
            app_config: The Litestar application configuration object.

        Returns:
            The modified application configuration.
        """
        settings = self._settings
        self._store = store = self._config.store or InMemoryCredentialStore()
        self._registry = registry = self._config.registry or RoomRegistry()
        self._tokens = tokens = PendingAuthStore(ttl_seconds=settings.token_ttl_seconds)
        self._connection_manager = connections = self._config.connection_manager or ConnectionManager()
        self._telemetry = telemetry = self._config.telemetry or TelemetryService()
        hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

        self._room_service = RoomService(store, registry, hasher, tokens, telemetry)
        self._janitor = RoomJanitor(registry, tokens, settings)

        dependencies: dict[str, Any] = {
            "room_service": self._room_service,
            "registry": registry,
            "connection_manager": connections,
            "telemetry": telemetry,
            "realtime_settings": settings,
        }
        for key, value in dependencies.items():
            app_config.dependencies[key] = Provide(_constant(value), sync_to_thread=False)

        app_config.route_handlers.append(HealthController)

        if self._config.enable_api:
            app_config.route_handlers.append(create_router(path=self._config.api_path))

        if self._config.enable_websocket:
            from inspiradraw.realtime.handler import create_websocket_handler

            authenticator = SessionAuthenticator(store, registry, hasher, tokens, settings)
            ws_router = create_websocket_handler(
                path=self._config.ws_path,
                connection_manager=connections,
                authenticator=authenticator,
                relay=EventRelay(registry, connections, telemetry),
                presence=PresenceService(registry, connections, telemetry),
                telemetry=telemetry,
            )
            app_config.route_handlers.append(ws_router)

        app_config.on_startup.append(self._janitor.start)
        app_config.on_shutdown.append(self.drain)

        return app_config

    async def drain(self) -> None:
        """Stop the background sweeps and drop every live room and token."""
        if self._janitor is not None:
            await self._janitor.stop()
        if self._registry is not None:
            self._registry.clear()
        if self._tokens is not None:
            self._tokens.clear()

    @property
    def store(self) -> CredentialStoreProtocol:
        """Get the credential store.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._store is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._store

    @property
    def registry(self) -> RoomRegistry:
        """Get the live room registry.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._registry is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._registry

    @property
    def tokens(self) -> PendingAuthStore:
        """Get the pending-auth token store.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._tokens is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._tokens

    @property
    def room_service(self) -> RoomService:
        """Get the room service.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._room_service is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._room_service

    @property
    def connection_manager(self) -> ConnectionManager:
        """Get the WebSocket connection manager.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._connection_manager is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._connection_manager

    @property
    def telemetry(self) -> TelemetryService:
        """Get the telemetry service.

        Raises:
            RuntimeError: If the plugin has not been initialized yet.
        """
        if self._telemetry is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._telemetry


def _constant(value: Any) -> Any:
    """Build a dependency provider that always returns the same object."""

    def provide() -> Any:
        return value

    return provide
