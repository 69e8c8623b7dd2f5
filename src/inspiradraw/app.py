"""Main Litestar application for inspiradraw.

This module provides the application factory and a configured app
instance for running the room server standalone.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from litestar import Litestar

from inspiradraw import __version__
from inspiradraw.cli import InspiraCLIPlugin
from inspiradraw.config import RealtimeSettings
from inspiradraw.core.error_handling import get_exception_handlers
from inspiradraw.core.logging import CorrelationIdMiddleware, RequestLoggingMiddleware, configure_logging
from inspiradraw.core.openapi import create_openapi_config
from inspiradraw.core.rate_limit import get_rate_limit_middleware
from inspiradraw.plugin import InspiraConfig, InspiraPlugin

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from inspiradraw.storage.base import CredentialStoreProtocol
    from inspiradraw.storage.db.setup import DatabaseManager

logger = structlog.get_logger(__name__)


def _database_lifespan(db_manager: DatabaseManager) -> Callable[[Litestar], object]:
    """Build a lifespan handler that opens and closes the database."""

    @asynccontextmanager
    async def lifespan(app: Litestar) -> AsyncGenerator[None, None]:
        await db_manager.init()
        app.state.db_manager = db_manager
        logger.info("Database initialized", url=db_manager.engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            await db_manager.close()

    return lifespan


def create_app(
    *,
    store_backend: str | None = None,
    database_url: str | None = None,
    settings: RealtimeSettings | None = None,
    enable_api: bool = True,
    enable_websocket: bool = True,
    rate_limit: bool = True,
    debug: bool = False,
    json_logs: bool = False,
) -> Litestar:
    """Create and configure the Litestar application.

    Args:
        store_backend: "database" or "memory". Defaults to INSPIRA_STORE,
            then "database".
        database_url: Database URL for the database backend. Defaults to
            DATABASE_URL, then a local SQLite file.
        settings: Runtime settings. Defaults to RealtimeSettings.from_env().
        enable_api: Whether to enable the HTTP room API.
        enable_websocket: Whether to enable the WebSocket endpoint.
        rate_limit: Whether to apply the rate limit middleware.
        debug: Whether to enable debug mode.
        json_logs: Whether to output logs as JSON (for production).

    Returns:
        Configured Litestar application instance.
    """
    configure_logging(debug=debug, json_logs=json_logs)

    backend = (store_backend or os.environ.get("INSPIRA_STORE", "database")).lower()
    store: CredentialStoreProtocol | None = None
    lifespan: list = []

    if backend == "database":
        from inspiradraw.storage.db.setup import DatabaseManager
        from inspiradraw.storage.db.storage import DatabaseCredentialStore

        db_manager = DatabaseManager(database_url)
        store = DatabaseCredentialStore(db_manager)
        lifespan.append(_database_lifespan(db_manager))
    elif backend != "memory":
        msg = f"Unknown store backend: {backend!r}"
        raise ValueError(msg)

    middleware: list = [CorrelationIdMiddleware, RequestLoggingMiddleware]
    rate_limit_config = get_rate_limit_middleware() if rate_limit else None
    if rate_limit_config:
        middleware.append(rate_limit_config.middleware)

    plugin = InspiraPlugin(
        InspiraConfig(
            store=store,
            settings=settings or RealtimeSettings.from_env(),
            enable_api=enable_api,
            enable_websocket=enable_websocket,
        )
    )

    logger.info("Creating application", store_backend=backend, debug=debug)

    return Litestar(
        plugins=[InspiraCLIPlugin(), plugin],
        debug=debug,
        lifespan=lifespan,
        middleware=middleware,
        exception_handlers=get_exception_handlers(),
        openapi_config=create_openapi_config(__version__),
    )


# Default application instance for uvicorn
# Use INSPIRA_DEBUG=true for dev mode, INSPIRA_JSON_LOGS=true in production
_debug = os.environ.get("INSPIRA_DEBUG", "").lower() in ("true", "1", "yes")
_json_logs = os.environ.get("INSPIRA_JSON_LOGS", "").lower() in ("true", "1", "yes")
app = create_app(debug=_debug, json_logs=_json_logs)
