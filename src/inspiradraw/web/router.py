"""Router configuration for the inspiradraw API."""

from __future__ import annotations

from litestar import Router

from inspiradraw.web.controllers import RoomController, VerifyController
from inspiradraw.web.stats_controller import StatsController


def create_router(path: str = "/") -> Router:
    """Create the inspiradraw API router.

    Args:
        path: The base path for all API routes. Defaults to the root, where
            browser clients expect `/verify`.

    Returns:
        A configured Litestar Router instance.

    Example:
        >>> router = create_router("/api")
        >>> # Use the router in your Litestar app configuration
    """
    return Router(
        path=path,
        route_handlers=[VerifyController, RoomController, StatsController],
    )
