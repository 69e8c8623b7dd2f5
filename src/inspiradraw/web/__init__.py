"""Web layer for the inspiradraw API."""

from inspiradraw.web.controllers import RoomController, VerifyController
from inspiradraw.web.health import HealthController
from inspiradraw.web.router import create_router
from inspiradraw.web.stats_controller import StatsController

__all__ = ["HealthController", "RoomController", "StatsController", "VerifyController", "create_router"]
