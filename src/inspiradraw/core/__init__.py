"""Application infrastructure: logging, errors, rate limiting and tasks."""

from inspiradraw.core.error_handling import ErrorResponse, get_exception_handlers
from inspiradraw.core.logging import configure_logging, get_middleware
from inspiradraw.core.rate_limit import RateLimitSettings, get_rate_limit_middleware

__all__ = [
    "ErrorResponse",
    "RateLimitSettings",
    "configure_logging",
    "get_exception_handlers",
    "get_middleware",
    "get_rate_limit_middleware",
]
