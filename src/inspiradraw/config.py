"""Runtime settings for the room server."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MEMBER_NAME = "Player"
DEFAULT_MEMBER_COLOR = "#5eb3d6"
TOKEN_COOKIE_NAME = "room_token"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


@dataclass
class RealtimeSettings:
    """Settings for room sessions, pending-auth tokens and background sweeps.

    Attributes:
        token_ttl_seconds: Lifetime of a pending-auth token.
        token_sweep_interval: Seconds between expired-token purges.
        room_sweep_interval: Seconds between empty-room sweeps.
        room_retention_seconds: Age after which a never-joined empty room is dropped.
        default_member_name: Display name used when a client sends none.
        default_member_color: Color assigned to every member on join.
        bcrypt_rounds: Cost factor for newly hashed room passwords.
        cookie_secure: Mark the token cookie as HTTPS-only.
    """

    token_ttl_seconds: int = 15 * 60
    token_sweep_interval: float = 5 * 60
    room_sweep_interval: float = 60 * 60
    room_retention_seconds: int = 60 * 60
    default_member_name: str = DEFAULT_MEMBER_NAME
    default_member_color: str = DEFAULT_MEMBER_COLOR
    bcrypt_rounds: int = 12
    cookie_secure: bool = False

    @classmethod
    def from_env(cls) -> RealtimeSettings:
        """Create settings from environment variables.

        Environment variables:
            INSPIRA_TOKEN_TTL: Pending-auth token lifetime in seconds (default: 900).
            INSPIRA_TOKEN_SWEEP_INTERVAL: Token purge interval in seconds (default: 300).
            INSPIRA_ROOM_SWEEP_INTERVAL: Empty-room sweep interval in seconds (default: 3600).
            INSPIRA_ROOM_RETENTION: Empty-room retention in seconds (default: 3600).
            INSPIRA_BCRYPT_ROUNDS: bcrypt cost factor (default: 12).
            INSPIRA_COOKIE_SECURE: Set to "true" behind HTTPS.

        Returns:
            RealtimeSettings configured from environment.
        """
        return cls(
            token_ttl_seconds=int(os.environ.get("INSPIRA_TOKEN_TTL", "900")),
            token_sweep_interval=float(os.environ.get("INSPIRA_TOKEN_SWEEP_INTERVAL", "300")),
            room_sweep_interval=float(os.environ.get("INSPIRA_ROOM_SWEEP_INTERVAL", "3600")),
            room_retention_seconds=int(os.environ.get("INSPIRA_ROOM_RETENTION", "3600")),
            bcrypt_rounds=int(os.environ.get("INSPIRA_BCRYPT_ROUNDS", "12")),
            cookie_secure=_env_bool("INSPIRA_COOKIE_SECURE", default=False),
        )
