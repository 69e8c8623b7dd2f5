"""Short-lived tokens bridging HTTP verification and the WebSocket handshake."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class PendingAuth:
    """A one-time token issued after a successful verification.

    Attributes:
        room_id: The room the token grants access to.
        expires_at: When the token stops being accepted.
    """

    room_id: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token has expired."""
        return self.expires_at <= (now or datetime.now(UTC))


class PendingAuthStore:
    """In-memory store of pending-auth tokens.

    Tokens are bound to a single room and consumed on first use.
    """

    def __init__(self, ttl_seconds: int = 15 * 60) -> None:
        """Initialize the store.

        Args:
            ttl_seconds: Lifetime of each issued token.
        """
        self._ttl = timedelta(seconds=ttl_seconds)
        self._tokens: dict[str, PendingAuth] = {}

    @property
    def ttl_seconds(self) -> int:
        """Get the token lifetime in seconds."""
        return int(self._ttl.total_seconds())

    def issue(self, room_id: str) -> str:
        """Issue a new token for a room.

        Args:
            room_id: The verified room.

        Returns:
            The token string.
        """
        token = secrets.token_hex(32)
        self._tokens[token] = PendingAuth(room_id=room_id, expires_at=datetime.now(UTC) + self._ttl)
        logger.debug("Pending auth issued", room_id=room_id, token=token[:8] + "...")
        return token

    def consume(self, token: str | None, room_id: str) -> bool:
        """Redeem a token for a room.

        The token is removed when it matches the room, whether or not it
        has expired. A token for a different room is left untouched.

        Args:
            token: The presented token.
            room_id: The room the connection is joining.

        Returns:
            True if the token was valid for this room.
        """
        if not token:
            return False

        pending = self._tokens.get(token)
        if pending is None or pending.room_id != room_id:
            return False

        del self._tokens[token]
        return not pending.is_expired()

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop every expired token.

        Returns:
            The number of tokens removed.
        """
        now = now or datetime.now(UTC)
        expired = [token for token, pending in self._tokens.items() if pending.is_expired(now)]
        for token in expired:
            del self._tokens[token]
        return len(expired)

    def clear(self) -> None:
        """Drop every token."""
        self._tokens.clear()

    def __len__(self) -> int:
        return len(self._tokens)
