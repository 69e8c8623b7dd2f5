"""One-way room password hashing."""

from __future__ import annotations

import asyncio

import bcrypt
import structlog

from inspiradraw.exceptions import RoomValidationError

logger = structlog.get_logger(__name__)

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Hashes and verifies room passwords with bcrypt.

    Hashing is CPU-bound, so both operations run in a worker thread and
    are awaited by the caller.
    """

    def __init__(self, rounds: int = 12) -> None:
        """Initialize the hasher.

        Args:
            rounds: bcrypt cost factor for new hashes.
        """
        self._rounds = rounds

    async def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Args:
            password: The plaintext password.

        Returns:
            The encoded hash.

        Raises:
            RoomValidationError: If the password is too long or not valid text.
        """
        try:
            encoded = password.encode()
        except UnicodeEncodeError as e:
            msg = "Password must be valid UTF-8 text"
            raise RoomValidationError(msg, field="password") from e
        if len(encoded) > MAX_PASSWORD_BYTES:
            msg = f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            raise RoomValidationError(msg, field="password")

        hashed = await asyncio.to_thread(bcrypt.hashpw, encoded, bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode()

    async def verify(self, password: str, hashed: str) -> bool:
        """Check a plaintext password against a stored hash.

        A malformed stored hash or an unencodable password counts as a
        mismatch.

        Args:
            password: The plaintext password.
            hashed: The stored hash.

        Returns:
            True if the password matches.
        """
        try:
            encoded = password.encode()
        except UnicodeEncodeError:
            return False
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False

        try:
            return await asyncio.to_thread(bcrypt.checkpw, encoded, hashed.encode())
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False
