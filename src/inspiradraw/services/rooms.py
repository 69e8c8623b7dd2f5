"""Room service providing business logic for the HTTP room API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import quote

import structlog

from inspiradraw.exceptions import InvalidPasswordError, RoomExistsError, RoomNotFoundError, RoomValidationError

if TYPE_CHECKING:
    from inspiradraw.rooms.models import RoomRecord
    from inspiradraw.rooms.passwords import PasswordHasher
    from inspiradraw.rooms.registry import RoomRegistry
    from inspiradraw.rooms.tokens import PendingAuthStore
    from inspiradraw.services.telemetry import TelemetryService
    from inspiradraw.storage.base import CredentialStoreProtocol

logger = structlog.get_logger(__name__)

MAX_ROOM_ID_LENGTH = 128


@dataclass
class VerifyResult:
    """Outcome of a room/password verification.

    Attributes:
        exists: Whether the room exists after the call.
        valid_password: Whether the password was accepted.
        redirect: Where the client should go next, set only when accepted.
        token: One-time pending-auth token, set only when accepted.
    """

    exists: bool
    valid_password: bool
    redirect: str | None = None
    token: str | None = None


@dataclass
class RoomStatus:
    """Public view of a room."""

    room_id: str
    exists: bool
    live: bool
    member_count: int
    has_password: bool


def validate_room_id(room_id: str | None) -> str:
    """Check a room id before it reaches the credential store.

    Raises:
        RoomValidationError: If the id is missing, blank or too long.
    """
    if not room_id or not room_id.strip():
        msg = "Room id is required"
        raise RoomValidationError(msg, field="room_id")
    if len(room_id) > MAX_ROOM_ID_LENGTH:
        msg = f"Room id must be at most {MAX_ROOM_ID_LENGTH} characters"
        raise RoomValidationError(msg, field="room_id")
    return room_id


class RoomService:
    """Bridges the stateless HTTP API and the live room registry.

    The credential store is the source of truth for room passwords; the
    registry gets a fresh copy of the credential whenever this service
    reads or writes one.
    """

    def __init__(
        self,
        store: CredentialStoreProtocol,
        registry: RoomRegistry,
        hasher: PasswordHasher,
        tokens: PendingAuthStore,
        telemetry: TelemetryService | None = None,
    ) -> None:
        """Initialize the room service.

        Args:
            store: Persistent credential store.
            registry: Live room registry.
            hasher: Password hasher.
            tokens: Pending-auth token store.
            telemetry: Optional telemetry sink.
        """
        self._store = store
        self._registry = registry
        self._hasher = hasher
        self._tokens = tokens
        self._telemetry = telemetry

    async def verify(self, room_id: str | None, password: str | None) -> VerifyResult:
        """Verify a room and password, creating the room on first use.

        An unknown room id is created with the given password. A known
        room only has its password checked, so repeating a successful
        verification never writes to the store.

        Args:
            room_id: The room identifier.
            password: The plaintext password.

        Returns:
            The verification result, with a pending-auth token on success.

        Raises:
            RoomValidationError: If the room id or password is missing or invalid.
            StoreUnavailableError: If the credential store fails.
        """
        room_id = validate_room_id(room_id)
        if not password:
            msg = "Password is required"
            raise RoomValidationError(msg, field="password")

        record = await self._store.get_room(room_id)
        if record is None:
            try:
                record = await self._create(room_id, password)
            except RoomExistsError:
                # Created by a concurrent request between lookup and insert
                record = await self._store.get_room(room_id)
                if record is None:
                    raise
                if not await self._check(record, password):
                    return VerifyResult(exists=True, valid_password=False)
        elif not await self._check(record, password):
            logger.info("Room verification failed", room_id=room_id)
            return VerifyResult(exists=True, valid_password=False)

        self._registry.create_or_get(room_id, record.password_hash)
        token = self._tokens.issue(room_id)
        logger.info("Room verified", room_id=room_id)
        return VerifyResult(
            exists=True,
            valid_password=True,
            redirect=f"/room/{quote(room_id, safe='')}",
            token=token,
        )

    async def create_room(self, room_id: str | None, password: str | None = None) -> RoomRecord:
        """Create a room explicitly.

        An empty password creates an open room.

        Raises:
            RoomValidationError: If the room id is missing.
            RoomExistsError: If the room already exists.
        """
        room_id = validate_room_id(room_id)
        return await self._create(room_id, password or None)

    async def change_password(self, room_id: str, current_password: str | None, new_password: str | None) -> None:
        """Replace a room's password.

        An empty new password opens the room. Open rooms accept any
        current password.

        Raises:
            RoomNotFoundError: If the room does not exist.
            InvalidPasswordError: If the current password does not match.
        """
        record = await self._store.get_room(room_id)
        if record is None:
            raise RoomNotFoundError(room_id)

        if not await self._check(record, current_password):
            raise InvalidPasswordError(room_id)

        password_hash = await self._hasher.hash(new_password) if new_password else None
        await self._store.update_password(room_id, password_hash)

        room = self._registry.get(room_id)
        if room is not None:
            room.credential = password_hash
        logger.info("Room password changed", room_id=room_id, has_password=password_hash is not None)

    async def room_status(self, room_id: str) -> RoomStatus:
        """Describe a room from both the store and the registry."""
        record = await self._store.get_room(room_id)
        room = self._registry.get(room_id)

        if record is not None:
            has_password = record.password_hash is not None
        else:
            has_password = room is not None and room.requires_password

        return RoomStatus(
            room_id=room_id,
            exists=record is not None or room is not None,
            live=room is not None,
            member_count=len(room.members) if room is not None else 0,
            has_password=has_password,
        )

    async def list_rooms(self) -> list[RoomRecord]:
        """List every persisted room."""
        return await self._store.list_rooms()

    async def delete_room(self, room_id: str) -> bool:
        """Delete a persisted room record.

        Live sessions keep running on their cached credential until empty.
        """
        deleted = await self._store.delete_room(room_id)
        if deleted:
            logger.info("Room deleted", room_id=room_id)
        return deleted

    async def _create(self, room_id: str, password: str | None) -> RoomRecord:
        password_hash = await self._hasher.hash(password) if password else None
        record = await self._store.create_room(room_id, password_hash)
        if self._telemetry:
            self._telemetry.track_room_created(room_id)
        logger.info("Room created", room_id=room_id, has_password=password_hash is not None)
        return record

    async def _check(self, record: RoomRecord, password: str | None) -> bool:
        if record.password_hash is None:
            return True
        if not password:
            return False
        return await self._hasher.verify(password, record.password_hash)
