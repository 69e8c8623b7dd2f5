"""Admission of connections into live rooms."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from inspiradraw.config import RealtimeSettings
from inspiradraw.exceptions import AuthRejectedError, RejectReason, StoreUnavailableError
from inspiradraw.rooms.models import Admission, Rejection
from inspiradraw.rooms.registry import KEEP_CREDENTIAL

if TYPE_CHECKING:
    from inspiradraw.rooms.passwords import PasswordHasher
    from inspiradraw.rooms.registry import RoomRegistry
    from inspiradraw.rooms.tokens import PendingAuthStore
    from inspiradraw.storage.base import CredentialStoreProtocol

logger = structlog.get_logger(__name__)


class SessionAuthenticator:
    """Validates a connection's claimed room and password.

    The credential store is authoritative for room credentials. The
    registry only caches the credential of a live room, and that cache is
    used when the stored record disappeared while people are still inside.

    Nothing is written to the registry until every check has passed, and
    the registry is looked up again after the last await.
    """

    def __init__(
        self,
        store: CredentialStoreProtocol,
        registry: RoomRegistry,
        hasher: PasswordHasher,
        tokens: PendingAuthStore,
        settings: RealtimeSettings | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._hasher = hasher
        self._tokens = tokens
        self._settings = settings or RealtimeSettings()

    async def authenticate(
        self,
        connection_id: str,
        room_id: str | None,
        password: str | None = None,
        name: str | None = None,
        token: str | None = None,
    ) -> Admission | Rejection:
        """Try to admit a connection into a room.

        Args:
            connection_id: The connection asking to join.
            room_id: The claimed room.
            password: Plaintext password, if the client sent one.
            name: Display name, falls back to the default member name.
            token: Pending-auth token from a prior HTTP verification.

        Returns:
            Admission with the member list, or Rejection with a reason.
        """
        try:
            return await self._admit(connection_id, room_id, password, name, token)
        except AuthRejectedError as e:
            logger.info(
                "Authentication rejected",
                room_id=e.room_id,
                connection_id=connection_id,
                reason=e.reason.value,
            )
            return Rejection(room_id=e.room_id, reason=e.reason)
        except Exception:
            logger.exception(
                "Authentication failed unexpectedly", room_id=room_id, connection_id=connection_id
            )
            return Rejection(room_id=room_id or None, reason=RejectReason.ERROR)

    async def _admit(
        self,
        connection_id: str,
        room_id: str | None,
        password: str | None,
        name: str | None,
        token: str | None,
    ) -> Admission:
        if not room_id:
            raise AuthRejectedError(RejectReason.INVALID_ROOM)

        try:
            record = await self._store.get_room(room_id)
        except StoreUnavailableError as e:
            logger.warning("Credential store unavailable during auth", room_id=room_id, error=str(e))
            raise AuthRejectedError(RejectReason.ERROR, room_id) from e

        live = self._registry.get(room_id)
        if record is None and live is None:
            raise AuthRejectedError(RejectReason.NOT_FOUND, room_id)

        credential = record.password_hash if record is not None else live.credential
        if credential is not None and not self._tokens.consume(token, room_id):
            if not password or not await self._hasher.verify(password, credential):
                raise AuthRejectedError(RejectReason.BAD_PASSWORD, room_id)

            # An unstored room may have closed while the hash was checked
            if record is None and self._registry.get(room_id) is None:
                raise AuthRejectedError(RejectReason.NOT_FOUND, room_id)

        room = self._registry.create_or_get(room_id, credential if record is not None else KEEP_CREDENTIAL)
        member = self._registry.add_member(
            room_id,
            connection_id,
            name=name or self._settings.default_member_name,
            color=self._settings.default_member_color,
        )
        return Admission(room_id=room_id, member=member, users=room.member_list())
