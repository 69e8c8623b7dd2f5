"""Database credential store implementation for inspiradraw."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from inspiradraw.exceptions import RoomExistsError, RoomNotFoundError, StoreUnavailableError
from inspiradraw.storage.db.models import RoomModel, room_from_model

if TYPE_CHECKING:
    from inspiradraw.rooms.models import RoomRecord
    from inspiradraw.storage.db.setup import DatabaseManager

logger = structlog.get_logger(__name__)


class DatabaseCredentialStore:
    """Async credential store backed by SQLAlchemy.

    Each operation runs in its own short-lived session so the store can be
    shared by every connection for the lifetime of the application.
    Database failures surface as StoreUnavailableError.

    Attributes:
        _db: The database manager providing sessions.
    """

    def __init__(self, db: DatabaseManager) -> None:
        """Initialize the store.

        Args:
            db: An initialized DatabaseManager.
        """
        self._db = db

    async def get_room(self, room_id: str) -> RoomRecord | None:
        """Retrieve a room record by its public id."""
        try:
            async with self._db.session() as session:
                stmt = select(RoomModel).where(RoomModel.room_id == room_id)
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
                return room_from_model(model) if model else None
        except SQLAlchemyError as e:
            logger.exception("Room lookup failed", room_id=room_id)
            msg = "Credential store lookup failed"
            raise StoreUnavailableError(msg) from e

    async def create_room(self, room_id: str, password_hash: str | None) -> RoomRecord:
        """Insert a new room record.

        Raises:
            RoomExistsError: If the room id is already taken.
            StoreUnavailableError: If the insert fails for another reason.
        """
        try:
            async with self._db.session() as session:
                model = RoomModel(room_id=room_id, password_hash=password_hash)
                session.add(model)
                await session.flush()
                await session.refresh(model)
                return room_from_model(model)
        except IntegrityError as e:
            raise RoomExistsError(room_id) from e
        except SQLAlchemyError as e:
            logger.exception("Room insert failed", room_id=room_id)
            msg = "Credential store insert failed"
            raise StoreUnavailableError(msg) from e

    async def update_password(self, room_id: str, password_hash: str | None) -> RoomRecord:
        """Replace a room's password verifier.

        Raises:
            RoomNotFoundError: If the room does not exist.
            StoreUnavailableError: If the update fails.
        """
        try:
            async with self._db.session() as session:
                stmt = select(RoomModel).where(RoomModel.room_id == room_id)
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
                if model is None:
                    raise RoomNotFoundError(room_id)

                model.password_hash = password_hash
                model.updated_at = datetime.now(UTC)
                await session.flush()
                await session.refresh(model)
                return room_from_model(model)
        except SQLAlchemyError as e:
            logger.exception("Room password update failed", room_id=room_id)
            msg = "Credential store update failed"
            raise StoreUnavailableError(msg) from e

    async def delete_room(self, room_id: str) -> bool:
        """Delete a room record.

        Returns:
            True if the record was deleted, False if it did not exist.
        """
        try:
            async with self._db.session() as session:
                stmt = delete(RoomModel).where(RoomModel.room_id == room_id)
                result = await session.execute(stmt)
                return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.exception("Room delete failed", room_id=room_id)
            msg = "Credential store delete failed"
            raise StoreUnavailableError(msg) from e

    async def list_rooms(self) -> list[RoomRecord]:
        """List all room records, newest first."""
        try:
            async with self._db.session() as session:
                stmt = select(RoomModel).order_by(RoomModel.created_at.desc())
                result = await session.execute(stmt)
                return [room_from_model(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.exception("Room listing failed")
            msg = "Credential store lookup failed"
            raise StoreUnavailableError(msg) from e

    async def delete_rooms_before(self, cutoff: datetime) -> int:
        """Delete room records created before a cutoff.

        Returns:
            The number of deleted records.
        """
        try:
            async with self._db.session() as session:
                stmt = delete(RoomModel).where(RoomModel.created_at < cutoff)
                result = await session.execute(stmt)
                return result.rowcount
        except SQLAlchemyError as e:
            logger.exception("Room cleanup failed")
            msg = "Credential store delete failed"
            raise StoreUnavailableError(msg) from e
