"""SQLAlchemy models for inspiradraw database storage."""

from __future__ import annotations

from advanced_alchemy.base import UUIDAuditBase
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from inspiradraw.rooms.models import RoomRecord


class RoomModel(UUIDAuditBase):
    """SQLAlchemy model for persisted room credentials.

    Attributes:
        id: UUID primary key (from UUIDAuditBase).
        room_id: The public room identifier.
        password_hash: One-way password verifier, NULL for open rooms.
        created_at: Creation timestamp (from UUIDAuditBase).
        updated_at: Last update timestamp (from UUIDAuditBase).
    """

    __tablename__ = "rooms"

    room_id: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)


def room_from_model(model: RoomModel) -> RoomRecord:
    """Convert RoomModel to a domain RoomRecord."""
    return RoomRecord(
        room_id=model.room_id,
        password_hash=model.password_hash,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
