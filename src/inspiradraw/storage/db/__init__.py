"""Database credential store for inspiradraw.

This module provides SQLAlchemy-based persistent storage. Components are
imported on first access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inspiradraw.storage.db.models import RoomModel
    from inspiradraw.storage.db.setup import DatabaseManager
    from inspiradraw.storage.db.storage import DatabaseCredentialStore

__all__ = [
    "DatabaseCredentialStore",
    "DatabaseManager",
    "RoomModel",
]


def __getattr__(name: str) -> object:
    """Import database components on first access."""
    if name == "DatabaseCredentialStore":
        from inspiradraw.storage.db.storage import DatabaseCredentialStore

        return DatabaseCredentialStore
    if name == "DatabaseManager":
        from inspiradraw.storage.db.setup import DatabaseManager

        return DatabaseManager
    if name == "RoomModel":
        from inspiradraw.storage.db.models import RoomModel

        return RoomModel
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
