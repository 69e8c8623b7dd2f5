"""Credential store backends for inspiradraw."""

from __future__ import annotations

from typing import TYPE_CHECKING

from inspiradraw.storage.base import CredentialStoreProtocol
from inspiradraw.storage.memory import InMemoryCredentialStore

if TYPE_CHECKING:
    from inspiradraw.storage.db import DatabaseCredentialStore

__all__ = ["CredentialStoreProtocol", "DatabaseCredentialStore", "InMemoryCredentialStore"]


def __getattr__(name: str) -> object:
    """Import DatabaseCredentialStore on first access."""
    if name == "DatabaseCredentialStore":
        from inspiradraw.storage.db import DatabaseCredentialStore

        return DatabaseCredentialStore
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
