"""Room sessions: live registry, credentials and admission."""

from __future__ import annotations

from inspiradraw.rooms.authenticator import SessionAuthenticator
from inspiradraw.rooms.models import Admission, Member, Rejection, Room, RoomRecord
from inspiradraw.rooms.passwords import PasswordHasher
from inspiradraw.rooms.registry import RoomRegistry
from inspiradraw.rooms.tokens import PendingAuth, PendingAuthStore

__all__ = [
    "Admission",
    "Member",
    "PasswordHasher",
    "PendingAuth",
    "PendingAuthStore",
    "Rejection",
    "Room",
    "RoomRecord",
    "RoomRegistry",
    "SessionAuthenticator",
]
