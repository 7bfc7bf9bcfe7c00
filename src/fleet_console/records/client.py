"""
fleet_console.records.client

Collaborator contract between the console and the remote record store.

Responsibilities:
- Describe the table operations the console invokes (select/insert/update/delete/get).
- Describe the auth operations (current session/user, password sign-in, password change).
- Define the session credential and the error taxonomy raised by implementations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

PROFILES = "profiles"
VEHICLES = "vehicles"

PROFILE_FIELDS: tuple[str, ...] = ("id", "full_name", "email", "role", "badge_number")


@dataclass(frozen=True, slots=True)
class Session:
    """
    Opaque proof of authentication. Only the owner id and expiry are interpreted locally.
    """

    access_token: str = field(repr=False)
    user_id: str
    expires_at: datetime | None = None

    def expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(tz=UTC)) >= self.expires_at


@dataclass(frozen=True, slots=True)
class AuthUser:
    id: str
    email: str | None = None


class RecordStoreError(Exception):
    """
    Any failure reported by the record store (transport, auth, validation, conflict).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RecordNotFound(RecordStoreError):
    pass


class AuthenticationFailed(RecordStoreError):
    pass


@runtime_checkable
class RecordStore(Protocol):
    async def select_all(self, resource: str, fields: Sequence[str]) -> list[dict[str, Any]]: ...

    async def insert(self, resource: str, record: dict[str, Any]) -> None: ...

    async def update(self, resource: str, record_id: str, patch: dict[str, Any]) -> None: ...

    async def delete_by_id(self, resource: str, record_id: str) -> None: ...

    async def get_by_id(self, resource: str, record_id: str) -> dict[str, Any]: ...

    async def get_current_session(self) -> Session | None: ...

    async def get_current_user(self) -> AuthUser | None: ...

    async def sign_in_with_password(self, email: str, password: str) -> Session: ...

    async def sign_out(self) -> None: ...

    async def update_password(self, user_id: str, password: str) -> None: ...


# --- Module Notes -----------------------------------------------------------
# Implementations raise `RecordStoreError` (or a subclass) for every failure so
# console operations can catch one type at their boundary.
