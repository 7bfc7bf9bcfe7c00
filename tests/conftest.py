"""
tests.conftest

Shared fixtures: an in-memory record store double and signed-in session stores.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Sequence
from typing import Any

import pytest

from fleet_console.console.models import Profile
from fleet_console.console.session_store import SessionStore
from fleet_console.records.client import (
    AuthenticationFailed,
    AuthUser,
    RecordNotFound,
    RecordStoreError,
    Session,
)

ADMIN_ROW = {
    "id": "admin-1",
    "full_name": "Dana Admin",
    "email": "dana@fleet.test",
    "role": "admin",
    "badge_number": "A-001",
}
USER_ROW = {
    "id": "1",
    "full_name": "A",
    "email": "a@x",
    "role": "user",
    "badge_number": "B1",
}


class FakeRecordStore:
    """
    Dict-backed `RecordStore`. Failures are injected per operation name and gates
    (asyncio.Event) can hold `select_all` calls open to simulate slow responses.
    """

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {"profiles": {}, "vehicles": {}}
        self.failures: dict[str, RecordStoreError] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.select_gates: deque[asyncio.Event] = deque()
        self.passwords: dict[str, str] = {}
        self.session: Session | None = None
        self.user: AuthUser | None = None
        self._next_id = 100

    def seed(self, resource: str, *rows: dict[str, Any]) -> None:
        for row in rows:
            self.tables[resource][row["id"]] = dict(row)

    def fail(self, op: str, message: str = "boom") -> None:
        self.failures[op] = RecordStoreError(message, status_code=500)

    def count(self, op: str) -> int:
        return sum(1 for c in self.calls if c[0] == op)

    def _enter(self, op: str, *args: Any) -> None:
        self.calls.append((op, *args))
        if op in self.failures:
            raise self.failures[op]

    async def select_all(self, resource: str, fields: Sequence[str]) -> list[dict[str, Any]]:
        self._enter("select_all", resource)
        snapshot = [{f: row.get(f) for f in fields} for row in self.tables[resource].values()]
        if self.select_gates:
            await self.select_gates.popleft().wait()
        return snapshot

    async def insert(self, resource: str, record: dict[str, Any]) -> None:
        self._enter("insert", resource, record)
        self._next_id += 1
        row = {"id": str(self._next_id), **record}
        password = row.pop("password", None)
        if password is not None:
            self.passwords[row["id"]] = password
        self.tables[resource][row["id"]] = row

    async def update(self, resource: str, record_id: str, patch: dict[str, Any]) -> None:
        self._enter("update", resource, record_id, patch)
        if record_id not in self.tables[resource]:
            raise RecordNotFound("Row not found", status_code=404)
        self.tables[resource][record_id].update(patch)

    async def delete_by_id(self, resource: str, record_id: str) -> None:
        self._enter("delete_by_id", resource, record_id)
        if self.tables[resource].pop(record_id, None) is None:
            raise RecordNotFound("Row not found", status_code=404)

    async def get_by_id(self, resource: str, record_id: str) -> dict[str, Any]:
        self._enter("get_by_id", resource, record_id)
        row = self.tables[resource].get(record_id)
        if row is None:
            raise RecordNotFound("Row not found", status_code=404)
        return dict(row)

    async def get_current_session(self) -> Session | None:
        self._enter("get_current_session")
        return self.session

    async def get_current_user(self) -> AuthUser | None:
        self._enter("get_current_user")
        return self.user

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        self._enter("sign_in_with_password", email)
        for row in self.tables["profiles"].values():
            if row["email"] == email and self.passwords.get(row["id"]) == password:
                self.session = Session(access_token=f"token-{row['id']}", user_id=row["id"])
                self.user = AuthUser(id=row["id"], email=email)
                return self.session
        raise AuthenticationFailed("Invalid login credentials", status_code=400)

    async def sign_out(self) -> None:
        self._enter("sign_out")
        self.session = None
        self.user = None

    async def update_password(self, user_id: str, password: str) -> None:
        self._enter("update_password", user_id)
        self.passwords[user_id] = password


def signed_in(records: FakeRecordStore, row: dict[str, Any]) -> SessionStore:
    store = SessionStore()
    session = Session(access_token=f"token-{row['id']}", user_id=row["id"])
    records.session = session
    records.user = AuthUser(id=row["id"], email=row["email"])
    store.sign_in(session, Profile.from_record(row))
    return store


@pytest.fixture
def records() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def admin_store(records: FakeRecordStore) -> SessionStore:
    records.seed("profiles", ADMIN_ROW)
    return signed_in(records, ADMIN_ROW)


@pytest.fixture
def user_store(records: FakeRecordStore) -> SessionStore:
    records.seed("profiles", USER_ROW)
    return signed_in(records, USER_ROW)
