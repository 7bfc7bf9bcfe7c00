"""
tests.test_records_api

End-to-end: the console runs against the record-store service mounted in-process.

Responsibilities:
- Exercise `RestRecordStore` against the real FastAPI routes and SQLite schema.
- Check row-level rules (admins write, users read) and password changes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from fleet_console.api.app import create_app, shutdown, startup
from fleet_console.console.auth_flow import AuthFlow
from fleet_console.console.controller import AccountSettings, AdminSettings, open_settings
from fleet_console.console.session_store import SessionStore
from fleet_console.console.state import Loaded
from fleet_console.records.client import (
    PROFILE_FIELDS,
    PROFILES,
    VEHICLES,
    AuthenticationFailed,
    RecordNotFound,
    RecordStoreError,
)
from fleet_console.records.http import RestRecordStore
from fleet_console.settings import Settings

ADMIN = {"full_name": "Dana Admin", "email": "dana@fleet.test", "password": "admin-pass"}


@pytest_asyncio.fixture
async def transport() -> AsyncIterator[httpx.ASGITransport]:
    app = create_app(settings=Settings(env="test", database_url="sqlite+aiosqlite:///:memory:"))
    await startup(app)
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.post("/v1/dev/bootstrap-admin", json={**ADMIN, "badge_number": "A-001"})
            assert r.status_code == 201
        yield transport
    finally:
        await shutdown(app)


@pytest_asyncio.fixture
async def admin_records(transport: httpx.ASGITransport) -> AsyncIterator[RestRecordStore]:
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        records = RestRecordStore(http=http)
        await records.sign_in_with_password(ADMIN["email"], ADMIN["password"])
        yield records


@pytest.mark.asyncio
async def test_bootstrap_only_once(transport: httpx.ASGITransport) -> None:
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.post("/v1/dev/bootstrap-admin", json=ADMIN)
        assert r.status_code == 409


@pytest.mark.asyncio
async def test_sign_in_rejects_bad_password(transport: httpx.ASGITransport) -> None:
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        records = RestRecordStore(http=http)
        with pytest.raises(AuthenticationFailed):
            await records.sign_in_with_password(ADMIN["email"], "wrong")
        assert await records.get_current_session() is None
        assert await records.get_current_user() is None


@pytest.mark.asyncio
async def test_admin_crud_roundtrip(admin_records: RestRecordStore) -> None:
    await admin_records.insert(
        PROFILES,
        {"full_name": "A", "email": "a@x", "role": "user", "badge_number": "B1", "password": "secret1"},
    )
    rows = await admin_records.select_all(PROFILES, PROFILE_FIELDS)
    assert [r["email"] for r in rows] == [ADMIN["email"], "a@x"]
    assert set(rows[1]) == set(PROFILE_FIELDS)
    user_id = rows[1]["id"]

    await admin_records.update(PROFILES, user_id, {"badge_number": None})
    assert (await admin_records.get_by_id(PROFILES, user_id))["badge_number"] is None

    await admin_records.delete_by_id(PROFILES, user_id)
    with pytest.raises(RecordNotFound):
        await admin_records.get_by_id(PROFILES, user_id)
    with pytest.raises(RecordNotFound):
        await admin_records.delete_by_id(PROFILES, user_id)


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(admin_records: RestRecordStore) -> None:
    with pytest.raises(RecordStoreError) as exc:
        await admin_records.insert(PROFILES, {"full_name": "Copy", "email": ADMIN["email"]})
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_unknown_field_and_resource(admin_records: RestRecordStore) -> None:
    with pytest.raises(RecordStoreError) as exc:
        await admin_records.select_all(PROFILES, ("id", "password_hash"))
    assert exc.value.status_code == 400
    with pytest.raises(RecordNotFound):
        await admin_records.select_all("work_orders", ("id",))


@pytest.mark.asyncio
async def test_non_admin_reads_but_cannot_write(
    transport: httpx.ASGITransport, admin_records: RestRecordStore
) -> None:
    await admin_records.insert(
        PROFILES, {"full_name": "A", "email": "a@x", "role": "user", "password": "secret1"}
    )

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        user = RestRecordStore(http=http)
        session = await user.sign_in_with_password("a@x", "secret1")
        assert session.expires_at is not None

        assert len(await user.select_all(PROFILES, PROFILE_FIELDS)) == 2
        with pytest.raises(RecordStoreError) as exc:
            await user.insert(VEHICLES, {"unit_number": "U-1", "make": "Ford", "model": "X", "year": 2020})
        assert exc.value.status_code == 403
        with pytest.raises(RecordStoreError) as exc:
            await user.update_password("admin-does-not-matter", "whatever1")
        assert exc.value.status_code == 403

        await user.update_password(session.user_id, "changed1")
        await user.sign_out()
        with pytest.raises(AuthenticationFailed):
            await user.sign_in_with_password("a@x", "secret1")
        await user.sign_in_with_password("a@x", "changed1")


@pytest.mark.asyncio
async def test_deleted_user_token_is_rejected(
    transport: httpx.ASGITransport, admin_records: RestRecordStore
) -> None:
    await admin_records.insert(
        PROFILES, {"full_name": "A", "email": "a@x", "role": "user", "password": "secret1"}
    )
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        user = RestRecordStore(http=http)
        session = await user.sign_in_with_password("a@x", "secret1")
        await admin_records.delete_by_id(PROFILES, session.user_id)

        assert await user.get_current_user() is None
        assert await user.get_current_session() is None


@pytest.mark.asyncio
async def test_console_against_service(
    transport: httpx.ASGITransport, admin_records: RestRecordStore
) -> None:
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        records = RestRecordStore(http=http)
        store = SessionStore()
        await AuthFlow(store=store, records=records).sign_in(ADMIN["email"], ADMIN["password"])

        settings = open_settings(store=store, records=records, confirm=lambda prompt: True)
        assert isinstance(settings, AdminSettings)
        await settings.mount()
        assert isinstance(settings.state, Loaded)
        assert len(settings.profiles) == 1

        editor = settings.begin_create()
        await editor.submit(full_name="Sam Ortiz", email="sam@fleet.test", password="secret1")
        assert [p.email for p in settings.profiles] == [ADMIN["email"], "sam@fleet.test"]

        vehicle = settings.begin_create_vehicle()
        await vehicle.submit(unit_number="U-7", make="Ford", model="Interceptor", year=2024)
        assert len(await records.select_all(VEHICLES, ("id", "unit_number"))) == 1

        sam = settings.profiles[1]
        assert await settings.delete(sam.id) is True
        assert [p.id for p in settings.profiles] == [store.profile.id]

    # A non-admin gets the account surface and re-syncs its own profile.
    await admin_records.insert(
        PROFILES, {"full_name": "A", "email": "a@x", "role": "user", "password": "secret1"}
    )
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        records = RestRecordStore(http=http)
        store = SessionStore()
        profile = await AuthFlow(store=store, records=records).sign_in("a@x", "secret1")
        await admin_records.update(PROFILES, profile.id, {"badge_number": "B-77"})

        account = open_settings(store=store, records=records, confirm=lambda prompt: True)
        assert isinstance(account, AccountSettings)
        editor = account.update_password()
        await editor.submit(new_password="changed1", confirm_password="changed1")

        assert store.profile is not None
        assert store.profile.badge_number == "B-77"
        assert account.last_failure is None
