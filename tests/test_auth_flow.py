"""
tests.test_auth_flow
"""

from __future__ import annotations

import pytest
from conftest import ADMIN_ROW, USER_ROW

from fleet_console.console.auth_flow import AuthFlow
from fleet_console.console.session_store import SessionStore
from fleet_console.records.client import AuthenticationFailed, RecordStoreError, Session


@pytest.mark.asyncio
async def test_sign_in_populates_store(records) -> None:
    records.seed("profiles", ADMIN_ROW)
    records.passwords["admin-1"] = "secret1"
    store = SessionStore()

    profile = await AuthFlow(store=store, records=records).sign_in("dana@fleet.test", "secret1")

    assert profile.id == "admin-1"
    assert store.has_session()
    assert store.is_admin


@pytest.mark.asyncio
async def test_bad_credentials_leave_store_signed_out(records) -> None:
    records.seed("profiles", USER_ROW)
    records.passwords["1"] = "secret1"
    store = SessionStore()

    with pytest.raises(AuthenticationFailed):
        await AuthFlow(store=store, records=records).sign_in("a@x", "wrong")

    assert not store.has_session()


@pytest.mark.asyncio
async def test_missing_profile_discards_session(records) -> None:
    records.seed("profiles", USER_ROW)
    records.passwords["1"] = "secret1"
    records.fail("get_by_id")
    store = SessionStore()

    with pytest.raises(RecordStoreError):
        await AuthFlow(store=store, records=records).sign_in("a@x", "secret1")

    assert records.session is None
    assert store.session is None


@pytest.mark.asyncio
async def test_restore_and_sign_out(records) -> None:
    records.seed("profiles", USER_ROW)
    records.session = Session(access_token="t", user_id="1")
    store = SessionStore()
    flow = AuthFlow(store=store, records=records)

    assert await flow.restore() is True
    assert store.profile is not None and store.profile.id == "1"

    await flow.sign_out()
    assert store.session is None
    assert records.session is None
    assert await flow.restore() is False


@pytest.mark.asyncio
async def test_restore_with_deleted_profile_signs_out(records) -> None:
    records.session = Session(access_token="t", user_id="gone")
    store = SessionStore()

    assert await AuthFlow(store=store, records=records).restore() is False
    assert store.session is None
    assert records.session is None
