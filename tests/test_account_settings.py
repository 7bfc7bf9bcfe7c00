"""
tests.test_account_settings

Non-admin settings surface and the silent profile re-sync after a password change.
"""

from __future__ import annotations

import pytest
from conftest import ADMIN_ROW, USER_ROW

from fleet_console.console.controller import AccountSettings, AdminSettings, open_settings
from fleet_console.console.errors import AccessDenied, SilentRefreshFailure
from fleet_console.console.models import Profile
from fleet_console.console.session_store import SessionStore
from fleet_console.console.state import NoEditor, ResettingPassword


def _never_confirm(prompt: str) -> bool:
    raise AssertionError("non-admin surface must never ask for confirmation")


def test_open_settings_picks_surface_by_role(records, user_store) -> None:
    surface = open_settings(store=user_store, records=records, confirm=_never_confirm)
    assert isinstance(surface, AccountSettings)
    for name in ("fetch_all", "delete", "begin_create", "begin_edit", "begin_create_vehicle"):
        assert not hasattr(surface, name)


def test_open_settings_for_admin(records, admin_store) -> None:
    surface = open_settings(store=admin_store, records=records, confirm=lambda p: True)
    assert isinstance(surface, AdminSettings)


def test_open_settings_requires_session(records) -> None:
    with pytest.raises(AccessDenied):
        open_settings(store=SessionStore(), records=records, confirm=lambda p: True)


@pytest.mark.asyncio
async def test_password_change_refreshes_own_profile(records, user_store) -> None:
    surface = AccountSettings(store=user_store, records=records)
    records.tables["profiles"]["1"]["full_name"] = "A. Refreshed"

    editor = surface.update_password()
    assert surface.editor_state == ResettingPassword(Profile.from_record(USER_ROW))
    await editor.submit(new_password="newpass1", confirm_password="newpass1")

    assert records.passwords["1"] == "newpass1"
    assert user_store.profile is not None
    assert user_store.profile.full_name == "A. Refreshed"
    assert isinstance(surface.editor_state, NoEditor)
    assert surface.last_failure is None
    assert [c[0] for c in records.calls][-3:] == [
        "get_current_session",
        "get_current_user",
        "get_by_id",
    ]


@pytest.mark.asyncio
async def test_profile_fetch_failure_keeps_previous_profile(records, user_store) -> None:
    surface = AccountSettings(store=user_store, records=records)
    before = user_store.profile
    records.fail("get_by_id")

    editor = surface.update_password()
    await editor.submit(new_password="newpass1", confirm_password="newpass1")

    assert records.passwords["1"] == "newpass1"
    assert user_store.profile == before
    assert not editor.is_open
    assert isinstance(surface.last_failure, SilentRefreshFailure)
    assert surface.last_failure.stage == "profile"


@pytest.mark.asyncio
@pytest.mark.parametrize("stage, op", [("session", "get_current_session"), ("user", "get_current_user")])
async def test_early_stage_failure_stops_pipeline(records, user_store, stage, op) -> None:
    surface = AccountSettings(store=user_store, records=records)
    records.fail(op)

    assert await surface.refresh_own_profile() is None

    assert surface.last_failure.stage == stage
    assert records.count("get_by_id") == 0


@pytest.mark.asyncio
async def test_missing_session_skips_refresh(records, user_store) -> None:
    surface = AccountSettings(store=user_store, records=records)
    records.session = None

    assert await surface.refresh_own_profile() is None
    assert surface.last_failure is None
    assert records.count("get_current_user") == 0


def test_update_password_requires_signed_in_profile(records) -> None:
    surface = AccountSettings(store=SessionStore(), records=records)
    with pytest.raises(AccessDenied):
        surface.update_password()


@pytest.mark.asyncio
async def test_admin_can_use_account_surface_for_self(records, admin_store) -> None:
    surface = AccountSettings(store=admin_store, records=records)
    editor = surface.update_password()
    assert editor.initial == Profile.from_record(ADMIN_ROW)
