"""
tests.test_dashboard
"""

from __future__ import annotations

from conftest import ADMIN_ROW, USER_ROW, signed_in

from fleet_console.console.dashboard import WELCOME, build_dashboard
from fleet_console.console.session_store import SessionStore


def test_admin_dashboard_links_settings(records) -> None:
    view = build_dashboard(signed_in(records, ADMIN_ROW))
    assert view.welcome == WELCOME
    assert view.display_name == "Dana Admin"
    assert view.settings_path == "/settings"


def test_user_dashboard_hides_settings_link(user_store) -> None:
    view = build_dashboard(user_store)
    assert view.display_name == USER_ROW["full_name"]
    assert view.settings_path is None


def test_signed_out_dashboard() -> None:
    view = build_dashboard(SessionStore())
    assert view.heading == "Dashboard"
    assert view.display_name is None
    assert view.settings_path is None
