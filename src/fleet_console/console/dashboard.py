"""
fleet_console.console.dashboard

Landing view model shown after sign-in.
"""

from __future__ import annotations

from dataclasses import dataclass

from fleet_console.console.access import SETTINGS_PATH, is_admin
from fleet_console.console.session_store import SessionStore

WELCOME = "Welcome to the Police Fleet Management System!"


@dataclass(frozen=True, slots=True)
class DashboardView:
    heading: str
    welcome: str
    display_name: str | None
    # Only admins get a shortcut to the settings screen.
    settings_path: str | None


def build_dashboard(store: SessionStore) -> DashboardView:
    profile = store.profile
    return DashboardView(
        heading="Dashboard",
        welcome=WELCOME,
        display_name=profile.full_name if profile is not None else None,
        settings_path=SETTINGS_PATH if is_admin(store) else None,
    )
