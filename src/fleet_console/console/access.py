"""
fleet_console.console.access

Access decisions derived from the session store.

Responsibilities:
- `guard`: allow a protected view or redirect to login.
- `resolve`: apply the route table (public, protected, index redirect, not found).
- `is_admin` / `can_reset_password`: the authorization predicates shared by the
  dashboard and the settings controllers.

Every function reads the store at call time; nothing here caches a decision.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fleet_console.console.models import Profile
from fleet_console.console.session_store import SessionStore

LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"
SETTINGS_PATH = "/settings"

PUBLIC_ROUTES: frozenset[str] = frozenset({LOGIN_PATH})
PROTECTED_ROUTES: frozenset[str] = frozenset({HOME_PATH, "/vehicles", "/work-orders", SETTINGS_PATH})


@dataclass(frozen=True, slots=True)
class Allow:
    path: str | None = None


@dataclass(frozen=True, slots=True)
class Redirect:
    to: str


@dataclass(frozen=True, slots=True)
class NotFound:
    path: str


Decision = Allow | Redirect | NotFound


def is_admin(store: SessionStore) -> bool:
    return store.has_session() and store.is_admin


def can_reset_password(store: SessionStore, target: Profile) -> bool:
    if not store.has_session() or store.profile is None:
        return False
    return store.is_admin or store.profile.id == target.id


def guard(store: SessionStore, *, now: datetime | None = None) -> Allow | Redirect:
    if store.has_session(now):
        return Allow()
    return Redirect(LOGIN_PATH)


def resolve(path: str, store: SessionStore, *, now: datetime | None = None) -> Decision:
    normalized = "/" + path.strip("/") if path.strip("/") else "/"
    if normalized in PUBLIC_ROUTES:
        return Allow(normalized)
    if normalized == "/":
        decision = guard(store, now=now)
        return Redirect(HOME_PATH) if isinstance(decision, Allow) else decision
    if normalized in PROTECTED_ROUTES:
        decision = guard(store, now=now)
        return Allow(normalized) if isinstance(decision, Allow) else decision
    return NotFound(normalized)
