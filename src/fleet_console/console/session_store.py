"""
fleet_console.console.session_store

Process-wide authentication state: who is signed in and with what privilege.

Responsibilities:
- Hold the current session credential and the current profile.
- Derive the admin flag from the profile on every read.
- Allow mutation only through `sign_in`, `sign_out` and `set_profile`.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fleet_console.console.models import Profile
from fleet_console.records.client import Session

Listener = Callable[["SessionStore"], None]


class SessionStore:
    """
    One instance per process, created at startup and handed to every consumer.
    Properties are read-only; listeners run synchronously after each mutation.
    """

    def __init__(self) -> None:
        self._session: Session | None = None
        self._profile: Profile | None = None
        self._listeners: list[Listener] = []

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def profile(self) -> Profile | None:
        return self._profile

    @property
    def is_admin(self) -> bool:
        return self._profile is not None and self._profile.is_admin

    def has_session(self, now: datetime | None = None) -> bool:
        return self._session is not None and not self._session.expired(now)

    def set_profile(self, profile: Profile | None) -> None:
        self._profile = profile
        self._notify()

    def sign_in(self, session: Session, profile: Profile) -> None:
        self._session = session
        self._profile = profile
        self._notify()

    def sign_out(self) -> None:
        self._session = None
        self._profile = None
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
