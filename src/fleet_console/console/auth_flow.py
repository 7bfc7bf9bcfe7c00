"""
fleet_console.console.auth_flow

Sign-in, sign-out and session restore against the record store.

Responsibilities:
- Exchange credentials for a session and load the caller's profile row.
- Populate or clear the session store through its named operations only.
"""

from __future__ import annotations

from fleet_console.console.models import Profile
from fleet_console.console.session_store import SessionStore
from fleet_console.observability.logging import get_logger
from fleet_console.records.client import PROFILES, RecordStore, RecordStoreError

log = get_logger(__name__)


class AuthFlow:
    def __init__(self, *, store: SessionStore, records: RecordStore) -> None:
        self._store = store
        self._records = records

    async def sign_in(self, email: str, password: str) -> Profile:
        """
        Raises `AuthenticationFailed` for bad credentials. If the profile row cannot be
        loaded the half-open session is discarded and the store stays signed out.
        """

        session = await self._records.sign_in_with_password(email, password)
        try:
            profile = Profile.from_record(await self._records.get_by_id(PROFILES, session.user_id))
        except RecordStoreError:
            await self._records.sign_out()
            log.error("sign_in_profile_missing", user_id=session.user_id)
            raise

        self._store.sign_in(session, profile)
        log.info("signed_in", user_id=profile.id, role=profile.role.value)
        return profile

    async def restore(self) -> bool:
        session = await self._records.get_current_session()
        if session is None:
            self._store.sign_out()
            return False
        try:
            profile = Profile.from_record(await self._records.get_by_id(PROFILES, session.user_id))
        except RecordStoreError as e:
            log.warning("session_restore_failed", user_id=session.user_id, error=str(e))
            await self._records.sign_out()
            self._store.sign_out()
            return False

        self._store.sign_in(session, profile)
        return True

    async def sign_out(self) -> None:
        await self._records.sign_out()
        self._store.sign_out()
        log.info("signed_out")
