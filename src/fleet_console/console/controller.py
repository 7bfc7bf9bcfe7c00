"""
fleet_console.console.controller

Settings screen controllers.

Responsibilities:
- `AdminSettings`: own the profiles collection (fetch, delete, reconcile after
  edits) and open record editors for create/edit/password reset/vehicle creation.
- `AccountSettings`: the non-admin surface; only self password update, followed
  by a best-effort re-sync of the signed-in profile into the session store.
- `open_settings`: pick the surface from the admin predicate, so management
  operations are never reachable for non-admins.

Remote failures are caught here, logged with their cause, and turned into the
fixed banner messages on `state`; they are never raised to the view layer.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import ValidationError

from fleet_console.console.access import can_reset_password, is_admin
from fleet_console.console.editors import (
    DEFAULT_MIN_PASSWORD_LENGTH,
    PasswordEditor,
    ProfileEditor,
    RecordEditor,
    VehicleEditor,
)
from fleet_console.console.errors import (
    AccessDenied,
    ConsoleFailure,
    DeleteFailure,
    EditorBusy,
    FetchFailure,
    SilentRefreshFailure,
)
from fleet_console.console.models import Profile
from fleet_console.console.session_store import SessionStore
from fleet_console.console.state import (
    NO_EDITOR,
    Creating,
    CreatingVehicle,
    Editing,
    EditorState,
    Error,
    Idle,
    LoadState,
    Loaded,
    Loading,
    ResettingPassword,
)
from fleet_console.observability.logging import get_logger
from fleet_console.records.client import PROFILE_FIELDS, PROFILES, RecordStore, RecordStoreError

log = get_logger(__name__)

DELETE_CONFIRMATION = "Are you sure you want to delete this profile?"

Confirm = Callable[[str], bool | Awaitable[bool]]
VehicleHook = Callable[[], Awaitable[None]]
E = TypeVar("E", bound=RecordEditor)


class _EditorHost:
    """
    Holds the one open editor and its tagged state for a controller instance.
    """

    def __init__(self, records: RecordStore, *, min_password_length: int) -> None:
        self._records = records
        self._min_password_length = min_password_length
        self._editor: RecordEditor | None = None
        self._editor_state: EditorState = NO_EDITOR
        self._active = True
        self.last_failure: ConsoleFailure | None = None

    @property
    def editor(self) -> RecordEditor | None:
        return self._editor

    @property
    def editor_state(self) -> EditorState:
        return self._editor_state

    @property
    def active(self) -> bool:
        return self._active

    def unmount(self) -> None:
        # In-flight calls may still resolve; `_active` makes their state writes no-ops.
        self._active = False
        self._editor = None
        self._editor_state = NO_EDITOR

    def _open(self, state: EditorState, build: Callable[..., E], **kwargs: Any) -> E:
        if self._editor is not None:
            raise EditorBusy(f"{type(self._editor_state).__name__} editor is already open")

        def on_close() -> None:
            if self._editor is editor:
                self._editor = None
                self._editor_state = NO_EDITOR

        editor = build(self._records, on_close=on_close, **kwargs)
        self._editor = editor
        self._editor_state = state
        return editor


class AdminSettings(_EditorHost):
    def __init__(
        self,
        *,
        store: SessionStore,
        records: RecordStore,
        confirm: Confirm,
        on_vehicle_created: VehicleHook | None = None,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ) -> None:
        super().__init__(records, min_password_length=min_password_length)
        self._store = store
        self._confirm = confirm
        self._on_vehicle_created = on_vehicle_created
        self._state: LoadState = Idle()
        self._profiles: tuple[Profile, ...] = ()
        self._fetch_seq = 0

    # -- read API -----------------------------------------------------------

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def profiles(self) -> tuple[Profile, ...]:
        return self._profiles

    @property
    def loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def error(self) -> str | None:
        return self._state.message if isinstance(self._state, Error) else None

    # -- lifecycle ----------------------------------------------------------

    async def mount(self) -> None:
        self._require_admin()
        await self.fetch_all()

    # -- collection ---------------------------------------------------------

    async def fetch_all(self) -> None:
        self._require_admin()
        self._fetch_seq += 1
        seq = self._fetch_seq
        self._state = Loading()

        try:
            rows = await self._records.select_all(PROFILES, PROFILE_FIELDS)
            profiles = tuple(Profile.from_record(r) for r in rows or ())
        except (RecordStoreError, ValidationError) as e:
            if self._is_current(seq):
                self._fail_fetch(e)
            return

        if not self._is_current(seq):
            log.debug("profiles_fetch_discarded", seq=seq, latest=self._fetch_seq)
            return
        self._profiles = profiles
        self._state = Loaded()
        self.last_failure = None
        self._sync_own_profile()

    async def delete(self, record_id: str) -> bool:
        self._require_admin()
        if self._find(record_id) is None:
            return False
        if not await self._ask(DELETE_CONFIRMATION):
            return False

        self._state = Loading()
        try:
            await self._records.delete_by_id(PROFILES, record_id)
        except RecordStoreError as e:
            if self._active:
                failure = DeleteFailure(record_id, e)
                self.last_failure = failure
                log.error("profile_delete_failed", record_id=record_id, error=str(e))
                self._state = Error(failure.message)
            return False

        if not self._active:
            return True
        self._profiles = tuple(p for p in self._profiles if p.id != record_id)
        self._state = Loaded()
        log.info("profile_deleted", record_id=record_id)
        await self.fetch_all()
        return True

    # -- editors ------------------------------------------------------------

    def begin_create(self) -> ProfileEditor:
        self._require_admin()
        return self._open(
            Creating(),
            ProfileEditor,
            initial=None,
            on_complete=self.fetch_all,
            min_password_length=self._min_password_length,
        )

    def begin_edit(self, profile: Profile) -> ProfileEditor | None:
        self._require_admin()
        current = self._find(profile.id)
        if current is None:
            return None
        return self._open(
            Editing(current),
            ProfileEditor,
            initial=current,
            on_complete=self.fetch_all,
            min_password_length=self._min_password_length,
        )

    def begin_password_reset(self, profile: Profile) -> PasswordEditor | None:
        self._require_admin()
        current = self._find(profile.id)
        if current is None or not can_reset_password(self._store, current):
            return None
        return self._open(
            ResettingPassword(current),
            PasswordEditor,
            initial=current,
            on_complete=self.fetch_all,
            min_password_length=self._min_password_length,
        )

    def begin_create_vehicle(self) -> VehicleEditor:
        self._require_admin()
        return self._open(CreatingVehicle(), VehicleEditor, on_complete=self._vehicle_created)

    async def _vehicle_created(self) -> None:
        # Extension point: there is no vehicle list on this screen to refresh.
        if self._on_vehicle_created is not None:
            await self._on_vehicle_created()

    # -- internals ----------------------------------------------------------

    def _require_admin(self) -> None:
        if not is_admin(self._store):
            raise AccessDenied("admin role required")

    def _is_current(self, seq: int) -> bool:
        return self._active and seq == self._fetch_seq

    def _fail_fetch(self, cause: BaseException) -> None:
        failure = FetchFailure(cause)
        self.last_failure = failure
        log.error("profiles_fetch_failed", error=str(cause))
        self._profiles = ()
        self._state = Error(failure.message)

    def _find(self, record_id: str) -> Profile | None:
        return next((p for p in self._profiles if p.id == record_id), None)

    def _sync_own_profile(self) -> None:
        # Keep the store's copy of the signed-in admin in step with the server; an
        # admin who demotes themselves loses access on the next operation.
        own = self._store.profile
        if own is None:
            return
        fresh = self._find(own.id)
        if fresh is not None and fresh != own:
            self._store.set_profile(fresh)

    async def _ask(self, prompt: str) -> bool:
        answer = self._confirm(prompt)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)


class AccountSettings(_EditorHost):
    def __init__(
        self,
        *,
        store: SessionStore,
        records: RecordStore,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ) -> None:
        super().__init__(records, min_password_length=min_password_length)
        self._store = store

    def update_password(self) -> PasswordEditor:
        own = self._store.profile
        if own is None or not can_reset_password(self._store, own):
            raise AccessDenied("sign in required")
        return self._open(
            ResettingPassword(own),
            PasswordEditor,
            initial=own,
            on_complete=self.refresh_own_profile,
            min_password_length=self._min_password_length,
        )

    async def refresh_own_profile(self) -> Profile | None:
        """
        Re-sync the signed-in profile after a password change.

        Three stages (session, user, profile row), each failing independently.
        A failure is logged and recorded on `last_failure`; the store keeps its
        previous profile and the password change still counts as done.
        """

        session = await self._stage("session", self._records.get_current_session)
        if session is None:
            return None
        user = await self._stage("user", self._records.get_current_user)
        if user is None:
            return None
        row = await self._stage("profile", lambda: self._records.get_by_id(PROFILES, user.id))
        if row is None:
            return None

        try:
            profile = Profile.from_record(row)
        except ValidationError as e:
            self._silent_failure("profile", e)
            return None
        # The store outlives this screen, so the refresh lands even after unmount.
        self._store.set_profile(profile)
        log.info("own_profile_refreshed", user_id=profile.id)
        return profile

    async def _stage(self, name: str, call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            result = await call()
        except RecordStoreError as e:
            self._silent_failure(name, e)
            return None
        if result is None:
            log.warning("profile_refresh_skipped", stage=name)
        return result

    def _silent_failure(self, stage: str, cause: BaseException) -> None:
        failure = SilentRefreshFailure(stage, cause)
        if self.active:
            self.last_failure = failure
        log.warning("profile_refresh_failed", stage=stage, error=str(cause))


def open_settings(
    *,
    store: SessionStore,
    records: RecordStore,
    confirm: Confirm,
    on_vehicle_created: VehicleHook | None = None,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
) -> AdminSettings | AccountSettings:
    if not store.has_session():
        raise AccessDenied("sign in required")
    if is_admin(store):
        return AdminSettings(
            store=store,
            records=records,
            confirm=confirm,
            on_vehicle_created=on_vehicle_created,
            min_password_length=min_password_length,
        )
    return AccountSettings(store=store, records=records, min_password_length=min_password_length)


# --- Module Notes -----------------------------------------------------------
# Fetches are numbered; only the most recently issued one may write the collection,
# so a slow early response cannot overwrite a newer list.
