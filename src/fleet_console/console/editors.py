"""
fleet_console.console.editors

Record editors: short-lived, modal-bounded editing sessions for one record.

Responsibilities:
- Validate user input and perform one remote write per successful `submit`.
- Report back through two callbacks: `on_complete` (awaited, after the write
  succeeds) and then `on_close`. `cancel` invokes `on_close` only.
- Refuse any use once closed, and close after a successful write even when
  `on_complete` raises.

A failed write or invalid input leaves the editor open so the user can retry.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from fleet_console.auth.models import Role
from fleet_console.console.errors import EditorBusy, EditorClosed, EditorValidationError
from fleet_console.console.models import Profile, ProfileDraft, VehicleDraft
from fleet_console.observability.logging import get_logger
from fleet_console.records.client import PROFILES, VEHICLES, RecordStore

log = get_logger(__name__)

OnClose = Callable[[], None]
OnComplete = Callable[[], Awaitable[None]]

DEFAULT_MIN_PASSWORD_LENGTH = 6


class RecordEditor:
    def __init__(
        self,
        records: RecordStore,
        *,
        initial: Profile | None,
        on_close: OnClose,
        on_complete: OnComplete,
    ) -> None:
        self._records = records
        self._initial = initial
        self._on_close = on_close
        self._on_complete = on_complete
        self._open = True
        self._submitting = False
        self._committed = False

    @property
    def initial(self) -> Profile | None:
        return self._initial

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def committed(self) -> bool:
        return self._committed

    def cancel(self) -> None:
        self._close()

    async def _commit(self, write: Callable[[], Awaitable[None]]) -> None:
        if not self._open or self._committed:
            raise EditorClosed(type(self).__name__)
        if self._submitting:
            raise EditorBusy(f"{type(self).__name__} is already submitting")

        self._submitting = True
        try:
            await write()
        finally:
            self._submitting = False

        # The write has landed: no retry may repeat it, whatever `on_complete` does.
        self._committed = True
        try:
            await self._on_complete()
        finally:
            self._close()

    def _close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._on_close()


class ProfileEditor(RecordEditor):
    """
    Create mode when opened without an initial profile, edit mode otherwise.
    """

    def __init__(
        self,
        records: RecordStore,
        *,
        initial: Profile | None,
        on_close: OnClose,
        on_complete: OnComplete,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ) -> None:
        super().__init__(records, initial=initial, on_close=on_close, on_complete=on_complete)
        self._min_password_length = min_password_length

    @property
    def creating(self) -> bool:
        return self._initial is None

    async def submit(
        self,
        *,
        full_name: str,
        email: str,
        role: Role | str = Role.user,
        badge_number: str | None = None,
        password: str | None = None,
    ) -> None:
        draft = _validate(
            ProfileDraft,
            {"full_name": full_name, "email": email, "role": role, "badge_number": badge_number or None},
        )
        record: dict[str, Any] = draft.model_dump(mode="json")

        if self._initial is None:
            if not password or len(password) < self._min_password_length:
                raise EditorValidationError(
                    f"Password must be at least {self._min_password_length} characters"
                )

            async def write() -> None:
                await self._records.insert(PROFILES, {**record, "password": password})
                log.info("profile_created", email=record["email"], role=record["role"])

        else:
            target_id = self._initial.id

            async def write() -> None:
                await self._records.update(PROFILES, target_id, record)
                log.info("profile_updated", record_id=target_id)

        await self._commit(write)


class PasswordEditor(RecordEditor):
    def __init__(
        self,
        records: RecordStore,
        *,
        initial: Profile,
        on_close: OnClose,
        on_complete: OnComplete,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ) -> None:
        super().__init__(records, initial=initial, on_close=on_close, on_complete=on_complete)
        self._target: Profile = initial
        self._min_password_length = min_password_length

    @property
    def target(self) -> Profile:
        return self._target

    async def submit(self, *, new_password: str, confirm_password: str) -> None:
        if len(new_password) < self._min_password_length:
            raise EditorValidationError(
                f"Password must be at least {self._min_password_length} characters"
            )
        if new_password != confirm_password:
            raise EditorValidationError("Passwords do not match")

        target_id = self._target.id

        async def write() -> None:
            await self._records.update_password(target_id, new_password)
            log.info("password_reset", record_id=target_id)

        await self._commit(write)


class VehicleEditor(RecordEditor):
    def __init__(
        self,
        records: RecordStore,
        *,
        on_close: OnClose,
        on_complete: OnComplete,
    ) -> None:
        super().__init__(records, initial=None, on_close=on_close, on_complete=on_complete)

    async def submit(
        self,
        *,
        unit_number: str,
        make: str,
        model: str,
        year: int,
        plate_number: str | None = None,
        status: str = "active",
    ) -> None:
        draft = _validate(
            VehicleDraft,
            {
                "unit_number": unit_number,
                "make": make,
                "model": model,
                "year": year,
                "plate_number": plate_number or None,
                "status": status,
            },
        )
        record = draft.model_dump(mode="json")

        async def write() -> None:
            await self._records.insert(VEHICLES, record)
            log.info("vehicle_created", unit_number=record["unit_number"])

        await self._commit(write)


def _validate(model, data: dict[str, Any]):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise EditorValidationError(str(e)) from e
