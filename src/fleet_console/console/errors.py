"""
fleet_console.console.errors

Console failure taxonomy.

Operation failures (`FetchFailure`, `DeleteFailure`, `SilentRefreshFailure`) are
never raised to the view layer: controllers build them at the operation boundary,
log them and keep the latest one on `last_failure`. The remaining classes are
raised for programming/usage errors (wrong role, editor misuse, invalid input).
"""

from __future__ import annotations

FETCH_FAILED_MESSAGE = "Failed to fetch user profiles."
DELETE_FAILED_MESSAGE = "Failed to delete user profile."


class ConsoleFailure(Exception):
    message: str = "Operation failed."

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(self.message)
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cause={self.cause!r})"


class FetchFailure(ConsoleFailure):
    message = FETCH_FAILED_MESSAGE


class DeleteFailure(ConsoleFailure):
    message = DELETE_FAILED_MESSAGE

    def __init__(self, record_id: str, cause: BaseException | None = None) -> None:
        super().__init__(cause)
        self.record_id = record_id


class SilentRefreshFailure(ConsoleFailure):
    message = "Failed to refresh the signed-in profile."

    def __init__(self, stage: str, cause: BaseException | None = None) -> None:
        super().__init__(cause)
        self.stage = stage


class AccessDenied(Exception):
    pass


class EditorBusy(Exception):
    pass


class EditorClosed(Exception):
    pass


class EditorValidationError(ValueError):
    pass
