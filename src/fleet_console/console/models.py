"""
fleet_console.console.models

Console-side record snapshots built from record-store rows.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fleet_console.auth.models import Role


class Profile(BaseModel):
    """
    Point-in-time copy of a `profiles` row. Extra columns (timestamps) are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    full_name: str
    email: str
    role: Role
    badge_number: str | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Profile:
        return cls.model_validate(record)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


class ProfileDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=256)
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role = Role.user
    badge_number: str | None = Field(default=None, max_length=64)


class VehicleDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    unit_number: str = Field(min_length=1, max_length=32)
    make: str = Field(min_length=1, max_length=64)
    model: str = Field(min_length=1, max_length=64)
    year: int = Field(ge=1900, le=2100)
    plate_number: str | None = Field(default=None, max_length=16)
    status: str = Field(default="active", pattern=r"^(active|maintenance|retired)$")
