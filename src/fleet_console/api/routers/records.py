"""
fleet_console.api.routers.records

Table-oriented REST surface under `/rest/v1/{resource}`.

Responsibilities:
- Select rows with an explicit field projection (`?select=id,full_name`).
- Fetch, insert, patch and delete single rows by id.
- Enforce row-level rules: any signed-in user reads, only admins write.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
)

from fleet_console.api.deps import db_session, settings_dep
from fleet_console.auth.deps import current_principal, require_admin
from fleet_console.auth.models import Principal, Role
from fleet_console.db.base import Base
from fleet_console.db.models import Profile, Vehicle, VehicleStatus
from fleet_console.db.repositories.profiles import CredentialRepo, ProfileRepo
from fleet_console.db.repositories.records import TableRepo, row_to_dict
from fleet_console.observability.logging import get_logger
from fleet_console.settings import Settings

router = APIRouter(prefix="/rest/v1", tags=["records"])
log = get_logger(__name__)


class ProfileInsert(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(default=None, min_length=1, max_length=36)
    full_name: str = Field(min_length=1, max_length=256)
    email: str = Field(min_length=3, max_length=320)
    role: Role = Role.user
    badge_number: str | None = Field(default=None, max_length=64)
    # Stored as a bcrypt credential, never as a profile column.
    password: str | None = None


class ProfilePatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, min_length=1, max_length=256)
    email: str | None = Field(default=None, min_length=3, max_length=320)
    role: Role | None = None
    badge_number: str | None = Field(default=None, max_length=64)


class VehicleInsert(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(default=None, min_length=1, max_length=36)
    unit_number: str = Field(min_length=1, max_length=32)
    make: str = Field(min_length=1, max_length=64)
    model: str = Field(min_length=1, max_length=64)
    year: int = Field(ge=1900, le=2100)
    plate_number: str | None = Field(default=None, max_length=16)
    status: VehicleStatus = VehicleStatus.active


class VehiclePatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    unit_number: str | None = Field(default=None, min_length=1, max_length=32)
    make: str | None = Field(default=None, min_length=1, max_length=64)
    model: str | None = Field(default=None, min_length=1, max_length=64)
    year: int | None = Field(default=None, ge=1900, le=2100)
    plate_number: str | None = Field(default=None, max_length=16)
    status: VehicleStatus | None = None


@dataclass(frozen=True, slots=True)
class ResourceSpec:
    model: type[Base]
    fields: tuple[str, ...]
    insert_model: type[BaseModel]
    patch_model: type[BaseModel]


RESOURCES: dict[str, ResourceSpec] = {
    "profiles": ResourceSpec(
        model=Profile,
        fields=("id", "full_name", "email", "role", "badge_number", "created_at", "updated_at"),
        insert_model=ProfileInsert,
        patch_model=ProfilePatch,
    ),
    "vehicles": ResourceSpec(
        model=Vehicle,
        fields=(
            "id",
            "unit_number",
            "make",
            "model",
            "year",
            "plate_number",
            "status",
            "created_at",
            "updated_at",
        ),
        insert_model=VehicleInsert,
        patch_model=VehiclePatch,
    ),
}


def _resource(name: str) -> ResourceSpec:
    spec = RESOURCES.get(name)
    if spec is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=f"Unknown resource: {name}")
    return spec


def _repo(name: str, session: AsyncSession) -> TableRepo[Any]:
    if name == "profiles":
        return ProfileRepo(session)
    return TableRepo(session, _resource(name).model)


def _parse_select(spec: ResourceSpec, select: str) -> tuple[str, ...]:
    if select.strip() in ("", "*"):
        return spec.fields
    requested = tuple(f.strip() for f in select.split(",") if f.strip())
    unknown = [f for f in requested if f not in spec.fields]
    if unknown:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail=f"Unknown field(s): {', '.join(unknown)}"
        )
    return requested


def _validate(model: type[BaseModel], body: dict[str, Any]) -> BaseModel:
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e


@router.get("/{resource}")
async def select_rows(
    resource: str,
    select: str = Query(default="*"),
    _: Principal = Depends(current_principal),
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    fields = _parse_select(_resource(resource), select)
    return await _repo(resource, session).list(fields)


@router.get("/{resource}/{record_id}")
async def get_row(
    resource: str,
    record_id: str,
    select: str = Query(default="*"),
    _: Principal = Depends(current_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    fields = _parse_select(_resource(resource), select)
    row = await _repo(resource, session).get(record_id)
    if row is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Row not found")
    return row_to_dict(row, fields)


@router.post("/{resource}", status_code=HTTP_201_CREATED)
async def insert_row(
    resource: str,
    body: dict[str, Any],
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, str]:
    spec = _resource(resource)
    values = _validate(spec.insert_model, body).model_dump(exclude_none=True)
    password = values.pop("password", None)
    if password is not None and len(password) < settings.min_password_length:
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Password must be at least {settings.min_password_length} characters",
        )

    try:
        row = await _repo(resource, session).insert(values)
        if password is not None:
            await CredentialRepo(session).set_password(row.id, password)  # type: ignore[attr-defined]
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Duplicate record") from e

    log.info("row_inserted", resource=resource, record_id=row.id, actor=principal.subject)  # type: ignore[attr-defined]
    return {"id": row.id}  # type: ignore[attr-defined]


@router.patch("/{resource}/{record_id}")
async def update_row(
    resource: str,
    record_id: str,
    body: dict[str, Any],
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, str]:
    spec = _resource(resource)
    patch = _validate(spec.patch_model, body).model_dump(exclude_unset=True)
    try:
        row = await _repo(resource, session).update(record_id, patch)
        if row is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Row not found")
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Duplicate record") from e

    log.info("row_updated", resource=resource, record_id=record_id, actor=principal.subject)
    return {"status": "ok"}


@router.delete("/{resource}/{record_id}")
async def delete_row(
    resource: str,
    record_id: str,
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, str]:
    _resource(resource)
    deleted = await _repo(resource, session).delete(record_id)
    if not deleted:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Row not found")
    await session.commit()
    log.info("row_deleted", resource=resource, record_id=record_id, actor=principal.subject)
    return {"status": "ok"}


# --- Module Notes -----------------------------------------------------------
# Patches use exclude_unset so an explicit `"badge_number": null` clears the column
# while omitted keys are left untouched.
