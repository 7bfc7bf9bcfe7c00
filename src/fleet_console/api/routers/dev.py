from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from fleet_console.api.deps import db_session, settings_dep
from fleet_console.auth.models import Role
from fleet_console.db.repositories.profiles import CredentialRepo, ProfileRepo
from fleet_console.observability.logging import get_logger
from fleet_console.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])
log = get_logger(__name__)


class BootstrapAdminRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=256)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1)
    badge_number: str | None = Field(default=None, max_length=64)


@router.post("/bootstrap-admin", status_code=HTTP_201_CREATED)
async def bootstrap_admin(
    body: BootstrapAdminRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, str]:
    # Only writers can create profiles, so the very first admin has to come from here.
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    profiles = ProfileRepo(session)
    if await profiles.count() > 0:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Profiles already exist")

    admin = await profiles.insert(
        {
            "full_name": body.full_name,
            "email": body.email,
            "role": Role.admin,
            "badge_number": body.badge_number,
        }
    )
    await CredentialRepo(session).set_password(admin.id, body.password)
    await session.commit()
    log.info("admin_bootstrapped", user_id=admin.id)
    return {"id": admin.id}
