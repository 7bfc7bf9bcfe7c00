"""
fleet_console.api.routers.auth

Password sign-in and account endpoints under `/auth/v1`.

Responsibilities:
- Exchange email/password for a session token.
- Report the user behind a token.
- Change a password (self, or any user for admins).
"""

from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY,
)

from fleet_console.api.deps import db_session, settings_dep
from fleet_console.auth.deps import current_principal
from fleet_console.auth.jwt import JwtConfig, issue_token
from fleet_console.auth.models import Principal
from fleet_console.auth.passwords import verify_password
from fleet_console.db.repositories.profiles import CredentialRepo, ProfileRepo
from fleet_console.observability.logging import get_logger
from fleet_console.settings import Settings

router = APIRouter(prefix="/auth/v1", tags=["auth"])
log = get_logger(__name__)


class TokenRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1)


class AuthUserResponse(BaseModel):
    id: str
    email: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: AuthUserResponse


class PasswordChangeRequest(BaseModel):
    password: str


@router.post("/token", response_model=TokenResponse)
async def sign_in_with_password(
    body: TokenRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> TokenResponse:
    profile = await ProfileRepo(session).get_by_email(body.email)
    password_hash = await CredentialRepo(session).get_hash(profile.id) if profile else None
    if profile is None or password_hash is None or not verify_password(body.password, password_hash):
        log.info("sign_in_rejected", email=body.email)
        # Same response for unknown email and wrong password.
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Invalid login credentials")

    issued = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=profile.id,
        email=profile.email,
        role=profile.role.value,
        ttl=timedelta(minutes=settings.session_ttl_minutes),
    )
    log.info("sign_in", user_id=profile.id)
    return TokenResponse(
        access_token=issued.access_token,
        expires_at=issued.expires_at,
        user=AuthUserResponse(id=profile.id, email=profile.email),
    )


@router.get("/user", response_model=AuthUserResponse)
async def get_user(principal: Principal = Depends(current_principal)) -> AuthUserResponse:
    return AuthUserResponse(id=principal.subject, email=principal.email)


@router.put("/users/{user_id}/password")
async def change_password(
    user_id: str,
    body: PasswordChangeRequest,
    principal: Principal = Depends(current_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, str]:
    if not (principal.is_admin or principal.owns(user_id)):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
    if len(body.password) < settings.min_password_length:
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Password must be at least {settings.min_password_length} characters",
        )
    if await ProfileRepo(session).get(user_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")

    await CredentialRepo(session).set_password(user_id, body.password)
    await session.commit()
    log.info("password_changed", user_id=user_id, actor=principal.subject)
    return {"status": "ok"}
