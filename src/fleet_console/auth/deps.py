"""
fleet_console.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer session token into a typed `Principal`.
- Enforce the admin role against the caller's *current* profile row.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from fleet_console.api.deps import db_session, settings_dep
from fleet_console.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from fleet_console.auth.models import Principal, Role
from fleet_console.db.repositories.profiles import ProfileRepo
from fleet_console.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    subject = str(payload.get("sub", ""))
    if not subject:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token subject")
    try:
        role = Role(str(payload.get("role", Role.user)))
    except ValueError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token role") from e

    return Principal(subject=subject, email=str(payload.get("email", "")), role=role)


async def current_principal(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> Principal:
    # Re-read the profile: role changes and deletions take effect before the token expires.
    profile = await ProfileRepo(session).get(principal.subject)
    if profile is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return Principal(subject=profile.id, email=profile.email, role=profile.role)


def require_admin(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
    return principal


# --- Module Notes -----------------------------------------------------------
# Reads under /rest/v1 need any signed-in user; writes need `require_admin`.
