"""
fleet_console.records.http

HTTP implementation of the `RecordStore` contract.

Responsibilities:
- Hold the signed-in session token and attach it to every call.
- Map the table/auth operations onto the record-store service routes.
- Convert transport and status failures into `RecordStoreError` subclasses.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import httpx
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
)

from fleet_console.observability.logging import get_logger
from fleet_console.records.client import (
    AuthenticationFailed,
    AuthUser,
    RecordNotFound,
    RecordStoreError,
    Session,
)
from fleet_console.settings import Settings

log = get_logger(__name__)


class RestRecordStore:
    """
    Talks to `fleet_console.api` over HTTP. The `httpx.AsyncClient` is owned by the
    caller so tests can mount the service in-process with `httpx.ASGITransport`.
    """

    def __init__(self, *, http: httpx.AsyncClient, session: Session | None = None) -> None:
        self._http = http
        self._session = session

    def _authz(self) -> dict[str, str]:
        if self._session is None:
            return {}
        return {"Authorization": f"Bearer {self._session.access_token}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            r = await self._http.request(method, path, headers=self._authz(), **kwargs)
        except httpx.HTTPError as e:
            raise RecordStoreError(f"{method} {path} failed: {e}") from e

        if r.is_success:
            return r
        detail = _detail(r)
        if r.status_code == HTTP_404_NOT_FOUND:
            raise RecordNotFound(detail, status_code=r.status_code)
        if r.status_code == HTTP_401_UNAUTHORIZED:
            raise AuthenticationFailed(detail, status_code=r.status_code)
        raise RecordStoreError(detail, status_code=r.status_code)

    # -- tables -------------------------------------------------------------

    async def select_all(self, resource: str, fields: Sequence[str]) -> list[dict[str, Any]]:
        r = await self._request("GET", f"/rest/v1/{resource}", params={"select": ",".join(fields)})
        rows = _json(r) or []
        if not isinstance(rows, list):
            raise RecordStoreError(f"Expected a row list from {resource}", status_code=r.status_code)
        return rows

    async def insert(self, resource: str, record: dict[str, Any]) -> None:
        await self._request("POST", f"/rest/v1/{resource}", json=record)

    async def update(self, resource: str, record_id: str, patch: dict[str, Any]) -> None:
        await self._request("PATCH", f"/rest/v1/{resource}/{record_id}", json=patch)

    async def delete_by_id(self, resource: str, record_id: str) -> None:
        await self._request("DELETE", f"/rest/v1/{resource}/{record_id}")

    async def get_by_id(self, resource: str, record_id: str) -> dict[str, Any]:
        r = await self._request("GET", f"/rest/v1/{resource}/{record_id}")
        row = _json(r)
        if not isinstance(row, dict):
            raise RecordStoreError(f"Expected a row from {resource}", status_code=r.status_code)
        return row

    # -- auth ---------------------------------------------------------------

    async def get_current_session(self) -> Session | None:
        if self._session is not None and self._session.expired():
            log.info("session_expired", user_id=self._session.user_id)
            self._session = None
        return self._session

    async def get_current_user(self) -> AuthUser | None:
        if await self.get_current_session() is None:
            return None
        try:
            r = await self._request("GET", "/auth/v1/user")
        except AuthenticationFailed:
            # Token rejected server side (deleted user, rotated secret): behave as signed out.
            self._session = None
            return None
        body = _json(r)
        try:
            return AuthUser(id=str(body["id"]), email=body.get("email"))
        except (KeyError, TypeError, AttributeError) as e:
            raise RecordStoreError(f"Malformed user body: {e!r}", status_code=r.status_code) from e

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        try:
            r = await self._request(
                "POST", "/auth/v1/token", json={"email": email, "password": password}
            )
        except RecordStoreError as e:
            if e.status_code in (HTTP_400_BAD_REQUEST, HTTP_401_UNAUTHORIZED):
                raise AuthenticationFailed(str(e), status_code=e.status_code) from e
            raise
        body = _json(r)
        try:
            session = Session(
                access_token=body["access_token"],
                user_id=str(body["user"]["id"]),
                expires_at=datetime.fromisoformat(body["expires_at"]) if body.get("expires_at") else None,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RecordStoreError(f"Malformed token body: {e!r}", status_code=r.status_code) from e
        self._session = session
        return self._session

    async def sign_out(self) -> None:
        # Tokens are stateless server side; forgetting the token ends the session.
        self._session = None

    async def update_password(self, user_id: str, password: str) -> None:
        await self._request("PUT", f"/auth/v1/users/{user_id}/password", json={"password": password})


def _json(r: httpx.Response) -> Any:
    # A 2xx from a proxy or captive portal can carry HTML; treat it as a store failure.
    try:
        return r.json()
    except ValueError as e:
        raise RecordStoreError(
            f"Unreadable response body ({r.headers.get('content-type', 'unknown')})",
            status_code=r.status_code,
        ) from e


def _detail(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or f"HTTP {r.status_code}"
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


@asynccontextmanager
async def connect(settings: Settings) -> AsyncIterator[RestRecordStore]:
    async with httpx.AsyncClient(
        base_url=settings.records_base_url.rstrip("/"),
        timeout=settings.http_timeout_seconds,
    ) as http:
        yield RestRecordStore(http=http)


# --- Module Notes -----------------------------------------------------------
# No retries here: a failed console operation shows one banner and the user repeats it.
