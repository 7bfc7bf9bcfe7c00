"""
fleet_console.db.repositories.profiles

Repositories for `Profile` and its `Credential`.
"""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_console.auth.passwords import hash_password
from fleet_console.db.models import Credential, Profile
from fleet_console.db.repositories.records import TableRepo


class ProfileRepo(TableRepo[Profile]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Profile)

    async def get_by_email(self, email: str) -> Profile | None:
        stmt = select(Profile).where(func.lower(Profile.email) == email.strip().lower())
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def count(self) -> int:
        return int((await self._session.execute(select(func.count(Profile.id)))).scalar_one())

    async def delete(self, record_id: str) -> bool:
        # SQLite does not enforce ON DELETE CASCADE unless the pragma is on; clear credentials explicitly.
        await self._session.execute(delete(Credential).where(Credential.user_id == record_id))
        return await super().delete(record_id)


class CredentialRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_hash(self, user_id: str) -> str | None:
        cred = await self._session.get(Credential, user_id)
        return cred.password_hash if cred is not None else None

    async def set_password(self, user_id: str, plaintext: str) -> None:
        cred = await self._session.get(Credential, user_id, with_for_update=True)
        if cred is None:
            self._session.add(Credential(user_id=user_id, password_hash=hash_password(plaintext)))
        else:
            cred.password_hash = hash_password(plaintext)
        await self._session.flush()
