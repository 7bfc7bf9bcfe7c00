"""
fleet_console.db.repositories.records

Table-generic repository behind the `/rest/v1/{resource}` surface.

Responsibilities:
- Project rows onto a requested field list.
- Insert/patch/delete rows by primary key for one mapped table.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_console.db.base import Base

M = TypeVar("M", bound=Base)


def row_to_dict(row: Base, fields: Sequence[str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name in fields:
        value = getattr(row, name)
        # Enums are StrEnum subclasses; emit their plain value.
        out[name] = value.value if hasattr(value, "value") else value
    return out


class TableRepo(Generic[M]):
    def __init__(self, session: AsyncSession, model: type[M]) -> None:
        self._session = session
        self._model = model

    async def list(self, fields: Sequence[str]) -> list[dict[str, Any]]:
        stmt = select(self._model).order_by(self._model.created_at)  # type: ignore[attr-defined]
        rows = (await self._session.execute(stmt)).scalars().all()
        return [row_to_dict(r, fields) for r in rows]

    async def get(self, record_id: str) -> M | None:
        return await self._session.get(self._model, record_id)

    async def insert(self, values: dict[str, Any]) -> M:
        row = self._model(**values)
        self._session.add(row)
        await self._session.flush()
        return row

    async def update(self, record_id: str, patch: dict[str, Any]) -> M | None:
        row = await self._session.get(self._model, record_id, with_for_update=True)
        if row is None:
            return None
        for key, value in patch.items():
            setattr(row, key, value)
        await self._session.flush()
        return row

    async def delete(self, record_id: str) -> bool:
        pk = self._model.id  # type: ignore[attr-defined]
        result = await self._session.execute(delete(self._model).where(pk == record_id))
        return bool(result.rowcount)
