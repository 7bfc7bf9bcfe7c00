"""
fleet_console.db.init_db

DB initialization helpers (dev/test convenience).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from fleet_console.db import models  # noqa: F401  # register tables on Base.metadata
from fleet_console.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Create the profiles/credentials/vehicles tables if they don't exist.
    Production deployments run Alembic migrations instead.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
