"""
server_fleet.db.init_db

Table bootstrap for local development and tests.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from server_fleet.db import models  # noqa: F401  # registers tables on Base.metadata
from server_fleet.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# --- Module Notes -----------------------------------------------------------
# Production deployments run `alembic upgrade head` instead.
