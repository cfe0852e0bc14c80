"""
server_fleet.db.repositories.databases

Repository for `Database` records.

Responsibilities:
- Create database records for a server on a host.
- List a server's databases in a stable order (by id), host eagerly loaded.
- Remove a single database row by id.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from server_fleet.db.models import Database


class DatabaseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        server_id: int,
        database_host_id: int,
        database: str,
        username: str,
        password: str,
        remote: str = "%",
        max_connections: int | None = 0,
    ) -> Database:
        db = Database(
            server_id=server_id,
            database_host_id=database_host_id,
            database=database,
            username=username,
            password=password,
            remote=remote,
            max_connections=max_connections,
        )
        self._session.add(db)
        await self._session.flush()
        return db

    async def list_for_server(self, server_id: int) -> list[Database]:
        stmt = (
            select(Database)
            .where(Database.server_id == server_id)
            .options(selectinload(Database.host))
            .order_by(Database.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, database_id: int, *, missing_ok: bool = False) -> None:
        result = await self._session.execute(delete(Database).where(Database.id == database_id))
        if result.rowcount != 1 and not missing_ok:
            raise LookupError(f"database {database_id} was not present in the local store")


# --- Module Notes -----------------------------------------------------------
# `list_for_server` ordering defines the order the deletion service walks a server's databases.
