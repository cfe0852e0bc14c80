from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from server_fleet.db.models import Database, DatabaseHost


class DatabaseHostRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        host: str,
        username: str,
        password: str,
        port: int = 3306,
        node_id: int | None = None,
    ) -> DatabaseHost:
        db_host = DatabaseHost(
            name=name,
            host=host,
            port=port,
            username=username,
            password=password,
            node_id=node_id,
        )
        self._session.add(db_host)
        await self._session.flush()
        return db_host

    async def get(
        self, host_id: int, *, with_databases: bool = False, with_node: bool = False
    ) -> DatabaseHost | None:
        stmt = select(DatabaseHost).where(DatabaseHost.id == host_id)
        if with_databases:
            # database_view reads db.host, so the back reference is loaded as well.
            stmt = stmt.options(
                selectinload(DatabaseHost.databases).selectinload(Database.host)
            )
        if with_node:
            stmt = stmt.options(selectinload(DatabaseHost.node))
        return (await self._session.execute(stmt)).scalar_one_or_none()
