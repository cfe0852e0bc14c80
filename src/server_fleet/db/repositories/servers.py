"""
server_fleet.db.repositories.servers

Repository for `Server` records.

Responsibilities:
- Create and fetch servers (with their node eagerly loaded for daemon calls).
- Remove a server row by id.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from server_fleet.db.models import Server


class ServerRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str, node_id: int) -> Server:
        server = Server(name=name, node_id=node_id)
        self._session.add(server)
        await self._session.flush()
        return server

    async def get(self, server_id: int) -> Server | None:
        # The daemon client needs server.node; async sessions cannot lazy-load it later.
        stmt = select(Server).where(Server.id == server_id).options(selectinload(Server.node))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def delete(self, server_id: int) -> None:
        result = await self._session.execute(delete(Server).where(Server.id == server_id))
        if result.rowcount != 1:
            raise LookupError(f"server {server_id} was not present in the local store")
