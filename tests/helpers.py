"""
tests.helpers

Seeding and row-presence helpers shared by the test modules.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from server_fleet.db.models import Database, Server
from server_fleet.db.repositories.database_hosts import DatabaseHostRepo
from server_fleet.db.repositories.databases import DatabaseRepo
from server_fleet.db.repositories.nodes import NodeRepo
from server_fleet.db.repositories.servers import ServerRepo


@dataclass
class Seeded:
    server: Server
    databases: list[Database]


async def seed_server(session: AsyncSession, *, databases: int = 0, name: str = "srv") -> Seeded:
    node = await NodeRepo(session).create(
        name="node-1", fqdn="node1.example.com", daemon_token="node-secret"
    )
    server = await ServerRepo(session).create(name=name, node_id=node.id)
    created: list[Database] = []
    if databases:
        host = await DatabaseHostRepo(session).create(
            name="db-host-1",
            host="10.0.0.5",
            username="admin",
            password="admin-pass",
            node_id=node.id,
        )
        for i in range(databases):
            created.append(
                await DatabaseRepo(session).create(
                    server_id=server.id,
                    database_host_id=host.id,
                    database=f"s{server.id}_db{i}",
                    username=f"u{server.id}_{i}",
                    password=f"pw-{i}",
                )
            )
    await session.commit()

    loaded = await ServerRepo(session).get(server.id)
    assert loaded is not None
    return Seeded(server=loaded, databases=created)


async def row_exists(
    session_factory: async_sessionmaker[AsyncSession], model: type, row_id: int
) -> bool:
    # Fresh session: the answer must come from the store, not an identity map.
    async with session_factory() as s:
        stmt = select(func.count()).select_from(model).where(model.id == row_id)
        return (await s.execute(stmt)).scalar_one() == 1
