"""
server_fleet.api.routers.database_hosts

Read-only view of database hosts for panel administrators.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from server_fleet.api.deps import db_session
from server_fleet.api.routers.servers import DatabaseResponse, database_view, parse_includes
from server_fleet.auth.deps import require_roles
from server_fleet.auth.models import ROLE_SERVER_ADMIN
from server_fleet.db.repositories.database_hosts import DatabaseHostRepo
from server_fleet.errors import NotFoundError

router = APIRouter(
    prefix="/v1/database-hosts",
    tags=["database-hosts"],
    dependencies=[Depends(require_roles(ROLE_SERVER_ADMIN))],
)


class NodeResponse(BaseModel):
    id: int
    name: str
    fqdn: str
    scheme: str
    daemon_listen: int


class DatabaseHostResponse(BaseModel):
    id: int
    name: str
    host: str
    port: int
    username: str
    node: int | None
    created_at: datetime
    updated_at: datetime
    databases: list[DatabaseResponse] | None = None
    # Populated by `include=node`; `node` itself stays the plain id.
    node_details: NodeResponse | None = None


@router.get("/{host_id}", response_model=DatabaseHostResponse)
async def get_database_host(
    host_id: int,
    include: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> DatabaseHostResponse:
    includes = parse_includes(include, allowed=frozenset({"databases", "node"}))
    host = await DatabaseHostRepo(session).get(
        host_id, with_databases="databases" in includes, with_node="node" in includes
    )
    if host is None:
        raise NotFoundError("database host", host_id)

    databases = None
    if "databases" in includes:
        databases = [database_view(db, with_password=False) for db in host.databases]

    node_details = None
    if "node" in includes and host.node is not None:
        node = host.node
        node_details = NodeResponse(
            id=node.id,
            name=node.name,
            fqdn=node.fqdn,
            scheme=node.scheme,
            daemon_listen=node.daemon_listen,
        )

    return DatabaseHostResponse(
        id=host.id,
        name=host.name,
        host=host.host,
        port=host.port,
        username=host.username,
        node=host.node_id,
        created_at=host.created_at,
        updated_at=host.updated_at,
        databases=databases,
        node_details=node_details,
    )
