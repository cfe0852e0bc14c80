"""
server_fleet.api.routers.servers

Server endpoints for panel administrators.

Responsibilities:
- Delete a server, strictly or forcibly (`/force`).
- List a server's databases, with the password include gated by role.
- Expose the server's audit trail.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT, HTTP_400_BAD_REQUEST

from server_fleet.api.deps import db_session, server_deletion_service
from server_fleet.auth.deps import get_principal, require_roles
from server_fleet.auth.models import ROLE_DATABASE_PASSWORD_VIEWER, ROLE_SERVER_ADMIN, Principal
from server_fleet.db.models import Database
from server_fleet.db.repositories.audit import AuditRepo
from server_fleet.db.repositories.databases import DatabaseRepo
from server_fleet.db.repositories.servers import ServerRepo
from server_fleet.errors import NotFoundError
from server_fleet.services.server_deletion import ServerDeletionService

router = APIRouter(
    prefix="/v1/servers",
    tags=["servers"],
    dependencies=[Depends(require_roles(ROLE_SERVER_ADMIN))],
)


class DatabaseHostAddress(BaseModel):
    address: str
    port: int


class DatabaseResponse(BaseModel):
    id: int
    host: DatabaseHostAddress
    name: str
    username: str
    connections_from: str
    max_connections: int | None
    # Only filled when `include=password` was asked for and the caller may see it.
    password: str | None = None


def parse_includes(raw: str | None, *, allowed: frozenset[str]) -> frozenset[str]:
    requested = frozenset(part.strip() for part in (raw or "").split(",") if part.strip())
    unknown = requested - allowed
    if unknown:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail=f"Unsupported include(s): {', '.join(sorted(unknown))}",
        )
    return requested


def database_view(db: Database, *, with_password: bool) -> DatabaseResponse:
    return DatabaseResponse(
        id=db.id,
        host=DatabaseHostAddress(address=db.host.host, port=db.host.port),
        name=db.database,
        username=db.username,
        connections_from=db.remote,
        max_connections=db.max_connections,
        password=db.password if with_password else None,
    )


async def _delete(
    server_id: int, *, force: bool, session: AsyncSession, service: ServerDeletionService
) -> Response:
    server = await ServerRepo(session).get(server_id)
    if server is None:
        raise NotFoundError("server", server_id)
    await service.handle(server, force=force)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.delete("/{server_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_server(
    server_id: int,
    session: AsyncSession = Depends(db_session),
    service: ServerDeletionService = Depends(server_deletion_service),
) -> Response:
    return await _delete(server_id, force=False, session=session, service=service)


@router.delete("/{server_id}/force", status_code=HTTP_204_NO_CONTENT)
async def force_delete_server(
    server_id: int,
    session: AsyncSession = Depends(db_session),
    service: ServerDeletionService = Depends(server_deletion_service),
) -> Response:
    return await _delete(server_id, force=True, session=session, service=service)


@router.get("/{server_id}/databases", response_model=list[DatabaseResponse])
async def list_server_databases(
    server_id: int,
    include: str | None = Query(default=None),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[DatabaseResponse]:
    includes = parse_includes(include, allowed=frozenset({"password"}))
    if await ServerRepo(session).get(server_id) is None:
        raise NotFoundError("server", server_id)

    # An include the caller may not see is dropped silently rather than rejected.
    with_password = "password" in includes and principal.has_role(ROLE_DATABASE_PASSWORD_VIEWER)
    databases = await DatabaseRepo(session).list_for_server(server_id)
    return [database_view(db, with_password=with_password) for db in databases]


@router.get("/{server_id}/audit")
async def list_server_audit(
    server_id: int,
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    # Available after deletion too: the trail is keyed by id, not by a live server row.
    events = await AuditRepo(session).list_for_server(server_id)
    return [
        {
            "id": str(e.id),
            "event_type": e.event_type,
            "actor": e.actor,
            "details": e.details,
            "created_at": e.created_at.isoformat(),
        }
        for e in events
    ]


# --- Module Notes -----------------------------------------------------------
# A failed strict delete surfaces as the daemon's 502 (see api.errors) or as the
# database host error; the server stays in place and the call can simply be repeated.
