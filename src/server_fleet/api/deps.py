"""
server_fleet.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide settings, DB sessions and the shared daemon HTTP client from app.state.
- Assemble the deletion service with its remote collaborators.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from server_fleet.auth.deps import get_principal
from server_fleet.auth.models import Principal
from server_fleet.daemon.servers import DaemonServerClient, DaemonServerRepository
from server_fleet.services.database_management import (
    DatabaseHostAdmin,
    DatabaseManagementService,
    SqlDatabaseHostAdmin,
)
from server_fleet.services.server_deletion import ServerDeletionService
from server_fleet.settings import Settings, get_settings


def settings_dep(settings: Settings = Depends(get_settings)) -> Settings:
    # `create_app` overrides `get_settings` with the settings it was built from.
    return settings


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created on startup in `server_fleet.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped session; services decide when to commit.
    async with session_factory() as session:
        yield session


def daemon_http(request: Request) -> httpx.AsyncClient:
    return request.app.state.daemon_http  # type: ignore[attr-defined]


def daemon_client(http: httpx.AsyncClient = Depends(daemon_http)) -> DaemonServerClient:
    return DaemonServerRepository(http=http)


def database_host_admin(settings: Settings = Depends(settings_dep)) -> DatabaseHostAdmin:
    return SqlDatabaseHostAdmin(settings=settings)


def server_deletion_service(
    session: AsyncSession = Depends(db_session),
    daemon: DaemonServerClient = Depends(daemon_client),
    host_admin: DatabaseHostAdmin = Depends(database_host_admin),
    principal: Principal = Depends(get_principal),
) -> ServerDeletionService:
    return ServerDeletionService(
        session=session,
        daemon=daemon,
        databases=DatabaseManagementService(session=session, host_admin=host_admin),
        actor=principal.subject,
    )
