"""
server_fleet.services.database_management

Removal of a server database from its host and from the local store.

Responsibilities:
- Drop the schema and its user on the database host (admin credentials of the host).
- Delete the local `Database` row once the host no longer has it.
"""

from __future__ import annotations

import re
from typing import Protocol

from sqlalchemy import URL, text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from server_fleet.db.models import Database, DatabaseHost
from server_fleet.db.repositories.databases import DatabaseRepo
from server_fleet.observability.logging import get_logger
from server_fleet.settings import Settings

log = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_\-]{1,64}$")
_REMOTE = re.compile(r"^[A-Za-z0-9_.%:\-]{1,255}$")


class DatabaseHostAdmin(Protocol):
    async def drop(self, host: DatabaseHost, *, database: str, username: str, remote: str) -> None: ...


class DatabaseDeleter(Protocol):
    async def delete(self, database: Database) -> None: ...


def quote_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"refusing to use {name!r} as a database identifier")
    return f"`{name}`"


def quote_account(username: str, remote: str) -> str:
    if not _IDENTIFIER.match(username):
        raise ValueError(f"refusing to use {username!r} as a database username")
    if not _REMOTE.match(remote):
        raise ValueError(f"refusing to use {remote!r} as a remote host pattern")
    return f"'{username}'@'{remote}'"


class SqlDatabaseHostAdmin:
    """
    Talks to a MySQL/MariaDB host using a short-lived engine per call, authenticated with
    the host's administrative credentials.
    """

    def __init__(self, *, settings: Settings) -> None:
        self._driver = settings.database_host_driver

    def url_for(self, host: DatabaseHost) -> URL:
        return URL.create(
            self._driver,
            username=host.username,
            password=host.password,
            host=host.host,
            port=host.port,
        )

    async def drop(self, host: DatabaseHost, *, database: str, username: str, remote: str) -> None:
        statements = [
            f"DROP DATABASE IF EXISTS {quote_identifier(database)}",
            f"DROP USER IF EXISTS {quote_account(username, remote)}",
            "FLUSH PRIVILEGES",
        ]
        engine = create_async_engine(self.url_for(host), pool_pre_ping=True)
        try:
            async with engine.begin() as conn:
                for stmt in statements:
                    await conn.execute(text(stmt))
        finally:
            await engine.dispose()


class DatabaseManagementService:
    def __init__(self, *, session: AsyncSession, host_admin: DatabaseHostAdmin) -> None:
        self._session = session
        self._host_admin = host_admin
        self._databases = DatabaseRepo(session)

    async def delete(self, database: Database) -> None:
        """
        Remove `database` from its host, then delete the local row in its own transaction.
        Raises without touching the local row if the host could not be cleaned up.
        """

        fields = {
            "database_id": database.id,
            "server_id": database.server_id,
            "database_host_id": database.database_host_id,
        }
        await self._host_admin.drop(
            database.host,
            database=database.database,
            username=database.username,
            remote=database.remote,
        )
        await self._databases.delete(database.id)
        await self._session.commit()
        log.info("database_deleted", **fields)


# --- Module Notes -----------------------------------------------------------
# `database.host` must be loaded before calling `delete` (see DatabaseRepo.list_for_server);
# async sessions cannot lazy-load relationships.
