"""
tests.fakes

Hand-written stand-ins for the remote collaborators. Each records its calls into an
optional shared list so tests can assert on ordering across collaborators.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from server_fleet.db.models import Database, DatabaseHost, Server
from server_fleet.services.database_management import DatabaseDeleter


class FakeDaemon:
    def __init__(self, *, error: Exception | None = None, calls: list[str] | None = None) -> None:
        self.error = error
        self.calls = calls if calls is not None else []

    async def delete(self, server: Server) -> None:
        self.calls.append(f"daemon:{server.id}")
        if self.error is not None:
            raise self.error


class FakeHostAdmin:
    """Succeeds unless the database name is listed in `fail_for`."""

    def __init__(
        self,
        *,
        fail_for: set[str] | None = None,
        error: Exception | None = None,
        calls: list[str] | None = None,
    ) -> None:
        self.fail_for = fail_for or set()
        self.error = error or RuntimeError("database host unreachable")
        self.calls = calls if calls is not None else []
        self.dropped: list[tuple[str, str, str, str]] = []

    async def drop(self, host: DatabaseHost, *, database: str, username: str, remote: str) -> None:
        self.calls.append(f"host:{database}")
        if database in self.fail_for:
            raise self.error
        self.dropped.append((host.host, database, username, remote))


class ExplodingDeleter:
    """A database collaborator that fails for every record with a plain Exception."""

    def __init__(self) -> None:
        self.seen: list[int] = []

    async def delete(self, database: Database) -> None:
        self.seen.append(database.id)
        raise Exception()


class SessionBreakingDeleter:
    """
    Fails the first delete by flushing a row that collides with the unique
    (database_host_id, database) index, leaving the session in need of a rollback.
    Later calls go to `inner`.
    """

    def __init__(self, session: AsyncSession, inner: DatabaseDeleter) -> None:
        self._session = session
        self._inner = inner
        self.broken: list[int] = []

    async def delete(self, database: Database) -> None:
        if not self.broken:
            self.broken.append(database.id)
            self._session.add(
                Database(
                    server_id=database.server_id,
                    database_host_id=database.database_host_id,
                    database=database.database,
                    username="duplicate",
                    password="duplicate",
                )
            )
            await self._session.flush()
        await self._inner.delete(database)


class FailsAfterCommitDeleter:
    """Removes and commits the row through `inner`, then reports a failure anyway."""

    def __init__(self, inner: DatabaseDeleter) -> None:
        self._inner = inner

    async def delete(self, database: Database) -> None:
        await self._inner.delete(database)
        raise RuntimeError("lost connection after commit")
