"""
server_fleet.services.server_deletion

Server deletion across the node daemon, database hosts and the local store.

Responsibilities:
- Tear down the live workload on the daemon first, treating a 404 as already gone.
- Remove every database the server owns, one at a time, in a stable order.
- Remove the server record last, together with its audit event.
- Strict mode (default): the first remote failure is raised and nothing further is touched.
- Forced mode: remote failures are logged and skipped so the local records always go away.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from server_fleet.daemon.servers import DaemonServerClient
from server_fleet.db.models import Server
from server_fleet.db.repositories.audit import AuditRepo
from server_fleet.db.repositories.databases import DatabaseRepo
from server_fleet.db.repositories.servers import ServerRepo
from server_fleet.errors import DaemonConnectionError
from server_fleet.observability.logging import get_logger
from server_fleet.services.database_management import DatabaseDeleter

log = get_logger(__name__)


class ServerDeletionService:
    """
    Completed steps are never undone: a strict failure while removing the third database
    leaves the first two removed, the rest and the server intact. Each remote call is made
    once per `handle`; retrying means calling `handle` again.

    Errors from the local store are never swallowed, in either mode.
    """

    def __init__(
        self,
        *,
        session: AsyncSession,
        daemon: DaemonServerClient,
        databases: DatabaseDeleter,
        actor: str = "system",
    ) -> None:
        self._session = session
        self._daemon = daemon
        self._database_deleter = databases
        self._actor = actor

        self._servers = ServerRepo(session)
        self._databases = DatabaseRepo(session)
        self._audit = AuditRepo(session)

    async def handle(self, server: Server, *, force: bool = False) -> None:
        server_id = server.id
        bound = log.bind(server_id=server_id, server_uuid=str(server.uuid), force=force)
        bound.info("server_delete_started")

        daemon_outcome = await self._delete_on_daemon(server, force=force, bound=bound)
        skipped = await self._delete_databases(server_id, force=force, bound=bound)

        await self._servers.delete(server_id)
        details: dict[str, Any] = {
            "force": force,
            "daemon": daemon_outcome,
            "databases_left_on_host": skipped,
        }
        await self._audit.add(
            server_id=server_id,
            actor=self._actor,
            event_type="SERVER_DELETED",
            details=details,
        )
        await self._session.commit()
        bound.info("server_deleted", **details)

    async def _delete_on_daemon(
        self, server: Server, *, force: bool, bound: structlog.stdlib.BoundLogger
    ) -> str:
        try:
            await self._daemon.delete(server)
        except DaemonConnectionError as e:
            if e.is_not_found:
                bound.info("daemon_server_missing")
                return "not_found"
            if not force:
                raise
            bound.warning("daemon_delete_failed_ignored", status_code=e.status_code, error=str(e))
            return "failed"
        except Exception as e:
            if not force:
                raise
            bound.warning("daemon_delete_failed_ignored", status_code=None, error=str(e), exc_info=True)
            return "failed"
        return "deleted"

    async def _delete_databases(
        self, server_id: int, *, force: bool, bound: structlog.stdlib.BoundLogger
    ) -> list[int]:
        # Loading is a local-store read; a failure here propagates in both modes.
        pending = list(await self._databases.list_for_server(server_id))

        skipped: list[int] = []
        attempted: set[int] = set()
        while pending:
            database = pending.pop(0)
            database_id = database.id
            attempted.add(database_id)
            database_host_id = database.database_host_id
            try:
                await self._database_deleter.delete(database)
            except Exception as e:
                if not force:
                    raise
                # The schema stays on the host; only the local row can still be removed.
                bound.warning(
                    "database_delete_failed_ignored",
                    database_id=database_id,
                    database_host_id=database_host_id,
                    error=str(e),
                    exc_info=True,
                )
                # The collaborator may have left the session mid-transaction or failed after
                # its own commit, so start clean and accept a row that is already gone.
                await self._session.rollback()
                await self._databases.delete(database_id, missing_ok=True)
                await self._session.commit()
                skipped.append(database_id)
                # rollback() expired the loaded rows; reload what is left.
                pending = [
                    d for d in await self._databases.list_for_server(server_id)
                    if d.id not in attempted
                ]
        return skipped


# --- Module Notes -----------------------------------------------------------
# Ordering daemon -> databases -> server is fixed. One commit per removed database row and
# one for the server row keeps every crash point at a well-defined intermediate state.
