"""
server_fleet.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events for server lifecycle actions.
- Query the trail by server id.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from server_fleet.db.models import AuditEvent


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        server_id: int,
        actor: str,
        event_type: str,
        details: dict[str, Any],
    ) -> AuditEvent:
        ev = AuditEvent(server_id=server_id, actor=actor, event_type=event_type, details=details)
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def list_for_server(self, server_id: int, *, limit: int = 200) -> list[AuditEvent]:
        # Newest first.
        stmt = (
            select(AuditEvent)
            .where(AuditEvent.server_id == server_id)
            .order_by(desc(AuditEvent.created_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())
