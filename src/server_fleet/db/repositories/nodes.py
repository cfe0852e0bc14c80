from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from server_fleet.db.models import Node


class NodeRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        fqdn: str,
        daemon_token: str,
        scheme: str = "https",
        daemon_listen: int = 8080,
    ) -> Node:
        node = Node(
            name=name,
            fqdn=fqdn,
            scheme=scheme,
            daemon_listen=daemon_listen,
            daemon_token=daemon_token,
        )
        self._session.add(node)
        await self._session.flush()
        return node
