"""
server_fleet.daemon.servers

HTTP client for server-scoped daemon endpoints.

Responsibilities:
- Address the daemon of the node a server lives on (`{scheme}://{fqdn}:{daemon_listen}`).
- Authenticate with the node's daemon token.
- Raise `DaemonConnectionError` with the response status (or None on transport failure).
"""

from __future__ import annotations

from typing import Protocol

import httpx

from server_fleet.db.models import Server
from server_fleet.errors import DaemonConnectionError
from server_fleet.settings import Settings


class DaemonServerClient(Protocol):
    async def delete(self, server: Server) -> None: ...


def create_daemon_http(settings: Settings) -> httpx.AsyncClient:
    # One pooled client per process; base URLs differ per node so requests use absolute URLs.
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            settings.daemon_request_timeout, connect=settings.daemon_connect_timeout
        ),
        verify=settings.daemon_verify_tls,
        headers={"Accept": "application/json"},
    )


class DaemonServerRepository:
    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    def _url(self, server: Server, path: str = "") -> str:
        return f"{server.node.daemon_base_url}/api/servers/{server.uuid}{path}"

    def _headers(self, server: Server) -> dict[str, str]:
        return {"Authorization": f"Bearer {server.node.daemon_token}"}

    async def delete(self, server: Server) -> None:
        """
        Ask the daemon to tear down the server's live workload. No request body.
        """

        try:
            r = await self._http.delete(self._url(server), headers=self._headers(server))
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DaemonConnectionError(
                e.response.reason_phrase or "unexpected response",
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise DaemonConnectionError(str(e) or type(e).__name__) from e


# --- Module Notes -----------------------------------------------------------
# Other daemon endpoints (power, sync, install) would live here as further methods;
# this service only needs teardown.
