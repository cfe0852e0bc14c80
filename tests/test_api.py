"""
tests.test_api

HTTP surface: health checks, server deletion endpoints, database listings and auth.
Remote collaborators are replaced through FastAPI dependency overrides.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from fakes import FakeDaemon, FakeHostAdmin
from helpers import Seeded, row_exists, seed_server
from server_fleet.api.app import create_app
from server_fleet.api.deps import daemon_client, database_host_admin
from server_fleet.auth.jwt import JwtConfig, issue_token
from server_fleet.db.models import Database, Server
from server_fleet.errors import DaemonConnectionError
from server_fleet.settings import Settings


@dataclass
class Harness:
    app: FastAPI
    client: httpx.AsyncClient
    settings: Settings
    daemon: FakeDaemon = field(default_factory=FakeDaemon)
    host_admin: FakeHostAdmin = field(default_factory=FakeHostAdmin)

    def auth(self, *roles: str, subject: str = "ops@example.com") -> dict[str, str]:
        token = issue_token(
            cfg=JwtConfig.from_settings(self.settings), subject=subject, roles=list(roles)
        )
        return {"Authorization": f"Bearer {token}"}

    async def seed(self, *, databases: int = 0) -> Seeded:
        async with self.app.state.sessionmaker() as session:
            return await seed_server(session, databases=databases)


@pytest_asyncio.fixture
async def harness(settings: Settings) -> AsyncIterator[Harness]:
    app = create_app(settings=settings)
    # httpx.ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            h = Harness(app=app, client=client, settings=settings)
            app.dependency_overrides[daemon_client] = lambda: h.daemon
            app.dependency_overrides[database_host_admin] = lambda: h.host_admin
            yield h


@pytest.mark.asyncio
async def test_health_endpoints(harness: Harness) -> None:
    r = await harness.client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await harness.client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"
    assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_delete_server(harness: Harness) -> None:
    seeded = await harness.seed(databases=1)

    r = await harness.client.delete(
        f"/v1/servers/{seeded.server.id}", headers=harness.auth("server_admin")
    )

    assert r.status_code == 204
    sessions = harness.app.state.sessionmaker
    assert not await row_exists(sessions, Server, seeded.server.id)
    assert not await row_exists(sessions, Database, seeded.databases[0].id)

    r = await harness.client.get(
        f"/v1/servers/{seeded.server.id}/audit", headers=harness.auth("server_admin")
    )
    assert r.status_code == 200
    (event,) = r.json()
    assert event["event_type"] == "SERVER_DELETED"
    assert event["actor"] == "ops@example.com"


@pytest.mark.asyncio
async def test_daemon_error_maps_to_bad_gateway_and_keeps_server(harness: Harness) -> None:
    seeded = await harness.seed()
    harness.daemon.error = DaemonConnectionError("Internal Server Error", status_code=500)

    r = await harness.client.delete(
        f"/v1/servers/{seeded.server.id}", headers=harness.auth("server_admin")
    )

    assert r.status_code == 502
    body = r.json()
    assert body["upstream_status"] == 500
    assert body["error_type"] == "DaemonConnectionError"
    assert await row_exists(harness.app.state.sessionmaker, Server, seeded.server.id)


@pytest.mark.asyncio
async def test_force_delete_ignores_daemon_error(harness: Harness) -> None:
    seeded = await harness.seed()
    harness.daemon.error = DaemonConnectionError("Internal Server Error", status_code=500)

    r = await harness.client.delete(
        f"/v1/servers/{seeded.server.id}/force", headers=harness.auth("server_admin")
    )

    assert r.status_code == 204
    assert not await row_exists(harness.app.state.sessionmaker, Server, seeded.server.id)


@pytest.mark.asyncio
async def test_delete_unknown_server_is_404(harness: Harness) -> None:
    r = await harness.client.delete("/v1/servers/999", headers=harness.auth("server_admin"))
    assert r.status_code == 404
    assert harness.daemon.calls == []


@pytest.mark.asyncio
async def test_delete_requires_token_and_role(harness: Harness) -> None:
    seeded = await harness.seed()

    r = await harness.client.delete(f"/v1/servers/{seeded.server.id}")
    assert r.status_code == 401

    r = await harness.client.delete(
        f"/v1/servers/{seeded.server.id}", headers=harness.auth("database_password_viewer")
    )
    assert r.status_code == 403

    r = await harness.client.delete(f"/v1/servers/{seeded.server.id}", headers=harness.auth("admin"))
    assert r.status_code == 204


@pytest.mark.asyncio
async def test_list_databases_gates_password_include(harness: Harness) -> None:
    seeded = await harness.seed(databases=2)
    url = f"/v1/servers/{seeded.server.id}/databases"

    r = await harness.client.get(url, headers=harness.auth("server_admin"))
    assert r.status_code == 200
    body = r.json()
    assert [d["name"] for d in body] == [d.database for d in seeded.databases]
    assert body[0]["host"] == {"address": "10.0.0.5", "port": 3306}
    assert body[0]["connections_from"] == "%"
    assert body[0]["password"] is None

    r = await harness.client.get(
        url, params={"include": "password"}, headers=harness.auth("server_admin")
    )
    assert r.json()[0]["password"] is None

    r = await harness.client.get(
        url,
        params={"include": "password"},
        headers=harness.auth("server_admin", "database_password_viewer"),
    )
    assert [d["password"] for d in r.json()] == ["pw-0", "pw-1"]

    r = await harness.client.get(
        url, params={"include": "secrets"}, headers=harness.auth("server_admin")
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_get_database_host_with_databases(harness: Harness) -> None:
    seeded = await harness.seed(databases=1)
    host_id = seeded.databases[0].database_host_id

    r = await harness.client.get(
        f"/v1/database-hosts/{host_id}", headers=harness.auth("server_admin")
    )
    assert r.status_code == 200
    body = r.json()
    assert body["host"] == "10.0.0.5"
    assert body["username"] == "admin"
    assert "password" not in body
    assert body["databases"] is None

    r = await harness.client.get(
        f"/v1/database-hosts/{host_id}",
        params={"include": "databases"},
        headers=harness.auth("server_admin"),
    )
    (db,) = r.json()["databases"]
    assert db["name"] == seeded.databases[0].database
    assert db["password"] is None

    r = await harness.client.get("/v1/database-hosts/404", headers=harness.auth("server_admin"))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_get_database_host_with_node(harness: Harness) -> None:
    seeded = await harness.seed(databases=1)
    host_id = seeded.databases[0].database_host_id
    url = f"/v1/database-hosts/{host_id}"

    r = await harness.client.get(url, headers=harness.auth("server_admin"))
    body = r.json()
    assert body["node"] == seeded.server.node_id
    assert body["node_details"] is None

    r = await harness.client.get(
        url, params={"include": "node,databases"}, headers=harness.auth("server_admin")
    )
    assert r.status_code == 200
    body = r.json()
    assert body["node_details"] == {
        "id": seeded.server.node_id,
        "name": "node-1",
        "fqdn": "node1.example.com",
        "scheme": "https",
        "daemon_listen": 8080,
    }
    assert "daemon_token" not in body["node_details"]
    assert len(body["databases"]) == 1


@pytest.mark.asyncio
async def test_dev_token_round_trip(harness: Harness) -> None:
    r = await harness.client.post(
        "/v1/dev/token", json={"subject": "dev", "roles": ["server_admin"]}
    )
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await harness.client.get(
        "/v1/servers/1/databases", headers={"Authorization": f"Bearer {token}"}
    )
    # Authenticated and authorized; the server simply does not exist.
    assert r.status_code == 404
