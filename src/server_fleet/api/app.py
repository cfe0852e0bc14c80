"""
server_fleet.api.app

FastAPI app factory for the server fleet service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Create and dispose shared infrastructure (DB engine/session factory, daemon HTTP client).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from server_fleet import __version__
from server_fleet.api.errors import register_exception_handlers
from server_fleet.api.routers.database_hosts import router as database_hosts_router
from server_fleet.api.routers.dev_auth import router as dev_auth_router
from server_fleet.api.routers.health import router as health_router
from server_fleet.api.routers.servers import router as servers_router
from server_fleet.daemon.servers import create_daemon_http
from server_fleet.db.init_db import init_db
from server_fleet.db.session import create_engine, create_sessionmaker
from server_fleet.observability.logging import configure_logging, get_logger
from server_fleet.observability.middleware import RequestContextMiddleware
from server_fleet.settings import Settings, get_settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.daemon_http = create_daemon_http(settings)
        if settings.env in ("dev", "test"):
            # Prod schema is managed by Alembic.
            await init_db(engine)
        try:
            yield
        finally:
            await app.state.daemon_http.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Server Fleet",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    # Every dependency asking for settings gets the instance this app was built with.
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(servers_router)
    app.include_router(database_hosts_router)

    return app


# --- Module Notes -----------------------------------------------------------
# httpx.ASGITransport does not drive the lifespan; tests enter `app.router.lifespan_context`.
