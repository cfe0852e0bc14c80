"""
server_fleet.api.errors

Exception handlers mapping service errors to HTTP responses.

Responsibilities:
- DaemonConnectionError -> 502 Bad Gateway, carrying the daemon's status when there was one.
- NotFoundError -> 404.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_404_NOT_FOUND, HTTP_502_BAD_GATEWAY

from server_fleet.errors import DaemonConnectionError, NotFoundError
from server_fleet.observability.logging import get_logger

log = get_logger(__name__)


async def handle_daemon_connection_error(request: Request, exc: DaemonConnectionError) -> JSONResponse:
    log.warning("daemon_connection_error", upstream_status=exc.status_code, error=str(exc))
    return JSONResponse(
        status_code=HTTP_502_BAD_GATEWAY,
        content={
            "detail": str(exc),
            "error_type": type(exc).__name__,
            "upstream_status": exc.status_code,
        },
    )


async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_404_NOT_FOUND,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DaemonConnectionError, handle_daemon_connection_error)  # type: ignore[arg-type]
    app.add_exception_handler(NotFoundError, handle_not_found)  # type: ignore[arg-type]
