"""
server_fleet.api.__main__

Entrypoint for `python -m server_fleet.api`.
"""

from __future__ import annotations

import uvicorn

from server_fleet.api.app import create_app
from server_fleet.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
