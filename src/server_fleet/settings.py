"""
server_fleet.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings (prefix `FLEET_`) for the API, persistence and daemon layers.
- Hide secrets from repr/logging (JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FLEET_", case_sensitive=False)

    # dev/test create tables on startup; prod relies on Alembic.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "server-fleet"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "server-fleet"
    jwt_audience: str = "server-fleet-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Local authoritative store
    database_url: str = "sqlite+aiosqlite:///./fleet.db"

    # Daemon calls (one shared httpx client per process)
    daemon_connect_timeout: float = 5.0
    daemon_request_timeout: float = 30.0
    daemon_verify_tls: bool = True

    # SQLAlchemy driver used to reach external database hosts with admin credentials.
    database_host_driver: str = "mysql+aiomysql"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(env="test", database_url=...)` directly instead of going
# through the cached accessor.
