"""
server_fleet.auth.models

Authenticated caller identity injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_ADMIN = "admin"
ROLE_SERVER_ADMIN = "server_admin"
ROLE_DATABASE_PASSWORD_VIEWER = "database_password_viewer"


@dataclass(frozen=True, slots=True)
class Principal:
    subject: str
    roles: frozenset[str]

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles

    def has_role(self, role: str) -> bool:
        return self.is_admin or role in self.roles
