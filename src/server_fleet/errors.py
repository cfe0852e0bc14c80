"""
server_fleet.errors

Exception types shared across the daemon, service and API layers.

Responsibilities:
- Classify daemon failures by the HTTP status they carried (404 vs everything else).
- Signal missing local entities at the API boundary.
"""

from __future__ import annotations

from http import HTTPStatus


class FleetError(Exception):
    pass


class NotFoundError(FleetError):
    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} {identifier} not found")
        self.resource = resource
        self.identifier = identifier


class DaemonConnectionError(FleetError):
    """
    Raised when a call to a node's daemon does not succeed.

    `status_code` is the HTTP status of the daemon's response, or None when no
    response was received at all (connection refused, DNS, timeout). A transport
    failure is never classified as "not found".
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == HTTPStatus.NOT_FOUND

    def __str__(self) -> str:
        reason = super().__str__()
        if self.status_code is None:
            return f"Error while communicating with the daemon: {reason}"
        return f"Error while communicating with the daemon: HTTP/{self.status_code}: {reason}"


# --- Module Notes -----------------------------------------------------------
# API handlers for these types live in `server_fleet.api.errors`.
