"""
server_fleet.daemon

Client boundary for the daemons running on nodes.

Responsibilities:
- Provide the HTTP calls the services make against a node's daemon.
- Translate transport and status failures into `DaemonConnectionError`.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services depend on the `DaemonServerClient` protocol, not on httpx.
