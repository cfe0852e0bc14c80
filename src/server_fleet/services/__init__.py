"""
server_fleet.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Sequence calls across the local store, node daemons and database hosts.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take their remote collaborators as constructor arguments so tests can pass fakes.
