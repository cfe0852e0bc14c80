"""
server_fleet.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the local store.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories only flush. Commits (one per deletion step) belong to the services.
