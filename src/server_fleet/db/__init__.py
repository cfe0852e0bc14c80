"""
server_fleet.db

Persistence package (SQLAlchemy async) for the local authoritative store.

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.
