"""
server_fleet.db.base

SQLAlchemy declarative base shared by every ORM model.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# Models must inherit from `Base` so `init_db` and Alembic see them in `Base.metadata`.
