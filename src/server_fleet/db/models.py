"""
server_fleet.db.models

Local store schema.

Responsibilities:
- Node: machine running the daemon that hosts servers.
- Server: authoritative record of a provisioned workload.
- DatabaseHost: external database server holding credentialed schemas.
- Database: one schema on a host, owned by a server.
- AuditEvent: append-only trail of lifecycle actions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Text, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from server_fleet.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps, same convention across every table.
    return datetime.utcnow()


class Node(Base):
    __tablename__ = "nodes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    uuid: Mapped[UUID] = mapped_column(
        SAUuid(as_uuid=True), unique=True, nullable=False, default=uuid4
    )
    name: Mapped[str] = mapped_column(String(191), nullable=False)

    fqdn: Mapped[str] = mapped_column(String(255), nullable=False)
    scheme: Mapped[str] = mapped_column(String(8), nullable=False, default="https")
    daemon_listen: Mapped[int] = mapped_column(nullable=False, default=8080)
    daemon_token: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    servers: Mapped[list[Server]] = relationship(back_populates="node")

    @property
    def daemon_base_url(self) -> str:
        return f"{self.scheme}://{self.fqdn}:{self.daemon_listen}"

    def __repr__(self) -> str:
        # daemon_token stays out of logs.
        return f"Node(id={self.id!r}, fqdn={self.fqdn!r})"


class Server(Base):
    __tablename__ = "servers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    uuid: Mapped[UUID] = mapped_column(
        SAUuid(as_uuid=True), unique=True, nullable=False, default=uuid4
    )
    name: Mapped[str] = mapped_column(String(191), nullable=False)
    node_id: Mapped[int] = mapped_column(ForeignKey("nodes.id"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    node: Mapped[Node] = relationship(back_populates="servers")
    # Rows are removed one by one by the deletion service; the ORM must not null out children.
    databases: Mapped[list[Database]] = relationship(
        back_populates="server", passive_deletes=True, order_by="Database.id"
    )

    def __repr__(self) -> str:
        return f"Server(id={self.id!r}, uuid={self.uuid!s})"


class DatabaseHost(Base):
    __tablename__ = "database_hosts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(191), nullable=False)
    host: Mapped[str] = mapped_column(String(255), nullable=False)
    port: Mapped[int] = mapped_column(nullable=False, default=3306)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    # Optional node this host is co-located with.
    node_id: Mapped[int | None] = mapped_column(ForeignKey("nodes.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    databases: Mapped[list[Database]] = relationship(
        back_populates="host", passive_deletes=True, order_by="Database.id"
    )
    node: Mapped[Node | None] = relationship()

    def __repr__(self) -> str:
        return f"DatabaseHost(id={self.id!r}, host={self.host!r}, port={self.port!r})"


class Database(Base):
    __tablename__ = "databases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    server_id: Mapped[int] = mapped_column(ForeignKey("servers.id"), nullable=False, index=True)
    database_host_id: Mapped[int] = mapped_column(
        ForeignKey("database_hosts.id"), nullable=False, index=True
    )

    database: Mapped[str] = mapped_column(String(48), nullable=False)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    # MySQL host pattern the user may connect from; "%" allows any address.
    remote: Mapped[str] = mapped_column(String(255), nullable=False, default="%")
    password: Mapped[str] = mapped_column(Text, nullable=False)
    max_connections: Mapped[int | None] = mapped_column(nullable=True, default=0)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    server: Mapped[Server] = relationship(back_populates="databases")
    host: Mapped[DatabaseHost] = relationship(back_populates="databases")

    __table_args__ = (Index("ix_databases_host_database", "database_host_id", "database", unique=True),)

    def __repr__(self) -> str:
        return f"Database(id={self.id!r}, database={self.database!r})"


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid4
    )
    # Not a foreign key: the trail outlives the server it describes.
    server_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    actor: Mapped[str] = mapped_column(String(256), nullable=False)
    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)

    __table_args__ = (Index("ix_audit_server_created", "server_id", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# Secrets (daemon_token, host and database passwords) are stored as given; encryption at
# rest belongs to the provisioning side, which is not part of this service.
