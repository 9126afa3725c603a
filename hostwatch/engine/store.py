"""SQLAlchemy-backed store for downsampled telemetry snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, Sequence

from sqlalchemy import DateTime, Float, Integer, create_engine, delete, func, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Naive UTC ``datetime``; SQLite does not keep time zone offsets."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class AnalyticsRow(Base):
    __tablename__ = "system_analytics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cpu: Mapped[float] = mapped_column(Float, nullable=False)
    ram: Mapped[float] = mapped_column(Float, nullable=False)
    net_in: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    net_out: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    disk_read: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    disk_write: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, server_default=func.now(), nullable=False, index=True
    )


@dataclass(slots=True, frozen=True)
class SnapshotRecord:
    cpu: float
    ram: float
    net_in: float
    net_out: float
    disk_read: float
    disk_write: float
    timestamp: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "cpu": self.cpu,
            "ram": self.ram,
            "net_in": self.net_in,
            "net_out": self.net_out,
            "disk_read": self.disk_read,
            "disk_write": self.disk_write,
            "timestamp": self.timestamp.isoformat(sep=" "),
        }


class SnapshotStore(Protocol):
    def add(self, record: SnapshotRecord) -> None: ...

    def delete_older_than(self, cutoff: datetime) -> int: ...

    def fetch_since(self, since: datetime) -> Sequence[SnapshotRecord]: ...


class SqlSnapshotStore:
    """Append-only ``system_analytics`` table.

    ``:memory:`` SQLite URLs share one connection across threads so the
    sampling loop and the HTTP handlers see the same database.
    """

    def __init__(self, url: str = "sqlite:///:memory:", *, engine: Engine | None = None) -> None:
        self._engine = engine or self._create_engine(url)
        Base.metadata.create_all(self._engine)
        self._sessions = sessionmaker(self._engine, expire_on_commit=False)

    @staticmethod
    def _create_engine(url: str) -> Engine:
        parsed = make_url(url)
        if parsed.get_backend_name() != "sqlite":
            return create_engine(url, pool_pre_ping=True)
        database = parsed.database
        if not database or database == ":memory:":
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, connect_args={"check_same_thread": False})

    @property
    def engine(self) -> Engine:
        return self._engine

    def add(self, record: SnapshotRecord) -> None:
        with self._sessions.begin() as session:
            session.add(
                AnalyticsRow(
                    cpu=record.cpu,
                    ram=record.ram,
                    net_in=record.net_in,
                    net_out=record.net_out,
                    disk_read=record.disk_read,
                    disk_write=record.disk_write,
                    timestamp=record.timestamp,
                )
            )

    def delete_older_than(self, cutoff: datetime) -> int:
        with self._sessions.begin() as session:
            result = session.execute(delete(AnalyticsRow).where(AnalyticsRow.timestamp < cutoff))
            return int(result.rowcount or 0)

    def fetch_since(self, since: datetime) -> list[SnapshotRecord]:
        statement = (
            select(AnalyticsRow)
            .where(AnalyticsRow.timestamp >= since)
            .order_by(AnalyticsRow.timestamp.asc(), AnalyticsRow.id.asc())
        )
        with self._sessions() as session:
            return [
                SnapshotRecord(
                    cpu=row.cpu,
                    ram=row.ram,
                    net_in=row.net_in,
                    net_out=row.net_out,
                    disk_read=row.disk_read,
                    disk_write=row.disk_write,
                    timestamp=row.timestamp,
                )
                for row in session.scalars(statement)
            ]

    def count(self) -> int:
        with self._sessions() as session:
            return int(session.scalar(select(func.count()).select_from(AnalyticsRow)) or 0)

    def close(self) -> None:
        self._engine.dispose()
