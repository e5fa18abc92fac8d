"""SQLAlchemy-backed log-entry sink."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Any

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    make_url,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from pyelogger.exceptions import SinkError
from pyelogger.state.record import LogEntry

_logger = logging.getLogger(__name__)

metadata = MetaData()

log_entry_table = Table(
    "log_entry",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("timestamp_utc", DateTime(timezone=True)),
    Column("latitude", Float),
    Column("longitude", Float),
    Column("course_over_ground", Float),
    Column("speed_over_ground", Float),
    Column("heading", Float),
    Column("rudder_angle", Float),
    Column("wind_direction", Float),
    Column("wind_speed", Float),
    Column("sea_state", String(64)),
    Column("visibility", String(64)),
    Column("barometric_pressure", Float),
    Column("air_temp", Float),
    Column("water_temp", Float),
    Column("engine_rpm", Float),
    Column("engine_mode", String(64)),
    Column("generator_online", String(64)),
    Column("remarks", String),
    Column("navigational_status", Integer),
    Column("recorded_at", DateTime(timezone=True), nullable=False, index=True),
)

nmea_raw_table = Table(
    "nmea_raw",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("log_entry_id", Integer, ForeignKey("log_entry.id"), nullable=False, index=True),
    Column("sentence", String, nullable=False),
    Column("source", String(8)),
    Column("talker_type", String(8)),
)


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def _create_engine(url: str) -> Engine:
    if _is_memory_sqlite(url):
        # Every worker thread must see the same in-memory database.
        return create_engine(url, poolclass=StaticPool, connect_args={"check_same_thread": False})
    return create_engine(url)


class SqlAlchemySink:
    """Insert one ``log_entry`` row per commit, plus its ``nmea_raw`` lines.

    SQLAlchemy's engine is synchronous; statements run in a worker thread
    so the event loop keeps ingesting while a write is in progress. One
    sink is shared by every connection, so commits may run concurrently.
    """

    def __init__(self, url: str, *, engine: Engine | None = None) -> None:
        self._url = url
        self._engine = engine if engine is not None else _create_engine(url)
        self._schema_lock = threading.Lock()
        self._schema_ready = False
        # A single shared SQLite connection cannot interleave transactions.
        self._statement_guard: contextlib.AbstractContextManager[Any] = (
            threading.Lock() if isinstance(self._engine.pool, StaticPool) else contextlib.nullcontext()
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        with self._schema_lock:
            if not self._schema_ready:
                metadata.create_all(self._engine)
                self._schema_ready = True

    def _insert_entry(self, row: dict[str, Any], archive: list[dict[str, Any]]) -> int | None:
        self.create_schema()
        with self._statement_guard, self._engine.begin() as conn:
            result = conn.execute(insert(log_entry_table).values(**row))
            primary_key = result.inserted_primary_key
            entry_id = primary_key[0] if primary_key else None
            if archive:
                conn.execute(
                    insert(nmea_raw_table),
                    [{**sentence, "log_entry_id": entry_id} for sentence in archive],
                )
        return entry_id

    async def commit(self, entry: LogEntry) -> None:
        try:
            row_id = await asyncio.to_thread(self._insert_entry, entry.to_row(), entry.archive_rows())
        except SQLAlchemyError as exc:
            raise SinkError(f"Database insert failed: {exc}", sink="database") from exc
        _logger.debug("Inserted log_entry row id=%s with %d raw sentence(s)", row_id, len(entry.sentences))

    def fetch_recent(self, limit: int = 5) -> list[dict[str, Any]]:
        """Most recent rows first, by ``recorded_at``."""
        self.create_schema()
        stmt = select(log_entry_table).order_by(log_entry_table.c.recorded_at.desc()).limit(limit)
        with self._statement_guard, self._engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(stmt)]

    def fetch_sentences(self, log_entry_id: int) -> list[dict[str, Any]]:
        """Raw sentences archived with one log entry, in arrival order."""
        self.create_schema()
        stmt = (
            select(nmea_raw_table)
            .where(nmea_raw_table.c.log_entry_id == log_entry_id)
            .order_by(nmea_raw_table.c.id)
        )
        with self._statement_guard, self._engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(stmt)]

    async def close(self) -> None:
        await asyncio.to_thread(self._engine.dispose)
