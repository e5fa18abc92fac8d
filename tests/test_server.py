from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from pyelogger.__main__ import build_parser, build_sink, config_from_args
from pyelogger.config import ELoggerConfig
from pyelogger.connection import ConnectionSession
from pyelogger.exceptions import ELoggerError
from pyelogger.sampling.scheduler import SamplingScheduler
from pyelogger.server import ELoggerServer, consume_stream
from pyelogger.sink.base import FanoutSink
from pyelogger.sink.database import SqlAlchemySink
from pyelogger.sink.http import HttpSink
from pyelogger.state.record import LogEntry

RMC = "$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"
AIS_UNDER_WAY = "!AIVDM,1,1,,B,15M67F@000G?ufbE`FepT@3n00Sa,0*5F"


class _RecordingSink:
    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    async def commit(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    async def close(self) -> None:  # pragma: no cover
        return None


async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


# ------------------------------------------------------------------
# Stream consumption
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_consume_stream_decodes_split_utf8_and_final_line() -> None:
    session = ConnectionSession(SamplingScheduler(_RecordingSink()))
    reader = asyncio.StreamReader()
    data = "$HEHDT,90.0,T\n$IIXDR,C,19.5,C,M°".encode() + b"\xff\n$HEHDT,91.5,T"
    split = data.index("°".encode()) + 1
    reader.feed_data(data[:split])
    reader.feed_data(data[split:])
    reader.feed_eof()

    await consume_stream(reader, session, read_size=8)

    # The unterminated last line is processed at end of stream.
    assert session.record.heading == 91.5


# ------------------------------------------------------------------
# TCP listener
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_server_commits_on_disconnect_with_flush() -> None:
    sink = _RecordingSink()
    config = ELoggerConfig(host="127.0.0.1", port=0, flush_on_disconnect=True)

    async with ELoggerServer(config, sink) as server:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        writer.write(f"{RMC}\r\n{AIS_UNDER_WAY}\r\n".encode())
        await writer.drain()
        await _wait_for(lambda: any(s.scheduler.pending for s in server.sessions.values()))

        writer.close()
        await writer.wait_closed()
        await _wait_for(lambda: len(sink.entries) == 1)
        await _wait_for(lambda: not server.sessions)

    entry = sink.entries[0]
    assert entry.speed_over_ground == 22.4
    assert entry.navigational_status == 0


@pytest.mark.asyncio
async def test_server_connections_are_independent() -> None:
    sink = _RecordingSink()
    config = ELoggerConfig(host="127.0.0.1", port=0)

    async with ELoggerServer(config, sink) as server:
        _, first = await asyncio.open_connection("127.0.0.1", server.port)
        _, second = await asyncio.open_connection("127.0.0.1", server.port)
        first.write(b"$HEHDT,90.0,T\n")
        second.write(b"$HEHDT,180.0,T\n")
        await first.drain()
        await second.drain()

        await _wait_for(
            lambda: sorted(s.record.heading or 0.0 for s in server.sessions.values()) == [90.0, 180.0]
        )

        first.close()
        second.close()
        await first.wait_closed()
        await second.wait_closed()

    assert sink.entries == []


def test_port_requires_started_server() -> None:
    server = ELoggerServer(ELoggerConfig(port=0), _RecordingSink())

    with pytest.raises(ELoggerError, match="not started"):
        _ = server.port


# ------------------------------------------------------------------
# Command line
# ------------------------------------------------------------------


def test_config_from_args(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ELOGGER_PORT", raising=False)
    monkeypatch.delenv("ELOGGER_FLUSH_ON_DISCONNECT", raising=False)
    args = build_parser().parse_args(["--port", "4200", "--forward-url", "http://shore/log", "--flush-on-disconnect"])

    config = config_from_args(args)

    assert config.port == 4200
    assert config.forward_url == "http://shore/log"
    assert config.flush_on_disconnect is True


@pytest.mark.asyncio
async def test_build_sink_variants(tmp_path: Path) -> None:
    database_url = f"sqlite:///{tmp_path / 'log.db'}"

    database_only = build_sink(ELoggerConfig(database_url=database_url))
    both = build_sink(ELoggerConfig(database_url=database_url, forward_url="http://shore/log"))

    assert isinstance(database_only, SqlAlchemySink)
    assert isinstance(both, FanoutSink)
    assert [type(sink) for sink in both.sinks] == [SqlAlchemySink, HttpSink]
    with pytest.raises(ELoggerError, match="No sink configured"):
        build_sink(ELoggerConfig(database_url=None))

    await database_only.close()
    await both.close()
