"""Command-line entry point: ``python -m pyelogger``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys

from pyelogger.config import ELoggerConfig
from pyelogger.connection import ConnectionSession
from pyelogger.exceptions import ELoggerError
from pyelogger.sampling.scheduler import SamplingScheduler
from pyelogger.server import ELoggerServer, consume_stream
from pyelogger.sink.base import FanoutSink, PersistenceSink
from pyelogger.sink.database import SqlAlchemySink
from pyelogger.sink.http import HttpSink

_logger = logging.getLogger("pyelogger")


def build_sink(config: ELoggerConfig) -> PersistenceSink:
    """Create the sinks enabled by *config*."""
    sinks: list[PersistenceSink] = []
    if config.database_url:
        sinks.append(SqlAlchemySink(config.database_url))
    if config.forward_url:
        sinks.append(HttpSink(config.forward_url))
    if not sinks:
        raise ELoggerError("No sink configured: set a database URL or a forward URL")
    if len(sinks) == 1:
        return sinks[0]
    return FanoutSink(*sinks)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyelogger",
        description="Log NMEA/AIS sensor-bus data at a rate driven by the vessel's navigational status.",
    )
    parser.add_argument("--host", help="Interface to listen on (default: $ELOGGER_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="TCP port (default: $ELOGGER_PORT or 3100)")
    parser.add_argument("--database-url", help="SQLAlchemy URL for log entries (default: sqlite:///shiplog.db)")
    parser.add_argument("--forward-url", help="Also POST every log entry as JSON to this URL")
    parser.add_argument(
        "--flush-on-disconnect",
        action="store_true",
        default=None,
        help="Commit a held sample when its connection closes instead of dropping it",
    )
    parser.add_argument("--stdin", action="store_true", help="Read one stream from standard input instead of TCP")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> ELoggerConfig:
    overrides = {
        "host": args.host,
        "port": args.port,
        "database_url": args.database_url,
        "forward_url": args.forward_url,
        "flush_on_disconnect": args.flush_on_disconnect,
    }
    return ELoggerConfig.from_env(**{k: v for k, v in overrides.items() if v is not None})


async def _run_stdin(config: ELoggerConfig, sink: PersistenceSink) -> None:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    session = ConnectionSession(
        SamplingScheduler(sink, name="stdin"),
        max_line_length=config.max_line_length,
        peer="stdin",
    )
    try:
        await consume_stream(reader, session, read_size=config.read_size)
    finally:
        await session.scheduler.aclose(flush=config.flush_on_disconnect)


async def _run(config: ELoggerConfig, *, use_stdin: bool) -> None:
    sink = build_sink(config)
    try:
        if use_stdin:
            await _run_stdin(config, sink)
        else:
            async with ELoggerServer(config, sink) as server:
                await server.serve_forever()
    finally:
        await sink.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = config_from_args(args)
    except ELoggerError as exc:
        _logger.error("Invalid configuration: %s", exc)
        return 2

    with contextlib.suppress(KeyboardInterrupt):
        try:
            asyncio.run(_run(config, use_stdin=args.stdin))
        except ELoggerError as exc:
            _logger.error("%s", exc)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
