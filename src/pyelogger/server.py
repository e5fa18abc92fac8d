"""Asyncio TCP listener for the vessel sensor bus."""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
from typing import Any

from pyelogger.config import ELoggerConfig
from pyelogger.connection import ConnectionSession
from pyelogger.exceptions import ELoggerError, ELoggerTransportError
from pyelogger.nmea.dispatch import SentenceDispatcher
from pyelogger.sampling.scheduler import SamplingScheduler
from pyelogger.sink.base import PersistenceSink

_logger = logging.getLogger(__name__)


async def consume_stream(
    reader: asyncio.StreamReader,
    session: ConnectionSession,
    *,
    read_size: int = 4096,
) -> None:
    """Feed *reader* into *session* until end of stream.

    Bytes are decoded incrementally so a multi-byte character split
    across reads is not corrupted; undecodable bytes become U+FFFD.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        try:
            data = await reader.read(read_size)
        except (ConnectionError, OSError) as exc:
            raise ELoggerTransportError(f"Read failed: {exc}", peer=session.peer) from exc
        if not data:
            session.feed(decoder.decode(b"", final=True))
            session.finish()
            return
        session.feed(decoder.decode(data))


def _format_peer(peername: Any) -> str:
    if isinstance(peername, tuple) and len(peername) >= 2:
        return f"{peername[0]}:{peername[1]}"
    return str(peername or "unknown")


class ELoggerServer:
    """Accept sensor-bus connections and log each one independently.

    Usage::

        async with ELoggerServer(config, sink) as server:
            await server.serve_forever()
    """

    def __init__(
        self,
        config: ELoggerConfig,
        sink: PersistenceSink,
        *,
        dispatcher: SentenceDispatcher | None = None,
    ) -> None:
        self._config = config
        self._sink = sink
        self._dispatcher = dispatcher
        self._server: asyncio.Server | None = None
        self._handlers: set[asyncio.Task[Any]] = set()
        self._sessions: dict[str, ConnectionSession] = {}

    @property
    def sessions(self) -> dict[str, ConnectionSession]:
        """Active connections keyed by peer address."""
        return dict(self._sessions)

    @property
    def port(self) -> int:
        """Bound port (useful when configured with port 0 in tests)."""
        server = self._require_server()
        return int(server.sockets[0].getsockname()[1])

    def _require_server(self) -> asyncio.Server:
        if self._server is None:
            raise ELoggerError("Server not started. Use 'async with ELoggerServer(...) as server:'")
        return self._server

    async def __aenter__(self) -> ELoggerServer:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, self._config.host, self._config.port)
        _logger.info("TCP listener running on %s:%s", self._config.host, self.port)

    async def serve_forever(self) -> None:
        await self._require_server().serve_forever()

    async def aclose(self) -> None:
        server, self._server = self._server, None
        if server is None:
            return
        server.close()
        for task in list(self._handlers):
            task.cancel()
        await asyncio.gather(*self._handlers, return_exceptions=True)
        await server.wait_closed()
        _logger.info("TCP listener stopped")

    def new_session(self, peer: str) -> ConnectionSession:
        """Build the isolated pipeline for one connection."""
        scheduler = SamplingScheduler(self._sink, name=peer)
        return ConnectionSession(
            scheduler,
            dispatcher=self._dispatcher,
            max_line_length=self._config.max_line_length,
            peer=peer,
        )

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._handlers.add(task)
        peer = _format_peer(writer.get_extra_info("peername"))
        session = self.new_session(peer)
        self._sessions[peer] = session
        _logger.info("Client connected: %s", peer)

        try:
            await consume_stream(reader, session, read_size=self._config.read_size)
        except ELoggerTransportError as exc:
            _logger.warning("Connection %s failed: %s", peer, exc)
        finally:
            await session.scheduler.aclose(flush=self._config.flush_on_disconnect)
            self._sessions.pop(peer, None)
            writer.close()
            with contextlib.suppress(ConnectionError, OSError):
                await writer.wait_closed()
            if task is not None:
                self._handlers.discard(task)
            _logger.info(
                "Client disconnected: %s (applied=%d rejected=%d committed=%d dropped=%d)",
                peer,
                session.sentences_applied,
                session.sentences_rejected,
                session.scheduler.stats.committed,
                session.scheduler.stats.dropped,
            )
