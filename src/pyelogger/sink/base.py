"""Persistence sink interface."""

from __future__ import annotations

import logging
from typing import Protocol

from pyelogger.exceptions import SinkError
from pyelogger.state.record import LogEntry

_logger = logging.getLogger(__name__)


class PersistenceSink(Protocol):
    """Structural sink interface used by the sampling scheduler.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production sinks concrete. ``commit`` raises
    :class:`SinkError` on failure.
    """

    async def commit(self, entry: LogEntry) -> None:
        ...

    async def close(self) -> None:
        ...


class FanoutSink:
    """Commit every entry to several sinks in order.

    Each sink is attempted even if an earlier one fails; the first
    failure is re-raised afterwards.
    """

    def __init__(self, *sinks: PersistenceSink) -> None:
        self._sinks = sinks

    @property
    def sinks(self) -> tuple[PersistenceSink, ...]:
        return self._sinks

    async def commit(self, entry: LogEntry) -> None:
        first_error: SinkError | None = None
        for sink in self._sinks:
            try:
                await sink.commit(entry)
            except SinkError as exc:
                _logger.warning("Sink %s failed: %s", type(sink).__name__, exc)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    async def close(self) -> None:
        for sink in self._sinks:
            await sink.close()
