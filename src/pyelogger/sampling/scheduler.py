"""Single-slot deferred commit scheduler.

The scheduler is a two-state machine:

* ``IDLE``: the next :meth:`SamplingScheduler.accept` takes the slot and
  arms a timer for the request's delay.
* ``HOLDING``: requests are dropped (not queued, not merged, and the
  running timer is not extended). When the timer fires the held payload
  is committed to the sink; the slot is released once that commit has
  finished, successfully or not.

All transitions happen inside one event-loop turn. They are additionally
serialized on a single lock shared by the acceptance and release paths so
the scheduler stays correct if driven from more than one thread.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import StrEnum

from pyelogger.exceptions import SchedulerBusyError
from pyelogger.sink.base import PersistenceSink
from pyelogger.state.record import LogEntry

_logger = logging.getLogger(__name__)


class SchedulerState(StrEnum):
    IDLE = "idle"
    HOLDING = "holding"


@dataclass(frozen=True, slots=True)
class SamplingRequest:
    """A record snapshot waiting ``delay`` seconds to be committed."""

    payload: LogEntry
    delay: float

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ValueError(f"delay must be non-negative, got {self.delay}")


@dataclass
class SchedulerStats:
    accepted: int = 0
    dropped: int = 0
    committed: int = 0
    failed: int = 0
    abandoned: int = 0


class SamplingScheduler:
    """Hold at most one pending commit for a persistence sink."""

    def __init__(
        self,
        sink: PersistenceSink,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        name: str = "",
    ) -> None:
        self._sink = sink
        self._loop = loop
        self._name = name
        self._guard = threading.Lock()
        self._state = SchedulerState.IDLE
        self._pending: SamplingRequest | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._commit_task: asyncio.Task[None] | None = None
        self._closed = False
        self.stats = SchedulerStats()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def pending(self) -> SamplingRequest | None:
        """The request currently occupying the slot, if any."""
        return self._pending

    @property
    def closed(self) -> bool:
        return self._closed

    def accept(self, request: SamplingRequest) -> bool:
        """Take the slot for *request*, or drop it when the slot is busy.

        Never blocks. Returns ``True`` when the request was accepted.
        """
        with self._guard:
            if self._closed:
                self.stats.dropped += 1
                _logger.debug("Scheduler %s closed; dropping sample", self._name)
                return False
            if self._state is SchedulerState.HOLDING:
                self.stats.dropped += 1
                _logger.debug(
                    "Scheduler %s busy; dropping sample with delay=%ss",
                    self._name,
                    request.delay,
                )
                return False

            loop = self._loop or asyncio.get_running_loop()
            self._state = SchedulerState.HOLDING
            self._pending = request
            self._timer = loop.call_later(request.delay, self._on_expiry)
            self.stats.accepted += 1

        _logger.info("Scheduler %s accepted sample; commit in %ss", self._name, request.delay)
        return True

    def submit(self, request: SamplingRequest) -> None:
        """Like :meth:`accept` but raise :class:`SchedulerBusyError` on drop."""
        if not self.accept(request):
            raise SchedulerBusyError(f"Scheduler {self._name or 'slot'} is occupied")

    def _on_expiry(self) -> None:
        with self._guard:
            self._timer = None
            request = self._pending
            if request is None:
                return
            loop = self._loop or asyncio.get_running_loop()
            self._commit_task = loop.create_task(self._commit(request))

    async def _commit(self, request: SamplingRequest) -> None:
        try:
            await self._sink.commit(request.payload)
        except Exception:
            # A failed commit releases the slot without retry.
            self.stats.failed += 1
            _logger.exception("Scheduler %s commit failed", self._name)
        else:
            self.stats.committed += 1
            _logger.info("Scheduler %s committed sample recorded_at=%s", self._name, request.payload.recorded_at)
        finally:
            self._release()

    def _release(self) -> None:
        with self._guard:
            self._state = SchedulerState.IDLE
            self._pending = None
            self._commit_task = None

    async def join(self) -> None:
        """Wait for an in-flight commit (not a still-running timer)."""
        task = self._commit_task
        if task is not None:
            await asyncio.shield(task)

    async def aclose(self, *, flush: bool = False) -> None:
        """Stop accepting requests.

        A request still waiting on its timer is abandoned, or committed
        immediately when *flush* is true. An in-flight commit is awaited.
        """
        with self._guard:
            self._closed = True
            timer, self._timer = self._timer, None
            waiting = self._pending if timer is not None else None
            if timer is not None:
                timer.cancel()

        if waiting is not None:
            if flush:
                _logger.info("Scheduler %s flushing held sample on close", self._name)
                await self._commit(waiting)
            else:
                self.stats.abandoned += 1
                _logger.warning("Scheduler %s closed with a held sample; abandoning it", self._name)
                self._release()

        await self.join()
