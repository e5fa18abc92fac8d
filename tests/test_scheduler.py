from __future__ import annotations

import asyncio

import pytest

from pyelogger.exceptions import SchedulerBusyError, SinkError
from pyelogger.sampling.scheduler import SamplingRequest, SamplingScheduler, SchedulerState
from pyelogger.state.record import LogEntry


class _RecordingSink:
    def __init__(self, *, fail: bool = False, hold: asyncio.Event | None = None) -> None:
        self.entries: list[LogEntry] = []
        self._fail = fail
        self._hold = hold

    async def commit(self, entry: LogEntry) -> None:
        if self._hold is not None:
            await self._hold.wait()
        if self._fail:
            raise SinkError("disk full", sink="test")
        self.entries.append(entry)

    async def close(self) -> None:  # pragma: no cover
        return None


def _request(heading: float, delay: float = 0.01) -> SamplingRequest:
    return SamplingRequest(payload=LogEntry(heading=heading), delay=delay)


def test_negative_delay_rejected() -> None:
    with pytest.raises(ValueError):
        _request(1.0, delay=-1)


@pytest.mark.asyncio
async def test_second_request_while_holding_is_dropped() -> None:
    sink = _RecordingSink()
    scheduler = SamplingScheduler(sink, name="test")

    assert scheduler.accept(_request(1.0)) is True
    assert scheduler.state is SchedulerState.HOLDING
    assert scheduler.accept(_request(2.0)) is False

    await asyncio.sleep(0.1)

    assert [entry.heading for entry in sink.entries] == [1.0]
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.pending is None
    assert scheduler.stats.accepted == 1
    assert scheduler.stats.dropped == 1
    assert scheduler.stats.committed == 1


@pytest.mark.asyncio
async def test_slot_reopens_after_commit() -> None:
    sink = _RecordingSink()
    scheduler = SamplingScheduler(sink)

    scheduler.accept(_request(1.0))
    await asyncio.sleep(0.05)
    assert scheduler.accept(_request(2.0)) is True
    await asyncio.sleep(0.05)

    assert [entry.heading for entry in sink.entries] == [1.0, 2.0]


@pytest.mark.asyncio
async def test_slot_stays_held_until_commit_finishes() -> None:
    release = asyncio.Event()
    sink = _RecordingSink(hold=release)
    scheduler = SamplingScheduler(sink)

    scheduler.accept(_request(1.0))
    await asyncio.sleep(0.05)

    # Timer fired, commit still in progress.
    assert scheduler.state is SchedulerState.HOLDING
    assert scheduler.accept(_request(2.0)) is False

    release.set()
    await scheduler.join()

    assert scheduler.state is SchedulerState.IDLE
    assert [entry.heading for entry in sink.entries] == [1.0]


@pytest.mark.asyncio
async def test_failed_commit_releases_slot_without_retry() -> None:
    sink = _RecordingSink(fail=True)
    scheduler = SamplingScheduler(sink)

    scheduler.accept(_request(1.0))
    await asyncio.sleep(0.1)

    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.stats.failed == 1
    assert scheduler.stats.committed == 0
    assert sink.entries == []


@pytest.mark.asyncio
async def test_submit_raises_when_busy() -> None:
    scheduler = SamplingScheduler(_RecordingSink())

    scheduler.submit(_request(1.0, delay=10))
    with pytest.raises(SchedulerBusyError):
        scheduler.submit(_request(2.0))

    await scheduler.aclose()


# ------------------------------------------------------------------
# Shutdown
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_aclose_abandons_held_request() -> None:
    sink = _RecordingSink()
    scheduler = SamplingScheduler(sink)
    scheduler.accept(_request(1.0, delay=10))

    await scheduler.aclose()

    assert sink.entries == []
    assert scheduler.closed
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.stats.abandoned == 1
    assert scheduler.accept(_request(2.0)) is False


@pytest.mark.asyncio
async def test_aclose_flush_commits_held_request() -> None:
    sink = _RecordingSink()
    scheduler = SamplingScheduler(sink)
    scheduler.accept(_request(1.0, delay=10))

    await scheduler.aclose(flush=True)

    assert [entry.heading for entry in sink.entries] == [1.0]
    assert scheduler.stats.committed == 1
    assert scheduler.stats.abandoned == 0


@pytest.mark.asyncio
async def test_aclose_waits_for_in_flight_commit() -> None:
    release = asyncio.Event()
    sink = _RecordingSink(hold=release)
    scheduler = SamplingScheduler(sink)
    scheduler.accept(_request(1.0))
    await asyncio.sleep(0.05)

    closing = asyncio.create_task(scheduler.aclose())
    await asyncio.sleep(0)
    assert not closing.done()

    release.set()
    await closing

    assert [entry.heading for entry in sink.entries] == [1.0]
