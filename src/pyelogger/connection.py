"""Per-connection ingestion pipeline.

One :class:`ConnectionSession` exists per inbound stream. It owns the
line buffer and the current-state record for that stream, so nothing is
shared between connections:

    chunk -> LineBuffer -> classify -> dispatch -> record.apply
          -> first !AIVDM line -> navigational status -> interval
          -> SamplingScheduler.accept(snapshot, delay)

Applied NMEA lines are archived on the next accepted snapshot.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime

from pyelogger._constants import MAX_ARCHIVED_SENTENCES
from pyelogger._logfmt import truncate_for_log
from pyelogger.ais.decoder import extract_navigational_status, find_ais_sentence
from pyelogger.exceptions import ELoggerError, MalformedSentenceError
from pyelogger.nmea.dispatch import SentenceDispatcher, default_dispatcher
from pyelogger.nmea.tokenizer import LineBuffer, classify
from pyelogger.sampling.policy import interval_for_status
from pyelogger.sampling.scheduler import SamplingRequest, SamplingScheduler
from pyelogger.state.record import ArchivedSentence, CurrentStateRecord

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConnectionSession:
    """Parse one stream of bus text into a record and sampling requests."""

    def __init__(
        self,
        scheduler: SamplingScheduler,
        *,
        dispatcher: SentenceDispatcher | None = None,
        record: CurrentStateRecord | None = None,
        clock: Callable[[], datetime] = _utcnow,
        max_line_length: int = 4096,
        max_archived_sentences: int = MAX_ARCHIVED_SENTENCES,
        peer: str = "",
    ) -> None:
        self._scheduler = scheduler
        self._dispatcher = dispatcher if dispatcher is not None else default_dispatcher
        self._record = record if record is not None else CurrentStateRecord()
        self._clock = clock
        self._buffer = LineBuffer(max_line_length=max_line_length)
        # Oldest lines fall off once the cap is reached.
        self._archive: deque[ArchivedSentence] = deque(maxlen=max_archived_sentences)
        self.peer = peer
        self.sentences_applied = 0
        self.sentences_rejected = 0

    @property
    def record(self) -> CurrentStateRecord:
        return self._record

    @property
    def scheduler(self) -> SamplingScheduler:
        return self._scheduler

    @property
    def pending_sentences(self) -> tuple[ArchivedSentence, ...]:
        """Applied lines not yet carried by an accepted snapshot."""
        return tuple(self._archive)

    def feed(self, chunk: str) -> int | None:
        """Process the lines *chunk* completes.

        Returns the navigational status decoded from the first AIS line
        of the batch, or ``None`` when there was none or it was not
        applicable.
        """
        return self._process(self._buffer.feed(chunk))

    def finish(self) -> int | None:
        """Process an unterminated final line at end of stream."""
        return self._process(self._buffer.flush())

    def process_blob(self, blob: str) -> int | None:
        """Feed a complete blob, treating its end as end of stream."""
        status = self.feed(blob)
        final = self.finish()
        return status if status is not None else final

    def _process(self, lines: list[str]) -> int | None:
        if not lines:
            return None
        for line in lines:
            self._apply_line(line)
        return self._sample(lines)

    def _apply_line(self, line: str) -> None:
        try:
            sentence = classify(line)
            if sentence is None:
                return
            updated = self._record.apply(self._dispatcher.dispatch(sentence))
        except MalformedSentenceError as exc:
            self.sentences_rejected += 1
            _logger.debug("Skipping malformed sentence (%s): %s", exc, truncate_for_log(line))
            return
        except ELoggerError as exc:
            self.sentences_rejected += 1
            _logger.warning("Handler produced an invalid patch (%s): %s", exc, truncate_for_log(line))
            return
        if updated:
            self.sentences_applied += 1
            self._archive.append(
                ArchivedSentence(sentence=sentence.line, source=sentence.talker, talker_type=sentence.sentence_type)
            )

    def _sample(self, lines: list[str]) -> int | None:
        status = extract_navigational_status(find_ais_sentence(lines))
        if status is None:
            return None

        self._record.apply({"navigational_status": status})
        delay = interval_for_status(status)
        if delay is None:
            _logger.debug("Navigational status %d has no sampling interval", status)
            return status

        snapshot = self._record.snapshot(self._clock(), sentences=self._archive)
        if self._scheduler.accept(SamplingRequest(payload=snapshot, delay=delay)):
            self._archive.clear()
        return status
