"""Line splitting and sentence classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pyelogger._constants import CHECKSUM_DELIMITER, NMEA_HEADER_LENGTH, NMEA_MARKER
from pyelogger._logfmt import truncate_for_log
from pyelogger.exceptions import MalformedSentenceError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawSentence:
    """One NMEA line tagged with its talker and sentence type.

    ``fields`` holds the comma-split line with the header at index 0 and
    the ``*hh`` checksum suffix removed from the last field, so field
    numbers match the NMEA 0183 documentation.
    """

    line: str
    talker: str
    sentence_type: str
    fields: tuple[str, ...]

    def field(self, index: int) -> str:
        """Return field *index*, or an empty string when absent."""
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return ""


def split_lines(blob: str) -> list[str]:
    """Split a complete text blob into lines, dropping blank ones."""
    return [line for line in blob.split("\n") if line.strip()]


def classify(line: str) -> RawSentence | None:
    """Classify *line* as an NMEA sentence.

    Returns ``None`` for lines that do not start with ``$`` (AIS, noise,
    blank lines). Raises :class:`MalformedSentenceError` for a ``$`` line
    whose header is not ``$`` + 2-char talker + 3-char type.
    """
    text = line.strip()
    if not text.startswith(NMEA_MARKER):
        return None

    body, _, _checksum = text.partition(CHECKSUM_DELIMITER)
    fields = tuple(body.split(","))
    header = fields[0]
    if len(header) != NMEA_HEADER_LENGTH or not header[1:].isalnum():
        raise MalformedSentenceError(f"Invalid NMEA header {header!r}", line=text)

    return RawSentence(
        line=text,
        talker=header[1:3],
        sentence_type=header[3:6],
        fields=fields,
    )


class LineBuffer:
    """Reassemble newline-terminated lines from arbitrary chunks.

    A chunk may carry several lines, or end halfway through one; the
    unterminated tail is held until the next chunk completes it.
    """

    def __init__(self, *, max_line_length: int = 4096) -> None:
        self._max_line_length = max_line_length
        self._tail = ""
        self._discarding = False

    @property
    def pending(self) -> str:
        """Unterminated text held from previous chunks."""
        return self._tail

    def feed(self, chunk: str) -> list[str]:
        """Append *chunk* and return the lines it completed."""
        if not chunk:
            return []

        parts = (self._tail + chunk).split("\n")
        self._tail = parts.pop()

        lines: list[str] = []
        for part in parts:
            if self._discarding:
                # Remainder of an oversize line dropped earlier.
                self._discarding = False
                continue
            if part.strip():
                lines.append(part)

        if len(self._tail) > self._max_line_length:
            _logger.warning(
                "Discarding unterminated line longer than %d chars: %s",
                self._max_line_length,
                truncate_for_log(self._tail, max_string=40),
            )
            self._tail = ""
            self._discarding = True

        return lines

    def flush(self) -> list[str]:
        """Return the held tail as a final line (end of stream)."""
        tail, self._tail = self._tail, ""
        discarding, self._discarding = self._discarding, False
        if discarding or not tail.strip():
            return []
        return [tail]
