"""AIS sentence extraction and class-A position report decoding.

Only the header fields and the two values the sampling policy needs are
decoded: message type (bits 0-5) and navigational status (bits 38-41).

Format: !AIVDM,1,1,,A,15M67FC000G?ufbE`FepT@3n00Sa,0*5C
        |      | | | |  |                            |
        |      | | | |  |                            +-- fill bits, checksum
        |      | | | |  +------------------------------- payload (6-bit ASCII)
        |      | | | +---------------------------------- radio channel
        |      | | +------------------------------------ sequential message id
        |      | +-------------------------------------- fragment number
        |      +---------------------------------------- fragment count
        +----------------------------------------------- armor marker

Multi-fragment messages are rejected, never buffered.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from pyelogger._constants import (
    AIS_MARKER,
    AIS_MESSAGE_TYPE_BITS,
    AIS_MIN_FIELDS,
    AIS_NAV_STATUS_BITS,
    AIS_POSITION_REPORT_TYPES,
)
from pyelogger._logfmt import truncate_for_log
from pyelogger.ais.bits import BitReader
from pyelogger.exceptions import InvalidAISFrameError, UnsupportedMessageTypeError

_logger = logging.getLogger(__name__)


class NavigationalStatus(enum.IntEnum):
    """AIS navigational status codes (4-bit field)."""

    UNDER_WAY_USING_ENGINE = 0
    AT_ANCHOR = 1
    NOT_UNDER_COMMAND = 2
    RESTRICTED_MANOEUVRABILITY = 3
    CONSTRAINED_BY_DRAUGHT = 4
    MOORED = 5
    AGROUND = 6
    ENGAGED_IN_FISHING = 7
    UNDER_WAY_SAILING = 8
    RESERVED_HSC = 9
    RESERVED_WIG = 10
    POWER_DRIVEN_TOWING_ASTERN = 11
    POWER_DRIVEN_PUSHING_AHEAD = 12
    RESERVED_13 = 13
    AIS_SART_ACTIVE = 14
    NOT_DEFINED = 15


class AISFrame(BaseModel):
    """Decode result of one single-fragment AIS sentence."""

    model_config = ConfigDict(frozen=True)

    total_sentences: int = Field(..., ge=1)
    sentence_number: int = Field(..., ge=1)
    channel: str = ""
    payload: str
    message_type: int = Field(..., ge=0, le=63)
    navigational_status: int | None = Field(default=None, ge=0, le=15)

    @property
    def status_name(self) -> str | None:
        if self.navigational_status is None:
            return None
        return NavigationalStatus(self.navigational_status).name


def is_ais_sentence(line: str) -> bool:
    return line.lstrip().startswith(AIS_MARKER)


def find_ais_sentence(lines: str | Iterable[str]) -> str | None:
    """Return the first ``!AIVDM`` line, or ``None`` when there is none.

    Accepts a raw blob or already-split lines. Later AIS lines in the same
    batch are ignored.
    """
    if isinstance(lines, str):
        lines = lines.split("\n")
    for line in lines:
        if is_ais_sentence(line):
            return line.strip()
    return None


def _parse_count(value: str, name: str, sentence: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise InvalidAISFrameError(f"Invalid {name} {value!r}", sentence=sentence) from None


def decode_frame(sentence: str) -> AISFrame:
    """Decode a single-fragment class-A position report.

    Raises :class:`InvalidAISFrameError` for short, multi-fragment or
    badly armored sentences and :class:`UnsupportedMessageTypeError` for
    message types other than 1, 2 and 3.
    """
    text = sentence.strip()
    if not text.startswith(AIS_MARKER):
        raise InvalidAISFrameError("Not an AIS sentence", sentence=text)

    fields = text.split(",")
    if len(fields) < AIS_MIN_FIELDS:
        raise InvalidAISFrameError(f"Expected at least {AIS_MIN_FIELDS} fields, got {len(fields)}", sentence=text)

    total_sentences = _parse_count(fields[1], "fragment count", text)
    sentence_number = _parse_count(fields[2], "fragment number", text)
    if total_sentences > 1 or sentence_number > 1:
        raise InvalidAISFrameError(
            f"Multi-fragment message ({sentence_number}/{total_sentences}) not supported",
            sentence=text,
        )
    if total_sentences < 1 or sentence_number < 1:
        raise InvalidAISFrameError("Fragment count and number must be positive", sentence=text)

    payload = fields[5]
    if not payload:
        raise InvalidAISFrameError("Empty payload", sentence=text)

    reader = BitReader.from_payload(payload)
    message_type = reader.uint(*AIS_MESSAGE_TYPE_BITS)
    if message_type not in AIS_POSITION_REPORT_TYPES:
        raise UnsupportedMessageTypeError(
            f"AIS message type {message_type} is not a class-A position report",
            message_type=message_type,
            sentence=text,
        )

    return AISFrame(
        total_sentences=total_sentences,
        sentence_number=sentence_number,
        channel=fields[4],
        payload=payload,
        message_type=message_type,
        navigational_status=reader.uint(*AIS_NAV_STATUS_BITS),
    )


def extract_navigational_status(sentence: str | None) -> int | None:
    """Return the navigational status of *sentence*, or ``None``.

    ``None`` means "not applicable": no sentence, an invalid or
    multi-fragment frame, or a message type outside 1-3. Never raises.
    """
    if not sentence:
        return None
    try:
        frame = decode_frame(sentence)
    except InvalidAISFrameError as exc:
        _logger.debug("AIS frame not applicable (%s): %s", exc, truncate_for_log(sentence))
        return None
    return frame.navigational_status
