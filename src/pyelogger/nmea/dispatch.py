"""Sentence-type dispatch.

Each handler turns one :class:`RawSentence` into a patch of record
fields. Patches are pruned here, so a field that failed to decode is
absent from the patch and the record keeps its previous value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pyelogger._constants import HPA_PER_BAR
from pyelogger.exceptions import UnsupportedSentenceTypeError
from pyelogger.nmea.fields import (
    parse_latitude,
    parse_longitude,
    parse_rmc_timestamp,
    parse_zda_timestamp,
    safe_float,
)
from pyelogger.nmea.tokenizer import RawSentence

_logger = logging.getLogger(__name__)

SentenceHandler = Callable[[RawSentence], dict[str, Any]]

#: Sentence types that are recognized but carry nothing the record stores.
IGNORED_SENTENCE_TYPES: frozenset[str] = frozenset({"GSA", "GSV", "RMB", "APB"})


def prune_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Drop ``None`` values; a missing key means "no update"."""
    return {key: value for key, value in patch.items() if value is not None}


class SentenceDispatcher:
    """Map sentence types (``RMC``, ``GGA``, ...) to field handlers.

    New sentence types are added by registration::

        dispatcher = SentenceDispatcher()

        @dispatcher.handler("XDR")
        def _xdr(sentence: RawSentence) -> dict[str, Any]:
            ...
    """

    def __init__(
        self,
        handlers: Mapping[str, SentenceHandler] | None = None,
        *,
        ignored: Iterable[str] = IGNORED_SENTENCE_TYPES,
    ) -> None:
        self._handlers: dict[str, SentenceHandler] = dict(handlers or {})
        self._ignored = frozenset(ignored)

    @property
    def sentence_types(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def register(self, sentence_type: str, handler: SentenceHandler) -> None:
        key = sentence_type.upper()
        if len(key) != 3:
            raise ValueError(f"sentence type must be 3 characters, got {sentence_type!r}")
        self._handlers[key] = handler

    def handler(self, sentence_type: str) -> Callable[[SentenceHandler], SentenceHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(fn: SentenceHandler) -> SentenceHandler:
            self.register(sentence_type, fn)
            return fn

        return decorator

    def copy(self) -> SentenceDispatcher:
        return SentenceDispatcher(self._handlers, ignored=self._ignored)

    def resolve(self, sentence_type: str) -> SentenceHandler:
        """Return the handler for *sentence_type*.

        Raises :class:`UnsupportedSentenceTypeError` when none is registered.
        """
        try:
            return self._handlers[sentence_type]
        except KeyError:
            raise UnsupportedSentenceTypeError(f"No handler for sentence type {sentence_type!r}") from None

    def dispatch(self, sentence: RawSentence) -> dict[str, Any]:
        """Decode *sentence* into a pruned record patch.

        Unknown and ignored sentence types produce an empty patch.
        """
        if sentence.sentence_type in self._ignored:
            return {}
        try:
            handler = self.resolve(sentence.sentence_type)
        except UnsupportedSentenceTypeError:
            _logger.debug("Ignoring unsupported sentence type %s", sentence.sentence_type)
            return {}
        return prune_patch(handler(sentence))


# ------------------------------------------------------------------
# Default handlers
# ------------------------------------------------------------------

default_dispatcher = SentenceDispatcher()


@default_dispatcher.handler("RMC")
def _rmc(s: RawSentence) -> dict[str, Any]:
    return {
        "latitude": parse_latitude(s.field(3), s.field(4)),
        "longitude": parse_longitude(s.field(5), s.field(6)),
        "speed_over_ground": safe_float(s.field(7)),
        "course_over_ground": safe_float(s.field(8)),
        "timestamp_utc": parse_rmc_timestamp(s.field(1), s.field(9)),
    }


@default_dispatcher.handler("VTG")
def _vtg(s: RawSentence) -> dict[str, Any]:
    # Field 1 is true track, field 5 speed in knots.
    return {
        "course_over_ground": safe_float(s.field(1)),
        "speed_over_ground": safe_float(s.field(5)),
    }


@default_dispatcher.handler("VHW")
def _vhw(s: RawSentence) -> dict[str, Any]:
    return {"heading": safe_float(s.field(1))}


@default_dispatcher.handler("HDT")
def _hdt(s: RawSentence) -> dict[str, Any]:
    return {"heading": safe_float(s.field(1))}


@default_dispatcher.handler("GLL")
def _gll(s: RawSentence) -> dict[str, Any]:
    return {
        "latitude": parse_latitude(s.field(1), s.field(2)),
        "longitude": parse_longitude(s.field(3), s.field(4)),
    }


@default_dispatcher.handler("GGA")
def _gga(s: RawSentence) -> dict[str, Any]:
    return {
        "latitude": parse_latitude(s.field(2), s.field(3)),
        "longitude": parse_longitude(s.field(4), s.field(5)),
    }


@default_dispatcher.handler("ZDA")
def _zda(s: RawSentence) -> dict[str, Any]:
    return {"timestamp_utc": parse_zda_timestamp(s.field(1), s.field(2), s.field(3), s.field(4))}


@default_dispatcher.handler("VBW")
def _vbw(s: RawSentence) -> dict[str, Any]:
    return {"speed_over_ground": safe_float(s.field(1))}


@default_dispatcher.handler("MWV")
def _mwv(s: RawSentence) -> dict[str, Any]:
    if s.field(5) == "V":
        return {}
    return {
        "wind_direction": safe_float(s.field(1)),
        "wind_speed": safe_float(s.field(3)),
    }


@default_dispatcher.handler("RSA")
def _rsa(s: RawSentence) -> dict[str, Any]:
    if s.field(2) == "V":
        return {}
    return {"rudder_angle": safe_float(s.field(1))}


@default_dispatcher.handler("MTW")
def _mtw(s: RawSentence) -> dict[str, Any]:
    return {"water_temp": safe_float(s.field(1))}


@default_dispatcher.handler("MDA")
def _mda(s: RawSentence) -> dict[str, Any]:
    bars = safe_float(s.field(3))
    return {
        "barometric_pressure": bars * HPA_PER_BAR if bars is not None else None,
        "air_temp": safe_float(s.field(5)),
        "water_temp": safe_float(s.field(7)),
    }


@default_dispatcher.handler("RPM")
def _rpm(s: RawSentence) -> dict[str, Any]:
    # Source "S" is shaft, "E" engine; only engine revolutions are logged.
    if s.field(1) != "E" or s.field(5) == "V":
        return {}
    return {"engine_rpm": safe_float(s.field(3))}
