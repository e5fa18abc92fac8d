"""Field decoders for NMEA sentences.

Every decoder here is pure and total: malformed or missing input yields
``None`` ("no update"), never an exception.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime

from pyelogger._constants import TWO_DIGIT_YEAR_PIVOT


def safe_float(value: str | None) -> float | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        result = float(text)
    except ValueError:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _parse_degrees_minutes(value: str | None, max_degrees: float) -> float | None:
    """Convert ``[D]DDMM.mmmm`` into unsigned decimal degrees.

    The minutes always occupy the two digits before the decimal point,
    so the degree width follows from the string rather than the field.
    """
    if not value:
        return None
    text = value.strip()
    dot = text.find(".")
    if dot == -1:
        dot = len(text)
    if dot < 3:
        return None

    degrees_text, minutes_text = text[: dot - 2], text[dot - 2 :]
    if not degrees_text.isdigit():
        return None
    minutes = safe_float(minutes_text)
    if minutes is None or not 0 <= minutes < 60:
        return None

    result = int(degrees_text) + minutes / 60.0
    if result > max_degrees:
        return None
    return result


def parse_latitude(value: str | None, hemisphere: str | None) -> float | None:
    """Decode an NMEA latitude (``DDMM.mmmm`` + ``N``/``S``)."""
    if hemisphere not in ("N", "S"):
        return None
    magnitude = _parse_degrees_minutes(value, 90.0)
    if magnitude is None:
        return None
    return -magnitude if hemisphere == "S" else magnitude


def parse_longitude(value: str | None, hemisphere: str | None) -> float | None:
    """Decode an NMEA longitude (``DDDMM.mmmm`` + ``E``/``W``)."""
    if hemisphere not in ("E", "W"):
        return None
    magnitude = _parse_degrees_minutes(value, 180.0)
    if magnitude is None:
        return None
    return -magnitude if hemisphere == "W" else magnitude


def _parse_time_of_day(value: str | None) -> tuple[int, int, int, int] | None:
    """Split ``HHMMSS[.sss]`` into hour, minute, second, microsecond."""
    if not value:
        return None
    text = value.strip()
    if len(text) < 6 or not text[:6].isdigit():
        return None
    hour, minute = int(text[0:2]), int(text[2:4])
    seconds = safe_float(text[4:])
    if seconds is None or seconds < 0:
        return None
    whole = int(seconds)
    micro = int(round((seconds - whole) * 1_000_000))
    if micro >= 1_000_000:
        whole, micro = whole + 1, 0
    return hour, minute, whole, micro


def _build_utc(year: int, month: int, day: int, time_of_day: tuple[int, int, int, int]) -> datetime | None:
    hour, minute, second, micro = time_of_day
    try:
        return datetime(year, month, day, hour, minute, second, micro, tzinfo=UTC)
    except ValueError:
        return None


def expand_two_digit_year(yy: int) -> int:
    """Map a two-digit NMEA year onto the GPS era (1980-2079)."""
    return 1900 + yy if yy >= TWO_DIGIT_YEAR_PIVOT else 2000 + yy


def parse_rmc_timestamp(time_value: str | None, date_value: str | None) -> datetime | None:
    """Combine RMC ``HHMMSS`` and ``DDMMYY`` into a UTC datetime.

    Inputs are taken as UTC already; no timezone conversion is applied.
    """
    time_of_day = _parse_time_of_day(time_value)
    if time_of_day is None or not date_value:
        return None
    text = date_value.strip()
    if len(text) != 6 or not text.isdigit():
        return None
    day, month, yy = int(text[0:2]), int(text[2:4]), int(text[4:6])
    return _build_utc(expand_two_digit_year(yy), month, day, time_of_day)


def parse_zda_timestamp(
    time_value: str | None,
    day: str | None,
    month: str | None,
    year: str | None,
) -> datetime | None:
    """Combine ZDA time with its explicit day, month and 4-digit year."""
    time_of_day = _parse_time_of_day(time_value)
    if time_of_day is None:
        return None
    parts: list[int] = []
    for value in (year, month, day):
        text = (value or "").strip()
        if not text.isdigit():
            return None
        parts.append(int(text))
    if parts[0] < 1000:
        return None
    return _build_utc(parts[0], parts[1], parts[2], time_of_day)
