"""Sampling interval policy.

This module intentionally contains *no* decoding. It maps an already
decoded AIS navigational status onto the delay before the next commit.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pyelogger.ais.decoder import NavigationalStatus

#: Seconds between commits per navigational status. Statuses absent from
#: the table never trigger a commit.
DEFAULT_INTERVALS: Mapping[int, float] = MappingProxyType(
    {
        NavigationalStatus.UNDER_WAY_USING_ENGINE: 10,
        NavigationalStatus.AT_ANCHOR: 120,
        NavigationalStatus.MOORED: 120,
        NavigationalStatus.RESTRICTED_MANOEUVRABILITY: 30,
        NavigationalStatus.NOT_DEFINED: 60,
    }
)


def interval_for_status(
    status: int | None,
    intervals: Mapping[int, float] = DEFAULT_INTERVALS,
) -> float | None:
    """Return the commit delay in seconds, or ``None`` for "no scheduling"."""
    if status is None:
        return None
    delay = intervals.get(status)
    return float(delay) if delay is not None else None
