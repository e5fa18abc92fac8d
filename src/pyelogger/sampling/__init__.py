"""Adaptive sampling: interval policy and the single-slot scheduler."""

from pyelogger.sampling.policy import DEFAULT_INTERVALS, interval_for_status
from pyelogger.sampling.scheduler import SamplingRequest, SamplingScheduler, SchedulerState, SchedulerStats

__all__ = [
    "DEFAULT_INTERVALS",
    "SamplingRequest",
    "SamplingScheduler",
    "SchedulerState",
    "SchedulerStats",
    "interval_for_status",
]
