"""Recurring re-check scheduling"""

from pulse.scheduler.recheck import (
    CheckInterval,
    RecheckScheduler,
    RecheckState,
    SchedulerState,
    TickResult,
    next_run_at,
    scheduler_tick,
)

__all__ = [
    "CheckInterval",
    "RecheckScheduler",
    "RecheckState",
    "SchedulerState",
    "TickResult",
    "next_run_at",
    "scheduler_tick",
]
