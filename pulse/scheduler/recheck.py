"""
Recheck scheduler

Decides when a recurring external check (the citation share re-scan) is due
and runs it with at most one run in flight.

    - scheduler_tick(): pure transition from (state, now) to (state, due)
    - RecheckScheduler: asyncio host with a startup delay, a fixed polling
      period and an owned in-flight guard

The host polls on a short fixed period that is independent of the check
interval. A tick that finds a run already in flight is dropped, never queued.

Usage::

    scheduler = RecheckScheduler(check=run_citation_check, on_success=store.save_last_run)
    scheduler.update(RecheckState.for_project(project, has_credential=True))
    await scheduler.start()
    ...
    await scheduler.stop()
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import Enum

from pulse.core import get_logger
from pulse.domain.constants import scheduler_config
from pulse.domain.project import ProjectRecord
from pulse.secure_config import SecureConfig, get_config
from pulse.utils.datetime_utils import ensure_aware, short_date
from pulse.utils.error_handling import log_and_continue

logger = get_logger(__name__)


class CheckInterval(str, Enum):
    """Configured time between checks."""

    DAILY = "1d"
    EVERY_3_DAYS = "3d"
    WEEKLY = "7d"
    BIWEEKLY = "14d"
    MONTHLY = "30d"

    @property
    def duration(self) -> timedelta:
        return timedelta(days=int(self.value[:-1]))

    @property
    def label(self) -> str:
        return _INTERVAL_LABELS[self]

    @classmethod
    def parse(cls, value: "str | CheckInterval | None") -> "CheckInterval":
        """Resolve a stored interval key; unknown or missing keys mean weekly."""
        try:
            return cls(value)
        except ValueError:
            if value:
                logger.debug("Unknown check interval, using weekly", extra={"interval": value})
            return cls.WEEKLY


_INTERVAL_LABELS = {
    CheckInterval.DAILY: "Daily",
    CheckInterval.EVERY_3_DAYS: "Every 3 days",
    CheckInterval.WEEKLY: "Weekly",
    CheckInterval.BIWEEKLY: "Bi-weekly",
    CheckInterval.MONTHLY: "Monthly",
}


class SchedulerState(str, Enum):
    IDLE = "idle"
    """Disabled, or a prerequisite is missing"""

    ARMED = "armed"
    """Enabled and waiting for the interval to elapse"""

    RUNNING = "running"
    """A check is in flight"""

    OVERDUE = "overdue"
    """The interval has elapsed; the next action is to start a check"""


@dataclass(frozen=True)
class RecheckState:
    """
    Inputs to the due-check.

    Attributes:
        enabled: Auto re-check switched on
        interval: Time between checks
        last_run: Last successful check (None: never run, due immediately)
        prerequisites_met: Site URL, competitors and credential all present
        in_flight: A check is currently running
    """

    enabled: bool = False
    interval: CheckInterval = CheckInterval.WEEKLY
    last_run: datetime | None = None
    prerequisites_met: bool = False
    in_flight: bool = False

    @property
    def runnable(self) -> bool:
        return self.enabled and self.prerequisites_met

    @classmethod
    def for_project(cls, project: ProjectRecord, has_credential: bool) -> "RecheckState":
        """
        Build the scheduler inputs from a project record.

        Prerequisites: a site URL, at least one competitor and a usable
        check credential.
        """
        return cls(
            enabled=project.monitor_settings.enabled,
            interval=CheckInterval.parse(project.monitor_settings.interval),
            last_run=project.last_run,
            prerequisites_met=bool(project.url) and len(project.competitors) > 0 and has_credential,
        )


@dataclass(frozen=True)
class TickResult:
    state: SchedulerState
    due: bool


def scheduler_tick(state: RecheckState, now: datetime) -> TickResult:
    """
    Evaluate one tick.

    Due iff enabled, prerequisites met, nothing in flight, and either there
    is no last run or strictly more than one interval has elapsed since it.

    Returns:
        TickResult(OVERDUE, True) when a check should start now, otherwise
        the current state with ``due`` False
    """
    if not state.runnable:
        return TickResult(SchedulerState.IDLE, False)
    if state.in_flight:
        return TickResult(SchedulerState.RUNNING, False)
    if state.last_run is None or ensure_aware(now) - ensure_aware(state.last_run) > state.interval.duration:
        return TickResult(SchedulerState.OVERDUE, True)
    return TickResult(SchedulerState.ARMED, False)


def next_run_at(last_run: datetime | None, interval: CheckInterval | str, now: datetime) -> datetime | None:
    """
    When the next check becomes due.

    Returns None when the check is pending right now (never run). A returned
    time at or before ``now`` means the check is overdue.
    """
    if last_run is None:
        return None
    return ensure_aware(last_run) + CheckInterval.parse(interval).duration


def describe_next_run(last_run: datetime | None, interval: CheckInterval | str, now: datetime) -> str:
    """
    Examples:
        >>> describe_next_run(None, "7d", now)
        'Now (pending)'
    """
    due_at = next_run_at(last_run, interval, now)
    if due_at is None:
        return "Now (pending)"
    if due_at <= ensure_aware(now):
        return "Overdue"
    local = due_at.astimezone(ensure_aware(now).tzinfo)
    return f"{short_date(local)}, {local:%H:%M}"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RecheckScheduler:
    """
    Runs a recurring check on a fixed polling period.

    The scheduler owns its state; each instance has its own in-flight guard.
    Ticks are evaluated synchronously on the event loop, so checking and
    setting the guard cannot interleave with another tick.

    Args:
        check: Coroutine function performing the external check; raising
            marks the run as failed
        on_success: Called with the new last-run time after a successful run
        clock: Current-time source
        poll_seconds: Polling period
        startup_delay_seconds: Delay before the first tick after start()
    """

    def __init__(
        self,
        check: Callable[[], Awaitable[object]],
        on_success: Callable[[datetime], None] | None = None,
        clock: Callable[[], datetime] = _utc_now,
        poll_seconds: float = scheduler_config.POLL_SECONDS,
        startup_delay_seconds: float = scheduler_config.STARTUP_DELAY_SECONDS,
        state: RecheckState | None = None,
    ) -> None:
        self._check = check
        self._on_success = on_success
        self._clock = clock
        self.poll_seconds = poll_seconds
        self.startup_delay_seconds = startup_delay_seconds
        self.state = state or RecheckState()

        self._timer: asyncio.Task | None = None
        self._run: asyncio.Task | None = None
        self._generation = 0
        self._active = False

    @classmethod
    def from_config(
        cls,
        check: Callable[[], Awaitable[object]],
        config: SecureConfig | None = None,
        **kwargs,
    ) -> "RecheckScheduler":
        settings = (config or get_config()).get_scheduler_config()
        return cls(
            check,
            poll_seconds=settings.poll_seconds,
            startup_delay_seconds=settings.startup_delay_seconds,
            **kwargs,
        )

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_polling(self) -> bool:
        """Whether the startup delay or polling timer is currently armed."""
        return self._timer is not None and not self._timer.done()

    @property
    def current_state(self) -> SchedulerState:
        return scheduler_tick(self.state, self._clock()).state

    @property
    def current_run(self) -> asyncio.Task | None:
        """The in-flight check task, if any."""
        return self._run

    def update(self, state: RecheckState) -> None:
        """
        Replace the scheduler inputs (settings change or fresh project load).

        The in-flight flag is owned by the scheduler and is kept as-is.
        Disabling, or losing a prerequisite, cancels the timer and discards
        the result of a run already in flight. Becoming runnable again while
        started re-arms the timer, startup delay included.

        Must be called from the event loop thread.
        """
        was_runnable = self.state.runnable
        self.state = replace(state, in_flight=self.state.in_flight)

        if was_runnable and not self.state.runnable:
            self._generation += 1
            self._disarm()
            logger.info("Recheck scheduler disarmed", extra={"run_in_flight": self.state.in_flight})
        elif self._active and self.state.runnable and not self.is_polling:
            self._arm()

    def _arm(self) -> None:
        self._timer = asyncio.create_task(self._poll())

    def _disarm(self) -> asyncio.Task | None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        return timer

    async def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._generation += 1
        if self.state.runnable:
            self._arm()
        logger.info(
            "Recheck scheduler started",
            extra={
                "poll_seconds": self.poll_seconds,
                "startup_delay_seconds": self.startup_delay_seconds,
                "armed": self.is_polling,
            },
        )

    async def stop(self) -> None:
        """
        Cancel the startup delay and polling timer.

        A run already in flight is allowed to finish, but its result is
        discarded.
        """
        self._active = False
        self._generation += 1
        timer = self._disarm()
        if timer is not None:
            try:
                await timer
            except asyncio.CancelledError:
                pass
        logger.info("Recheck scheduler stopped", extra={"run_in_flight": self.state.in_flight})

    async def _poll(self) -> None:
        await asyncio.sleep(self.startup_delay_seconds)
        while True:
            self.tick()
            await asyncio.sleep(self.poll_seconds)

    def tick(self) -> TickResult:
        """
        Evaluate one tick and start a check if it is due.

        Must be called from the event loop thread.
        """
        now = self._clock()
        result = scheduler_tick(self.state, now)

        if result.state == SchedulerState.RUNNING:
            logger.info("Recheck tick suppressed, a check is already running")
        if not result.due:
            return result

        self.state = replace(self.state, in_flight=True)
        logger.info(
            "Scheduled recheck triggered",
            extra={"interval": self.state.interval.value, "last_run": self.state.last_run},
        )
        self._run = asyncio.create_task(self._execute(self._generation))
        return result

    async def _execute(self, generation: int) -> None:
        succeeded = False
        try:
            await self._check()
            succeeded = True
        except Exception as e:
            log_and_continue(logger, e, context={"last_run": self.state.last_run}, error_type="Scheduled recheck")
        finally:
            self.state = replace(self.state, in_flight=False)

        if not succeeded:
            return
        if not self._active or generation != self._generation:
            logger.info("Discarding recheck result that finished after the scheduler stopped")
            return

        finished_at = self._clock()
        self.state = replace(self.state, last_run=finished_at)
        logger.info("Scheduled recheck completed", extra={"last_run": finished_at})
        if self._on_success is not None:
            self._on_success(finished_at)
