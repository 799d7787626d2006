"""
Tests for the recheck scheduler: the pure due-check and the asyncio host.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from pulse.domain.project import MonitorSettings, ProjectRecord
from pulse.scheduler.recheck import (
    CheckInterval,
    RecheckScheduler,
    RecheckState,
    SchedulerState,
    TickResult,
    describe_next_run,
    next_run_at,
    scheduler_tick,
)
from pulse.secure_config import SchedulerSettings


@pytest.fixture
def ready_state():
    """Enabled, prerequisites met, never run"""
    return RecheckState(enabled=True, interval=CheckInterval.WEEKLY, prerequisites_met=True)


class TestCheckInterval:
    def test_durations(self):
        assert [i.duration.days for i in CheckInterval] == [1, 3, 7, 14, 30]

    def test_labels(self):
        assert CheckInterval.BIWEEKLY.label == "Bi-weekly"
        assert CheckInterval.EVERY_3_DAYS.label == "Every 3 days"

    @pytest.mark.parametrize("value", ["2w", "", None, "weekly"])
    def test_unknown_falls_back_to_weekly(self, value):
        assert CheckInterval.parse(value) is CheckInterval.WEEKLY

    def test_parse_known(self):
        assert CheckInterval.parse("30d") is CheckInterval.MONTHLY


class TestSchedulerTick:
    """The pure transition function"""

    def test_disabled_is_idle(self, now):
        assert scheduler_tick(RecheckState(prerequisites_met=True), now) == TickResult(SchedulerState.IDLE, False)

    def test_missing_prerequisite_is_idle(self, now):
        state = RecheckState(enabled=True, prerequisites_met=False)
        assert scheduler_tick(state, now).state is SchedulerState.IDLE

    def test_never_run_is_due(self, ready_state, now):
        assert scheduler_tick(ready_state, now) == TickResult(SchedulerState.OVERDUE, True)

    def test_in_flight_is_never_due(self, ready_state, now):
        result = scheduler_tick(replace(ready_state, in_flight=True), now)
        assert result == TickResult(SchedulerState.RUNNING, False)

    def test_exactly_one_interval_is_not_due(self, now):
        state = RecheckState(enabled=True, prerequisites_met=True, last_run=now - timedelta(days=7))
        assert scheduler_tick(state, now) == TickResult(SchedulerState.ARMED, False)

    def test_past_interval_is_due(self, now):
        state = RecheckState(enabled=True, prerequisites_met=True, last_run=now - timedelta(days=7, seconds=1))
        assert scheduler_tick(state, now).due

    def test_daily_interval(self, now):
        state = RecheckState(
            enabled=True,
            prerequisites_met=True,
            interval=CheckInterval.DAILY,
            last_run=now - timedelta(hours=25),
        )
        assert scheduler_tick(state, now).due


class TestRecheckState:
    @pytest.fixture
    def project(self, now):
        return ProjectRecord(
            url="https://site.com",
            competitors=({"url": "rival.com"},),
            monitor_settings=MonitorSettings(enabled=True, interval="3d"),
            last_run=now - timedelta(days=1),
        )

    def test_for_project(self, project, now):
        state = RecheckState.for_project(project, has_credential=True)

        assert state.enabled and state.prerequisites_met
        assert state.interval is CheckInterval.EVERY_3_DAYS
        assert state.last_run == now - timedelta(days=1)

    def test_no_credential(self, project):
        assert not RecheckState.for_project(project, has_credential=False).prerequisites_met

    def test_no_competitors(self, project):
        bare = ProjectRecord(url=project.url, monitor_settings=project.monitor_settings)
        assert not RecheckState.for_project(bare, has_credential=True).prerequisites_met


class TestNextRun:
    def test_pending(self, now):
        assert next_run_at(None, "7d", now) is None
        assert describe_next_run(None, "7d", now) == "Now (pending)"

    def test_upcoming(self, now):
        last_run = now - timedelta(days=2)
        assert next_run_at(last_run, CheckInterval.WEEKLY, now) == now + timedelta(days=5)
        assert describe_next_run(last_run, "7d", now) == "Mar 9, 12:00"

    def test_overdue(self, now):
        assert describe_next_run(now - timedelta(days=8), "7d", now) == "Overdue"


class TestRecheckSchedulerHost:
    """The asyncio host around scheduler_tick"""

    @pytest.fixture
    def make_scheduler(self, now, ready_state):
        def _make(check, **kwargs):
            kwargs.setdefault("clock", lambda: now)
            kwargs.setdefault("startup_delay_seconds", 3600)
            kwargs.setdefault("state", ready_state)
            return RecheckScheduler(check, **kwargs)

        return _make

    @pytest.mark.asyncio
    async def test_successful_run_sets_last_run(self, make_scheduler, now):
        completed = []

        async def check():
            return None

        scheduler = make_scheduler(check, on_success=completed.append)
        await scheduler.start()

        assert scheduler.tick().due
        await scheduler.current_run

        assert scheduler.state.last_run == now
        assert scheduler.state.in_flight is False
        assert completed == [now]
        assert scheduler.current_state is SchedulerState.ARMED
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_tick_while_running_is_dropped(self, make_scheduler, caplog):
        release = asyncio.Event()
        calls = 0

        async def check():
            nonlocal calls
            calls += 1
            await release.wait()

        scheduler = make_scheduler(check)
        await scheduler.start()

        first = scheduler.tick()
        with caplog.at_level(logging.INFO, logger="pulse.scheduler.recheck"):
            second = scheduler.tick()

        assert first.due
        assert second == TickResult(SchedulerState.RUNNING, False)
        assert "suppressed" in caplog.text

        release.set()
        await scheduler.current_run
        assert calls == 1
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_failed_run_keeps_last_run(self, make_scheduler, caplog):
        completed = []

        async def check():
            raise RuntimeError("quota exceeded")

        scheduler = make_scheduler(check, on_success=completed.append)
        await scheduler.start()

        with caplog.at_level(logging.WARNING, logger="pulse.scheduler.recheck"):
            scheduler.tick()
            await scheduler.current_run

        assert scheduler.state.last_run is None
        assert scheduler.state.in_flight is False
        assert completed == []
        assert "Scheduled recheck failed: quota exceeded" in caplog.text
        # Still due on the next tick
        assert scheduler.tick().due
        await scheduler.current_run
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_result_after_stop_is_discarded(self, make_scheduler, caplog):
        release = asyncio.Event()
        completed = []

        async def check():
            await release.wait()

        scheduler = make_scheduler(check, on_success=completed.append)
        await scheduler.start()
        scheduler.tick()

        await scheduler.stop()
        with caplog.at_level(logging.INFO, logger="pulse.scheduler.recheck"):
            release.set()
            await scheduler.current_run

        assert scheduler.state.last_run is None
        assert scheduler.state.in_flight is False
        assert completed == []
        assert "Discarding" in caplog.text

    @pytest.mark.asyncio
    async def test_disable_while_in_flight_disarms_and_discards(self, make_scheduler, ready_state, caplog):
        release = asyncio.Event()
        completed = []

        async def check():
            await release.wait()

        scheduler = make_scheduler(check, on_success=completed.append)
        await scheduler.start()
        scheduler.tick()
        assert scheduler.is_polling

        with caplog.at_level(logging.INFO, logger="pulse.scheduler.recheck"):
            scheduler.update(RecheckState(enabled=False))
            assert scheduler.state.in_flight is True
            assert not scheduler.is_polling

            release.set()
            await scheduler.current_run

        assert scheduler.state.last_run is None
        assert scheduler.state.in_flight is False
        assert completed == []
        assert "Discarding" in caplog.text

        # Re-enabling while started re-arms the timer
        scheduler.update(ready_state)
        assert scheduler.is_polling
        await scheduler.stop()
        assert not scheduler.is_polling

    @pytest.mark.asyncio
    async def test_losing_prerequisite_disarms(self, make_scheduler, ready_state):
        scheduler = make_scheduler(MagicMock())
        await scheduler.start()

        scheduler.update(replace(ready_state, prerequisites_met=False))

        assert scheduler.is_active
        assert not scheduler.is_polling
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_enabling_after_start_arms(self, make_scheduler, ready_state):
        scheduler = make_scheduler(MagicMock(), state=RecheckState())
        await scheduler.start()
        assert not scheduler.is_polling

        scheduler.update(ready_state)

        assert scheduler.is_polling
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_startup_delay(self, make_scheduler):
        check = MagicMock()
        scheduler = make_scheduler(check, startup_delay_seconds=0.05, poll_seconds=0.01)

        await scheduler.start()
        assert scheduler.is_polling
        await scheduler.stop()
        await asyncio.sleep(0.1)

        check.assert_not_called()
        assert scheduler.current_run is None
        assert not scheduler.is_polling

    @pytest.mark.asyncio
    async def test_polling_loop_runs_check(self, make_scheduler):
        ran = asyncio.Event()

        async def check():
            ran.set()

        scheduler = make_scheduler(check, startup_delay_seconds=0, poll_seconds=0.01)
        await scheduler.start()
        assert scheduler.is_active

        await asyncio.wait_for(ran.wait(), timeout=1)
        await scheduler.current_run
        await scheduler.stop()

        assert not scheduler.is_active
        assert scheduler.state.last_run is not None

    @pytest.mark.asyncio
    async def test_disabled_scheduler_never_runs(self, make_scheduler):
        check = MagicMock()
        scheduler = make_scheduler(check, state=RecheckState(), startup_delay_seconds=0, poll_seconds=0.01)

        await scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        check.assert_not_called()
        assert scheduler.current_run is None

    def test_from_config(self):
        config = MagicMock()
        config.get_scheduler_config.return_value = SchedulerSettings(poll_seconds=60, startup_delay_seconds=0)

        scheduler = RecheckScheduler.from_config(MagicMock(), config)

        assert scheduler.poll_seconds == 60
        assert scheduler.startup_delay_seconds == 0
