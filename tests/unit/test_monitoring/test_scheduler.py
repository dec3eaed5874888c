"""Tests for the MonitoringScheduler."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from flowbuddy.capture.base import CaptureError
from flowbuddy.classifier.base import DecodeError, RequestError
from flowbuddy.domain.models import ALLOWED_INTERVALS, ScreenContext
from flowbuddy.monitoring.scheduler import MonitoringScheduler
from flowbuddy.state.session import SessionState

DISTRACTED = ScreenContext(status="distracted", app="YouTube", summary="The user is watching videos.")
WORKING = ScreenContext(status="work", app="VS Code", summary="The user is coding.")


@pytest.fixture
def monitoring_state(state: SessionState) -> SessionState:
    state.monitoring_enabled = True
    state.monitoring_interval_seconds = 10
    return state


@pytest.fixture
def scheduler(
    monitoring_state: SessionState,
    mock_capture_source: AsyncMock,
    mock_classifier: AsyncMock,
) -> MonitoringScheduler:
    return MonitoringScheduler(monitoring_state, mock_capture_source, mock_classifier)


def _live_timers() -> list[asyncio.Task]:
    return [
        t for t in asyncio.all_tasks()
        if t.get_name().startswith("monitoring-timer") and not t.done()
    ]


class TestTimer:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("interval", ALLOWED_INTERVALS)
    async def test_restart_leaves_exactly_one_timer(self, scheduler: MonitoringScheduler, interval: int) -> None:
        scheduler.start(10)
        first = scheduler._timer
        scheduler.start(interval)
        await asyncio.sleep(0)

        assert first.cancelled()
        assert len(_live_timers()) == 1
        assert scheduler.interval == interval
        scheduler.stop()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("interval", [0, 7, 45])
    async def test_rejects_unknown_interval(self, scheduler: MonitoringScheduler, interval: int) -> None:
        with pytest.raises(ValueError):
            scheduler.start(interval)
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_start_uses_state_interval(self, monitoring_state: SessionState, scheduler: MonitoringScheduler) -> None:
        monitoring_state.monitoring_interval_seconds = 30
        scheduler.start()
        assert scheduler.interval == 30
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_timer(self, scheduler: MonitoringScheduler) -> None:
        scheduler.start(5)
        timer = scheduler._timer
        scheduler.stop()
        await asyncio.sleep(0)
        assert timer.cancelled()
        assert not scheduler.is_running
        assert scheduler.interval is None

    @pytest.mark.asyncio
    async def test_timer_fires_ticks(self, scheduler: MonitoringScheduler, mock_classifier: AsyncMock, monkeypatch) -> None:
        mock_classifier.analyze_screen.return_value = WORKING
        ticks = []
        monkeypatch.setattr(scheduler, "on_tick", lambda: ticks.append(1))

        real_sleep = asyncio.sleep

        async def fast_sleep(delay: float) -> None:
            await real_sleep(0)

        monkeypatch.setattr("flowbuddy.monitoring.scheduler.asyncio.sleep", fast_sleep)
        scheduler.start(60)
        for _ in range(5):
            await real_sleep(0)
        scheduler.stop()
        assert len(ticks) >= 2


class TestStateWiring:
    @pytest.mark.asyncio
    async def test_interval_change_while_enabled_restarts(self, monitoring_state: SessionState, scheduler: MonitoringScheduler) -> None:
        scheduler.attach()
        scheduler.start()
        first = scheduler._timer

        monitoring_state.monitoring_interval_seconds = 25
        await asyncio.sleep(0)

        assert first.cancelled()
        assert scheduler.interval == 25
        assert len(_live_timers()) == 1
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_interval_change_while_disabled_does_not_start(self, state: SessionState, mock_capture_source, mock_classifier) -> None:
        scheduler = MonitoringScheduler(state, mock_capture_source, mock_classifier)
        scheduler.attach()
        state.monitoring_interval_seconds = 15
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_disable_stops_timer_and_clears_distraction(self, monitoring_state: SessionState, scheduler: MonitoringScheduler) -> None:
        scheduler.attach()
        scheduler.start()
        monitoring_state.current_distraction = "YouTube: The user is watching videos."

        monitoring_state.monitoring_enabled = False

        assert monitoring_state.current_distraction is None
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_enable_starts_timer(self, state: SessionState, mock_capture_source, mock_classifier) -> None:
        scheduler = MonitoringScheduler(state, mock_capture_source, mock_classifier)
        scheduler.attach()
        state.monitoring_enabled = True
        assert scheduler.is_running
        scheduler.detach()
        scheduler.stop()


class TestTick:
    @pytest.mark.asyncio
    async def test_distracted_sets_banner(self, monitoring_state, scheduler, mock_classifier, mock_capture_source) -> None:
        mock_classifier.analyze_screen.return_value = DISTRACTED

        await scheduler.on_tick()

        mock_classifier.analyze_screen.assert_awaited_once_with(mock_capture_source.capture.return_value)
        assert monitoring_state.current_distraction == "YouTube: The user is watching videos."

    @pytest.mark.asyncio
    async def test_work_clears_banner(self, monitoring_state, scheduler, mock_classifier) -> None:
        monitoring_state.current_distraction = "Reddit: browsing"
        mock_classifier.analyze_screen.return_value = WORKING

        await scheduler.on_tick()

        assert monitoring_state.current_distraction is None

    @pytest.mark.asyncio
    async def test_disabled_tick_is_noop(self, state, mock_capture_source, mock_classifier) -> None:
        scheduler = MonitoringScheduler(state, mock_capture_source, mock_classifier)
        assert scheduler.on_tick() is None
        mock_capture_source.capture.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_capture_failure_leaves_banner(self, monitoring_state, scheduler, mock_capture_source, mock_classifier) -> None:
        monitoring_state.current_distraction = "Reddit: browsing"
        mock_capture_source.capture.side_effect = CaptureError("permission denied")

        await scheduler.on_tick()

        assert monitoring_state.current_distraction == "Reddit: browsing"
        mock_classifier.analyze_screen.assert_not_awaited()
        assert not scheduler.is_analyzing

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [RequestError("502"), DecodeError("not json")])
    async def test_classifier_failure_leaves_banner(self, monitoring_state, scheduler, mock_classifier, error) -> None:
        monitoring_state.current_distraction = "Reddit: browsing"
        mock_classifier.analyze_screen.side_effect = error

        await scheduler.on_tick()

        assert monitoring_state.current_distraction == "Reddit: browsing"
        assert not scheduler.is_analyzing

    @pytest.mark.asyncio
    async def test_overlapping_tick_is_dropped(self, monitoring_state, scheduler, mock_capture_source, mock_classifier) -> None:
        release = asyncio.Event()

        async def slow_capture() -> bytes:
            await release.wait()
            return b"jpeg"

        mock_capture_source.capture.side_effect = slow_capture
        mock_classifier.analyze_screen.return_value = DISTRACTED

        first = scheduler.on_tick()
        await asyncio.sleep(0)
        assert scheduler.is_analyzing
        assert scheduler.on_tick() is None
        assert scheduler.on_tick() is None

        release.set()
        await first

        assert mock_classifier.analyze_screen.await_count == 1
        assert scheduler.dropped_ticks == 2
        assert not scheduler.is_analyzing

    @pytest.mark.asyncio
    async def test_result_after_stop_is_discarded(self, monitoring_state, scheduler, mock_capture_source, mock_classifier) -> None:
        release = asyncio.Event()

        async def slow_capture() -> bytes:
            await release.wait()
            return b"jpeg"

        mock_capture_source.capture.side_effect = slow_capture
        mock_classifier.analyze_screen.return_value = DISTRACTED

        task = scheduler.on_tick()
        await asyncio.sleep(0)
        scheduler.stop()
        release.set()
        await task

        assert monitoring_state.current_distraction is None

    @pytest.mark.asyncio
    async def test_scenario_interval_ten_capture_fails(self, monitoring_state, scheduler, mock_capture_source) -> None:
        monitoring_state.current_distraction = "Netflix: The user is watching a show."
        mock_capture_source.capture.side_effect = CaptureError("no display")
        scheduler.start(10)

        task = scheduler.on_tick()
        await task

        assert task.exception() is None
        assert monitoring_state.current_distraction == "Netflix: The user is watching a show."
        scheduler.stop()
