"""Periodic screen monitoring.

Captures the screen on a fixed cadence, asks the vision classifier
whether the user is working or distracted, and mirrors the verdict into
the session state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from flowbuddy.capture.base import CaptureError, ContextCaptureSource
from flowbuddy.classifier.base import ClassifierError
from flowbuddy.classifier.client import ClassifierClient
from flowbuddy.domain.models import ALLOWED_INTERVALS, ScreenStatus
from flowbuddy.monitoring.supervisor import SingleFlightRunner
from flowbuddy.state.session import SessionState

logger = logging.getLogger(__name__)


class MonitoringScheduler:
    """Runs context checks on a repeating timer without overlap.

    Coordinates: timer -> capture -> classify -> update distraction

    At most one timer is live at any time and at most one check is in
    flight; a tick that fires while a check is still running is dropped.
    Monitoring is best-effort: a failed check logs and leaves the
    previous distraction in place until the next tick.
    """

    def __init__(
        self,
        state: SessionState,
        capture: ContextCaptureSource,
        classifier: ClassifierClient,
    ) -> None:
        self._state = state
        self._capture = capture
        self._classifier = classifier
        self._runner = SingleFlightRunner(name="context-check")
        self._timer: asyncio.Task | None = None
        self._interval: int | None = None
        self._generation = 0
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def is_analyzing(self) -> bool:
        """The in-flight guard: True while a context check is outstanding."""
        return self._runner.is_busy

    @property
    def interval(self) -> int | None:
        """Cadence of the live timer in seconds, or None when stopped."""
        return self._interval if self.is_running else None

    @property
    def dropped_ticks(self) -> int:
        return self._runner.dropped

    # -- state wiring ------------------------------------------------------

    def attach(self) -> None:
        """Follow the monitoring toggles in the session state."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self._state.subscribe("monitoring_enabled", self._on_enabled_changed),
            self._state.subscribe("monitoring_interval_seconds", self._on_interval_changed),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_enabled_changed(self, enabled: bool, _old: bool) -> None:
        if enabled:
            self.start()
        else:
            self.stop()

    def _on_interval_changed(self, interval: int, _old: int) -> None:
        if self._state.monitoring_enabled:
            logger.info("Monitoring interval changed to %ds, restarting timer", interval)
            self.start(interval)

    # -- timer -------------------------------------------------------------

    def start(self, interval_seconds: int | None = None) -> None:
        """Arm the repeating timer, replacing any timer already running."""
        interval = interval_seconds
        if interval is None:
            interval = self._state.monitoring_interval_seconds
        if interval not in ALLOWED_INTERVALS:
            raise ValueError(
                f"Monitoring interval must be one of {ALLOWED_INTERVALS}, got {interval!r}"
            )

        previous = self._timer
        if previous is not None and not previous.done():
            previous.cancel()

        self._interval = interval
        self._timer = asyncio.get_running_loop().create_task(
            self._run_timer(interval), name=f"monitoring-timer-{interval}s"
        )
        logger.info("Monitoring timer armed every %ds", interval)

    def stop(self) -> None:
        """Cancel the timer; a check already in flight will discard its result."""
        self._generation += 1
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
            logger.info("Monitoring timer stopped")
        self._timer = None
        self._interval = None

    async def _run_timer(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval)
            self.on_tick()

    # -- ticks -------------------------------------------------------------

    def on_tick(self) -> asyncio.Task | None:
        """Start a context check unless monitoring is off or one is in flight.

        Returns:
            The check task, or None when the tick was a no-op.
        """
        if not self._state.monitoring_enabled:
            return None
        return self._runner.try_run(self.check_context)

    async def check_context(self) -> None:
        """Capture the screen, classify it and update the distraction banner."""
        generation = self._generation
        try:
            image = await self._capture.capture()
            context = await self._classifier.analyze_screen(image)
        except CaptureError as e:
            logger.warning("Screen capture failed: %s", e)
            return
        except ClassifierError as e:
            logger.warning("Screen analysis failed: %s", e)
            return

        logger.info("Screen analysis: %s (%s) %s", context.status.value, context.app, context.summary)

        if generation != self._generation or not self._state.monitoring_enabled:
            logger.debug("Discarding stale screen analysis")
            return

        if context.status is ScreenStatus.DISTRACTED:
            self._state.current_distraction = context.describe()
        else:
            self._state.current_distraction = None

    async def drain(self) -> None:
        """Wait for the in-flight context check, if any."""
        await self._runner.wait_idle()
