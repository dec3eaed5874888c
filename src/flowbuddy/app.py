"""Composition root for flowbuddy.

Builds the session state, classifier client, monitoring scheduler,
intake pipeline and (when the OS collaborators are supplied) the focus
controller from a Settings object, and wires them together.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from flowbuddy.capture.base import ContextCaptureSource
from flowbuddy.classifier.base import ChatTransport
from flowbuddy.classifier.client import ClassifierClient
from flowbuddy.config.settings import Settings, save_preferences
from flowbuddy.domain.models import SessionSummary, ThoughtCategory
from flowbuddy.focus.base import CaptureSurface, FocusPlatform
from flowbuddy.focus.channel import ToggleChannel
from flowbuddy.focus.controller import FocusTransferController
from flowbuddy.intake.pipeline import ThoughtClassificationPipeline
from flowbuddy.intake.store import InMemoryThoughtStore, JsonFileThoughtStore, ThoughtRepository
from flowbuddy.monitoring.scheduler import MonitoringScheduler
from flowbuddy.state.session import SessionState

logger = logging.getLogger(__name__)

PREFERENCE_FIELDS = (
    "monitoring_enabled",
    "monitoring_interval_seconds",
    "background_research_enabled",
)


def build_transport(settings: Settings) -> ChatTransport:
    """Create the chat transport selected by ``settings.classifier.provider``."""
    api_key = settings.api_key.get_secret_value()
    if not api_key:
        logger.warning("No classifier API key configured; requests will be rejected")

    cfg = settings.classifier
    if cfg.provider == "openai":
        from flowbuddy.classifier.openai import OpenAIChatTransport
        return OpenAIChatTransport(
            api_key=api_key, base_url=cfg.base_url, user=cfg.client_user, seed=cfg.seed
        )

    from flowbuddy.classifier.http import HttpChatTransport
    return HttpChatTransport(
        api_key=api_key, base_url=cfg.base_url, user=cfg.client_user, seed=cfg.seed
    )


def build_capture(settings: Settings) -> ContextCaptureSource:
    from flowbuddy.capture.screen import ScreenCapture
    return ScreenCapture(
        monitor_index=settings.capture.monitor_index,
        max_width=settings.capture.max_width,
        jpeg_quality=settings.capture.jpeg_quality,
    )


def build_store(settings: Settings) -> ThoughtRepository:
    if settings.storage.path:
        return JsonFileThoughtStore(settings.storage.path)
    return InMemoryThoughtStore()


class FlowBuddyApp:
    """Owns every long-lived component and their wiring."""

    def __init__(
        self,
        settings: Settings,
        *,
        capture: ContextCaptureSource | None = None,
        transport: ChatTransport | None = None,
        store: ThoughtRepository | None = None,
        platform: FocusPlatform | None = None,
        surface: CaptureSurface | None = None,
        config_path: Path | str | None = None,
    ) -> None:
        self.settings = settings
        self.store = store if store is not None else build_store(settings)
        self.state = SessionState(
            repository=self.store,
            monitoring_enabled=settings.monitoring.enabled,
            monitoring_interval_seconds=settings.monitoring.interval_seconds,
            background_research_enabled=settings.monitoring.background_research,
        )

        cfg = settings.classifier
        self.transport = transport if transport is not None else build_transport(settings)
        self.classifier = ClassifierClient(
            self.transport,
            vision_model=cfg.vision_model,
            classifier_model=cfg.classifier_model,
            research_model=cfg.research_model,
            request_timeout=cfg.request_timeout,
            vision_timeout=cfg.vision_timeout,
        )

        self.capture = capture if capture is not None else build_capture(settings)
        self.scheduler = MonitoringScheduler(self.state, self.capture, self.classifier)
        self.pipeline = ThoughtClassificationPipeline(self.state, self.store, self.classifier)

        self.toggle_channel = ToggleChannel()
        self.controller: FocusTransferController | None = None
        if platform is not None and surface is not None:
            self.controller = FocusTransferController(
                self.state,
                self.pipeline,
                platform,
                surface,
                channel=self.toggle_channel,
                reposition_on_open=settings.focus.reposition_on_open,
                vertical_offset=settings.focus.vertical_offset,
            )

        if config_path is not None:
            path = Path(config_path)
            for field in PREFERENCE_FIELDS:
                self.state.subscribe(field, lambda _new, _old: save_preferences(path, self.state))

    async def start(self) -> None:
        """Attach the scheduler to the state and start monitoring if enabled."""
        self.scheduler.attach()
        if self.state.monitoring_enabled:
            self.scheduler.start()
        logger.info(
            "flowbuddy started (monitoring=%s, interval=%ds, research=%s)",
            self.state.monitoring_enabled,
            self.state.monitoring_interval_seconds,
            self.state.background_research_enabled,
        )

    async def shutdown(self) -> None:
        """Stop the timer, let in-flight work settle and close the transport."""
        self.scheduler.stop()
        self.scheduler.detach()
        await self.scheduler.drain()
        await self.pipeline.drain()
        await self.transport.aclose()
        logger.info("flowbuddy stopped")

    def session_summary(self, now: datetime | None = None) -> SessionSummary:
        """Counts and timing for the current (or last) session."""
        start = self.state.session_start
        thoughts = [
            t for t in self.store.query()
            if start is None or t.created_at >= start
        ]
        return SessionSummary(
            started_at=start,
            ended_at=self.state.session_end,
            duration_seconds=self.state.session_elapsed(now),
            thought_count=len(thoughts),
            reminder_count=sum(1 for t in thoughts if t.category is ThoughtCategory.REMINDER),
            research_count=sum(1 for t in thoughts if t.category is ThoughtCategory.RESEARCH),
            unopened_count=sum(1 for t in thoughts if not t.opened),
            active=self.state.is_session_active,
        )
