"""Focus-transfer state machine for the capture surface.

Opening the surface steals keyboard focus from whatever application the
user was in; every way of closing it must hand focus back exactly once,
and only when the OS would not do so by itself.
"""

from __future__ import annotations

import logging

from flowbuddy.domain.models import CloseReason, FocusState, ThoughtCategory
from flowbuddy.focus.base import ApplicationHandle, CaptureSurface, FocusError, FocusPlatform
from flowbuddy.focus.channel import ToggleChannel
from flowbuddy.intake.pipeline import ThoughtClassificationPipeline
from flowbuddy.state.session import SessionState

logger = logging.getLogger(__name__)


class FocusTransferController:
    """Shows and hides the capture surface and returns focus afterwards.

    States: CLOSED -> OPEN -> CLOSING -> CLOSED

    All exit paths (submit, escape, outside click, app deactivation,
    toggle) converge on ``_close``. Closing is ignored unless the
    surface is OPEN, so a hide that synchronously triggers another exit
    path (e.g. losing key status) cannot run the cleanup twice.
    """

    def __init__(
        self,
        state: SessionState,
        pipeline: ThoughtClassificationPipeline,
        platform: FocusPlatform,
        surface: CaptureSurface,
        channel: ToggleChannel | None = None,
        reposition_on_open: bool = True,
        vertical_offset: float = 120.0,
    ) -> None:
        self._state = state
        self._pipeline = pipeline
        self._platform = platform
        self._surface = surface
        self._reposition_on_open = reposition_on_open
        self._vertical_offset = vertical_offset
        self._focus_state = FocusState.CLOSED
        self._last_focused: ApplicationHandle | None = None
        self._last_close_reason: CloseReason | None = None
        if channel is not None:
            channel.connect(self.toggle)

    @property
    def focus_state(self) -> FocusState:
        return self._focus_state

    @property
    def last_focused_application(self) -> ApplicationHandle | None:
        return self._last_focused

    @property
    def last_close_reason(self) -> CloseReason | None:
        return self._last_close_reason

    # -- inbound signals ---------------------------------------------------

    def toggle(self) -> None:
        """Hotkey or tap: open when closed, close when open."""
        if self._focus_state is FocusState.CLOSED:
            self.open()
        elif self._focus_state is FocusState.OPEN:
            self._close(CloseReason.TOGGLE)

    def open(self) -> None:
        if self._focus_state is not FocusState.CLOSED:
            logger.debug("Ignoring open while %s", self._focus_state.value)
            return

        if self._reposition_on_open:
            self._surface.move_to_pointer_screen(self._vertical_offset)

        try:
            self._last_focused = self._platform.frontmost_application()
        except FocusError as e:
            logger.warning("Could not determine frontmost application: %s", e)
            self._last_focused = None

        self._surface.make_key_and_order_front()
        try:
            self._platform.activate_host()
        except FocusError as e:
            logger.warning("Could not bring capture surface to the foreground: %s", e)

        self._focus_state = FocusState.OPEN
        self._state.capture_surface_open = True
        logger.debug("Capture surface opened (previous app: %r)", self._last_focused)

    def submit(
        self, text: str, category: ThoughtCategory = ThoughtCategory.AUTO
    ) -> None:
        """Hand the text to the intake pipeline and close immediately."""
        if self._focus_state is not FocusState.OPEN:
            return
        if not text or not text.strip():
            return
        self._pipeline.submit(text, category)
        self._surface.clear_input()
        self._close(CloseReason.SUBMIT)

    def escape(self) -> None:
        """Escape key: discard the typed text and close."""
        if self._focus_state is not FocusState.OPEN:
            return
        self._surface.clear_input()
        self._close(CloseReason.ESCAPE)

    def surface_resigned_key(self) -> None:
        """The user clicked outside the surface."""
        self._close(CloseReason.OUTSIDE_CLICK)

    def host_resigned_active(self) -> None:
        """This process stopped being the active application."""
        self._close(CloseReason.DEACTIVATED)

    # -- cleanup -----------------------------------------------------------

    def _close(self, reason: CloseReason) -> None:
        if self._focus_state is not FocusState.OPEN:
            return
        self._focus_state = FocusState.CLOSING

        target = self._last_focused
        self._last_focused = None

        try:
            self._surface.order_out()
            # The OS only restores focus by itself when another process
            # took it; hiding our own window leaves us active.
            if target is not None and self._platform.host_is_active():
                try:
                    self._platform.activate(target)
                except FocusError as e:
                    logger.warning("Could not reactivate %r: %s", target, e)
        finally:
            self._focus_state = FocusState.CLOSED
            self._last_close_reason = reason
            self._state.capture_surface_open = False
        logger.debug("Capture surface closed (%s)", reason.value)
