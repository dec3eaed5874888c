"""Inbound channel for the "toggle capture" signal.

Whatever produces the signal (a global hotkey, a status-bar click, a
button in the app) emits on the channel; the focus controller is its one
receiver.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class ToggleChannel:
    """Single-receiver callback channel owned by the composition root."""

    def __init__(self) -> None:
        self._receiver: Callable[[], None] | None = None

    @property
    def connected(self) -> bool:
        return self._receiver is not None

    def connect(self, receiver: Callable[[], None]) -> None:
        if self._receiver is not None:
            raise RuntimeError("Toggle channel already has a receiver")
        self._receiver = receiver

    def disconnect(self) -> None:
        self._receiver = None

    def emit(self) -> None:
        """Deliver the toggle signal synchronously."""
        if self._receiver is None:
            logger.warning("Toggle signal emitted with no receiver connected")
            return
        self._receiver()
