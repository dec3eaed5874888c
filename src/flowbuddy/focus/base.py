"""Abstract OS collaborators for the focus-transfer controller.

The controller never talks to the window server directly. It drives a
FocusPlatform (which application is frontmost, who to activate) and a
CaptureSurface (the transient input window), so the state machine can
be exercised without a real desktop.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Hashable

logger = logging.getLogger(__name__)

# Opaque token identifying another application, e.g. a process id.
ApplicationHandle = Hashable


class FocusPlatform(ABC):
    """Access to the OS notion of the active application."""

    @abstractmethod
    def frontmost_application(self) -> ApplicationHandle | None:
        """The application that currently holds keyboard focus.

        Returns None when the OS cannot tell or when it is this process.

        Raises:
            FocusError: If the query is refused.
        """
        ...

    @abstractmethod
    def activate(self, handle: ApplicationHandle) -> None:
        """Give keyboard focus back to ``handle``.

        Raises:
            FocusError: If the OS refuses the activation.
        """
        ...

    @abstractmethod
    def host_is_active(self) -> bool:
        """Whether this process is the OS-active application."""
        ...

    @abstractmethod
    def activate_host(self) -> None:
        """Force this process to the foreground, ignoring other apps."""
        ...


class CaptureSurface(ABC):
    """The transient window the user types offloaded thoughts into."""

    @abstractmethod
    def move_to_pointer_screen(self, vertical_offset: float) -> None:
        """Center on the screen under the pointer, shifted by ``vertical_offset``."""
        ...

    @abstractmethod
    def make_key_and_order_front(self) -> None:
        """Show the surface and make it receive keyboard input."""
        ...

    @abstractmethod
    def order_out(self) -> None:
        """Hide the surface. May synchronously report a loss of key status."""
        ...

    @abstractmethod
    def clear_input(self) -> None:
        """Discard any typed text and reset the category picker."""
        ...


class FocusError(Exception):
    """Raised when the OS refuses to report or transfer focus."""
