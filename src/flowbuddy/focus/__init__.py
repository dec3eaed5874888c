"""Focus-transfer module for flowbuddy.

Public API:
    FocusTransferController -- Capture surface state machine
    FocusPlatform, CaptureSurface -- Abstract OS collaborators
    ToggleChannel -- Inbound toggle signal
"""

from flowbuddy.focus.base import CaptureSurface, FocusError, FocusPlatform
from flowbuddy.focus.channel import ToggleChannel
from flowbuddy.focus.controller import FocusTransferController

__all__ = [
    "CaptureSurface",
    "FocusError",
    "FocusPlatform",
    "FocusTransferController",
    "ToggleChannel",
]
