"""Context capture module for flowbuddy.

Provides downsampled screen snapshots for the monitoring scheduler. The
abstract base class allows alternative capture implementations (e.g.,
file-based test sources).

Public API:
    ContextCaptureSource -- Abstract base class
    ScreenCapture -- mss screen grab implementation
"""

from flowbuddy.capture.base import CaptureError, ContextCaptureSource

__all__ = ["ContextCaptureSource", "CaptureError", "ScreenCapture"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "ScreenCapture":
        from flowbuddy.capture.screen import ScreenCapture
        return ScreenCapture
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
