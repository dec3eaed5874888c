"""Screen capture implementation using mss.

Grabs one monitor, shrinks it to the configured width and re-encodes it
as JPEG so a vision request stays small.
"""

from __future__ import annotations

import asyncio
import logging

import mss
import numpy as np

from flowbuddy.capture.base import CaptureError, ContextCaptureSource
from flowbuddy.utils.imaging import bgra_to_bgr, downscale_to_width, encode_jpeg

logger = logging.getLogger(__name__)


class ScreenCapture(ContextCaptureSource):
    """Captures the screen using mss.

    Runs the blocking grab in a thread pool executor to avoid blocking
    the async event loop. A fresh mss handle is opened per capture since
    the handles are bound to the thread that created them.
    """

    def __init__(
        self,
        monitor_index: int = 1,
        max_width: int = 448,
        jpeg_quality: int = 60,
    ) -> None:
        super().__init__()
        self._monitor_index = monitor_index
        self._max_width = max_width
        self._jpeg_quality = jpeg_quality

    async def capture(self) -> bytes:
        """Capture the configured monitor as downsampled JPEG bytes."""
        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, self._capture_sync)
        except CaptureError:
            raise
        except Exception as e:
            raise CaptureError(f"Screen capture failed: {e}") from e
        self._capture_counter += 1
        logger.debug("Captured screen %d (%d bytes)", self._capture_counter, len(data))
        return data

    def _capture_sync(self) -> bytes:
        """Synchronous grab and encode (runs in thread pool)."""
        with mss.mss() as sct:
            if self._monitor_index >= len(sct.monitors):
                raise CaptureError(
                    f"Monitor {self._monitor_index} not available "
                    f"({len(sct.monitors) - 1} detected)"
                )
            shot = sct.grab(sct.monitors[self._monitor_index])
        image = bgra_to_bgr(np.array(shot))
        resized = downscale_to_width(image, self._max_width)
        return encode_jpeg(resized, self._jpeg_quality)
