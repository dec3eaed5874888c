"""Abstract base class for context capture sources.

All capture implementations must conform to this interface, so the
monitoring scheduler can run against a real screen grab or a canned
image in tests without changing the rest of the pipeline.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ContextCaptureSource(ABC):
    """Abstract interface for producing a snapshot of what the user sees.

    Implementations return encoded image bytes that are already
    downsampled and compressed for transmission to the vision
    classifier.
    """

    def __init__(self) -> None:
        self._capture_counter: int = 0

    @property
    def capture_count(self) -> int:
        """Number of successful captures so far."""
        return self._capture_counter

    @abstractmethod
    async def capture(self) -> bytes:
        """Capture a single snapshot.

        Returns:
            Encoded image bytes (JPEG).

        Raises:
            CaptureError: If the snapshot cannot be acquired or encoded.
        """
        ...


class CaptureError(Exception):
    """Raised when screen or image acquisition fails."""
