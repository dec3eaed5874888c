"""Image processing utilities for flowbuddy.

Downscaling and JPEG encoding applied to screen captures before they
are sent to the vision classifier.
"""

from __future__ import annotations

import base64
import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def bgra_to_bgr(image: np.ndarray) -> np.ndarray:
    """Drop the alpha channel of a BGRA screen grab."""
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


def downscale_to_width(image: np.ndarray, max_width: int = 448) -> np.ndarray:
    """Shrink an image to at most ``max_width`` pixels wide.

    Preserves aspect ratio. Images already narrow enough are returned
    unchanged; this never upscales.
    """
    h, w = image.shape[:2]
    if w <= max_width:
        return image
    scale = max_width / w
    new_h = max(1, int(round(h * scale)))
    return cv2.resize(image, (max_width, new_h), interpolation=cv2.INTER_AREA)


def encode_jpeg(image: np.ndarray, quality: int = 60) -> bytes:
    """Encode a BGR image as JPEG at a fixed quality."""
    success, buffer = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not success:
        raise ValueError("Failed to encode image to JPEG")
    return buffer.tobytes()


def jpeg_data_url(data: bytes) -> str:
    """Wrap JPEG bytes in a base64 data URL for chat-completion payloads."""
    return "data:image/jpeg;base64," + base64.b64encode(data).decode("utf-8")
