"""Stateless classifier client for the three inference modes.

Builds the prompt for each mode, sends it through the shared
ChatTransport and decodes the fence-stripped JSON reply into domain
models.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from flowbuddy.classifier.base import ChatTransport, DecodeError, decode_json_object
from flowbuddy.classifier.prompts import REMINDER_PROMPT, RESEARCH_PROMPT, SCREEN_PROMPT
from flowbuddy.domain.models import ResearchReport, ScreenContext
from flowbuddy.utils.imaging import jpeg_data_url

logger = logging.getLogger(__name__)


class ClassifierClient:
    """Request/response wrapper around a remote text and vision model.

    Holds no per-request state, so concurrent calls never interfere.
    """

    def __init__(
        self,
        transport: ChatTransport,
        vision_model: str = "llama3.2-vision:11b",
        classifier_model: str = "alias-fast",
        research_model: str = "alias-large",
        request_timeout: float = 60.0,
        vision_timeout: float = 120.0,
    ) -> None:
        self._transport = transport
        self._vision_model = vision_model
        self._classifier_model = classifier_model
        self._research_model = research_model
        self._request_timeout = request_timeout
        self._vision_timeout = vision_timeout

    @property
    def transport(self) -> ChatTransport:
        return self._transport

    async def analyze_screen(self, image: bytes) -> ScreenContext:
        """Classify a JPEG screen capture as work or distraction."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": SCREEN_PROMPT},
                    {"type": "image_url", "image_url": {"url": jpeg_data_url(image)}},
                ],
            },
        ]
        raw = await self._transport.complete(
            messages,
            model=self._vision_model,
            temperature=0.0,
            max_tokens=256,
            timeout=self._vision_timeout,
        )
        data = decode_json_object(raw, provider=self._transport.provider)
        try:
            return ScreenContext.model_validate(data)
        except ValidationError as e:
            raise DecodeError(
                f"Screen context does not match schema: {e}",
                provider=self._transport.provider,
                raw_response=raw,
            ) from e

    async def classify_reminder(self, text: str) -> bool:
        """Return True if the thought is a reminder, False for research."""
        messages = [
            {"role": "system", "content": REMINDER_PROMPT},
            {"role": "user", "content": text},
        ]
        raw = await self._transport.complete(
            messages,
            model=self._classifier_model,
            temperature=0.1,
            max_tokens=50,
            timeout=self._request_timeout,
        )
        data = decode_json_object(raw, provider=self._transport.provider)
        is_reminder = data.get("isReminder")
        if not isinstance(is_reminder, bool):
            raise DecodeError(
                "Reminder classification lacks a boolean 'isReminder'",
                provider=self._transport.provider,
                raw_response=raw,
            )
        return is_reminder

    async def generate_research(self, text: str) -> ResearchReport:
        """Produce a research report for an offloaded question or topic."""
        messages = [
            {"role": "system", "content": RESEARCH_PROMPT},
            {"role": "user", "content": text},
        ]
        raw = await self._transport.complete(
            messages,
            model=self._research_model,
            temperature=0.7,
            max_tokens=5000,
            timeout=self._request_timeout,
        )
        data = decode_json_object(raw, provider=self._transport.provider)
        try:
            return ResearchReport.model_validate(data)
        except ValidationError as e:
            raise DecodeError(
                f"Research report does not match schema: {e}",
                provider=self._transport.provider,
                raw_response=raw,
            ) from e
