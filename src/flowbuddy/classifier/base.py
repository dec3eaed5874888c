"""Abstract chat-completion transport and classifier errors.

Every classifier request (screen vision, reminder detection, research
generation) goes through one ChatTransport, so providers can be swapped
without changing the client that builds prompts and decodes replies.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")


class ChatTransport(ABC):
    """Abstract interface for a chat-completion endpoint.

    Implementations make exactly one attempt per call and translate
    every failure into a RequestError or DecodeError.
    """

    provider: str = "unknown"

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> str:
        """Send the messages and return the first choice's text content.

        Raises:
            RequestError: If the endpoint is unreachable or does not
                answer with a success status.
            DecodeError: If the response envelope has no usable content.
        """
        ...

    async def aclose(self) -> None:
        """Release any pooled connections."""

    async def __aenter__(self) -> ChatTransport:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.aclose()


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block from a model reply.

    Handles an opening fence with or without a language tag (```json)
    and a closing fence; text without fences is only trimmed.
    """
    content = text.strip()
    content = _LEADING_FENCE.sub("", content, count=1)
    content = _TRAILING_FENCE.sub("", content, count=1)
    return content.strip()


def decode_json_object(raw_response: str, provider: str = "") -> dict[str, Any]:
    """Fence-strip a reply and parse it as a JSON object.

    Raises:
        DecodeError: If the stripped text is not a JSON object.
    """
    content = strip_code_fences(raw_response)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DecodeError(
            f"Response is not valid JSON: {e}",
            provider=provider,
            raw_response=raw_response,
        ) from e
    if not isinstance(data, dict):
        raise DecodeError(
            f"Expected a JSON object, got {type(data).__name__}",
            provider=provider,
            raw_response=raw_response,
        )
    return data


class ClassifierError(Exception):
    """Base class for classifier failures."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        raw_response: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.raw_response = raw_response
        self.status_code = status_code


class RequestError(ClassifierError):
    """Raised when the endpoint cannot be reached or answers with a non-success status."""


class DecodeError(ClassifierError):
    """Raised when a reply does not match the expected schema."""
