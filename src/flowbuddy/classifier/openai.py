"""OpenAI-compatible chat-completion transport.

Works with OpenAI, Blablador, OpenRouter, and any OpenAI-compatible API
by setting a custom base_url.
"""

from __future__ import annotations

import logging
from typing import Any

from flowbuddy.classifier.base import ChatTransport, DecodeError, RequestError

logger = logging.getLogger(__name__)


class OpenAIChatTransport(ChatTransport):
    """Chat transport built on the official openai async client.

    Retries are disabled so every call is a single attempt.
    """

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        user: str = "flowbuddy-client",
        seed: int | None = 42,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._user = user
        self._seed = seed
        self._client = None

    async def _ensure_client(self) -> None:
        """Lazily initialize the OpenAI async client."""
        if self._client is not None:
            return
        from openai import AsyncOpenAI
        kwargs = {"api_key": self._api_key, "max_retries": 0}
        if self._base_url:
            kwargs["base_url"] = self._base_url
        self._client = AsyncOpenAI(**kwargs)
        logger.info("Initialized OpenAI client (base_url=%s)", self._base_url)

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> str:
        """Call chat.completions.create and return the first choice's content."""
        import openai

        await self._ensure_client()
        kwargs = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "user": self._user,
            "timeout": timeout,
        }
        if self._seed is not None:
            kwargs["seed"] = self._seed
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            raise RequestError(
                f"OpenAI API returned HTTP {e.status_code}",
                provider=self.provider,
                raw_response=str(e),
                status_code=e.status_code,
            ) from e
        except openai.APIError as e:
            raise RequestError(
                f"OpenAI API call failed: {e}", provider=self.provider
            ) from e

        if not response.choices or response.choices[0].message.content is None:
            raise DecodeError("No choices returned", provider=self.provider)
        raw_text = response.choices[0].message.content
        logger.debug("Chat completion raw response: %s", raw_text[:200])
        return raw_text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
