"""HTTP chat-completion transport.

Posts OpenAI-style chat-completion requests with bearer-token auth to a
fixed endpoint, one attempt per call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from flowbuddy.classifier.base import ChatTransport, DecodeError, RequestError

logger = logging.getLogger(__name__)


class HttpChatTransport(ChatTransport):
    """Sends chat-completion requests to an OpenAI-compatible endpoint with httpx."""

    provider = "http"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.helmholtz-blablador.fz-juelich.de/v1",
        user: str = "flowbuddy-client",
        seed: int | None = 42,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._user = user
        self._seed = seed
        self._client = client
        self._owns_client = client is None

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/chat/completions"

    def _ensure_client(self) -> httpx.AsyncClient:
        """Lazily create the pooled HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient()
            logger.info("Initialized HTTP chat transport (endpoint=%s)", self.endpoint)
        return self._client

    def build_payload(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        return {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "top_p": 1.0,
            "top_k": -1,
            "n": 1,
            "max_tokens": max_tokens,
            "stop": None,
            "stream": False,
            "presence_penalty": 0,
            "frequency_penalty": 0,
            "user": self._user,
            "seed": self._seed,
        }

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> str:
        """POST the chat completion and return the first choice's content."""
        client = self._ensure_client()
        payload = self.build_payload(messages, model, temperature, max_tokens)
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = await client.post(self.endpoint, json=payload, headers=headers, timeout=timeout)
        except httpx.HTTPError as e:
            raise RequestError(
                f"Request to {self.endpoint} failed: {e}", provider=self.provider
            ) from e

        if resp.status_code != 200:
            logger.warning("Chat completion returned %d: %s", resp.status_code, resp.text[:200])
            raise RequestError(
                f"Chat completion returned HTTP {resp.status_code}",
                provider=self.provider,
                raw_response=resp.text,
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise DecodeError(
                f"Malformed chat completion envelope: {e}",
                provider=self.provider,
                raw_response=resp.text,
            ) from e
        if not isinstance(content, str):
            raise DecodeError(
                "Chat completion returned no text content",
                provider=self.provider,
                raw_response=resp.text,
            )

        logger.debug("Chat completion raw response: %s", content[:200])
        return content

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
