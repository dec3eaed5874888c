"""Shared test fixtures for the flowbuddy test suite.

Provides common fixtures used across unit tests: session state, thought
stores, a scripted chat transport, and fake OS collaborators for the
focus controller.
"""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from flowbuddy.classifier.base import ChatTransport
from flowbuddy.classifier.client import ClassifierClient
from flowbuddy.focus.base import CaptureSurface, FocusPlatform
from flowbuddy.intake.store import InMemoryThoughtStore
from flowbuddy.state.session import SessionState


# ---------------------------------------------------------------------------
# Canned Responses
# ---------------------------------------------------------------------------


SAMPLE_REPORT = {
    "topic": "Recurrent Neural Networks",
    "summary": "RNNs process sequences by carrying a hidden state between steps.",
    "details": "An RNN applies $h_t = \\tanh(W h_{t-1} + U x_t)$ at every step.",
    "actionItems": [
        "https://en.wikipedia.org/wiki/Recurrent_neural_network",
        "https://colah.github.io/posts/2015-08-Understanding-LSTMs/",
    ],
}


class ScriptedTransport(ChatTransport):
    """ChatTransport that replays queued replies (or raises queued errors)."""

    provider = "scripted"

    def __init__(self, *replies: str | Exception) -> None:
        self.replies: list[str | Exception] = list(replies)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def queue(self, reply: str | Exception) -> None:
        self.replies.append(reply)

    async def complete(self, messages, *, model, temperature, max_tokens, timeout) -> str:
        self.calls.append({
            "messages": messages,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": timeout,
        })
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def aclose(self) -> None:
        self.closed = True


class FakePlatform(FocusPlatform):
    """Records focus calls; the frontmost app and host activity are settable."""

    def __init__(self, frontmost: object | None = "com.apple.Safari") -> None:
        self.frontmost = frontmost
        self.host_active = True
        self.activated: list[object] = []
        self.host_activations = 0

    def frontmost_application(self):
        return self.frontmost

    def activate(self, handle) -> None:
        self.activated.append(handle)

    def host_is_active(self) -> bool:
        return self.host_active

    def activate_host(self) -> None:
        self.host_activations += 1


@pytest.fixture
def store() -> InMemoryThoughtStore:
    return InMemoryThoughtStore()


@pytest.fixture
def state(store: InMemoryThoughtStore) -> SessionState:
    return SessionState(repository=store)


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def classifier(transport: ScriptedTransport) -> ClassifierClient:
    return ClassifierClient(transport)


@pytest.fixture
def mock_classifier() -> AsyncMock:
    """A ClassifierClient stand-in with every mode as an AsyncMock."""
    mock = AsyncMock(spec=ClassifierClient)
    return mock


@pytest.fixture
def mock_capture_source() -> AsyncMock:
    """A capture source returning a tiny fake JPEG."""
    mock = AsyncMock()
    mock.capture.return_value = b"\xff\xd8fake-jpeg\xff\xd9"
    return mock


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def surface() -> MagicMock:
    return MagicMock(spec=CaptureSurface)


@pytest.fixture
def report_json() -> str:
    return json.dumps(SAMPLE_REPORT)
