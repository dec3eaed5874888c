"""Classifier module for flowbuddy.

Provides a provider-agnostic chat-completion transport and the client
that uses it for screen analysis, reminder detection and background
research.

Public API:
    ClassifierClient -- Vision / reminder / research requests
    ChatTransport -- Abstract base class
    HttpChatTransport -- httpx implementation
    OpenAIChatTransport -- OpenAI-compatible implementation
"""

from flowbuddy.classifier.base import (
    ChatTransport,
    ClassifierError,
    DecodeError,
    RequestError,
    strip_code_fences,
)
from flowbuddy.classifier.client import ClassifierClient

__all__ = [
    "ChatTransport",
    "ClassifierClient",
    "ClassifierError",
    "DecodeError",
    "HttpChatTransport",
    "OpenAIChatTransport",
    "RequestError",
    "strip_code_fences",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "HttpChatTransport":
        from flowbuddy.classifier.http import HttpChatTransport
        return HttpChatTransport
    if name == "OpenAIChatTransport":
        from flowbuddy.classifier.openai import OpenAIChatTransport
        return OpenAIChatTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
