"""Domain models for flowbuddy.

This package contains the core data structures, enumerations, and value
objects used throughout the system. All models use Pydantic v2 for
validation and serialization.
"""

from flowbuddy.domain.models import (
    ALLOWED_INTERVALS,
    CapturedThought,
    CloseReason,
    FocusState,
    ResearchReport,
    ScreenContext,
    ScreenStatus,
    SessionSummary,
    ThoughtCategory,
)

__all__ = [
    "ALLOWED_INTERVALS",
    "CapturedThought",
    "CloseReason",
    "FocusState",
    "ResearchReport",
    "ScreenContext",
    "ScreenStatus",
    "SessionSummary",
    "ThoughtCategory",
]
