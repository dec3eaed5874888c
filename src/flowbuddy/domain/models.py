"""Core domain models for the flowbuddy system.

These models represent the data flowing through the system: screen
context produced by the monitor, offloaded thoughts and their research
reports, and the states of the capture surface.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Monitoring cadences the user can pick from, in seconds.
ALLOWED_INTERVALS: tuple[int, ...] = (5, 10, 15, 20, 25, 30, 60)

MAX_ACTION_ITEMS = 5


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ThoughtCategory(str, enum.Enum):
    """Category of an offloaded thought."""

    AUTO = "auto"  # Pending, resolved by the classifier or keyword fallback
    REMINDER = "reminder"
    RESEARCH = "research"


class ScreenStatus(str, enum.Enum):
    """Whether the user appears to be working or distracted."""

    WORK = "work"
    DISTRACTED = "distracted"


class FocusState(str, enum.Enum):
    """Lifecycle of the capture surface."""

    CLOSED = "closed"
    OPEN = "open"
    CLOSING = "closing"


class CloseReason(str, enum.Enum):
    """What caused the capture surface to close."""

    SUBMIT = "submit"
    ESCAPE = "escape"
    OUTSIDE_CLICK = "outside_click"
    DEACTIVATED = "deactivated"
    TOGGLE = "toggle"


# ---------------------------------------------------------------------------
# Monitoring Models
# ---------------------------------------------------------------------------


class ScreenContext(BaseModel):
    """Vision classifier verdict for a single screen capture.

    Ephemeral: produced per monitoring tick and discarded once the
    session state has been updated.
    """

    model_config = ConfigDict(frozen=True)

    status: ScreenStatus = Field(description="Work or distracted")
    app: str = Field(description="Name of the active application")
    summary: str = Field(description="One sentence description of the activity")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def describe(self) -> str:
        """Banner text shown while the user is distracted."""
        return f"{self.app}: {self.summary}"


# ---------------------------------------------------------------------------
# Thought Models
# ---------------------------------------------------------------------------


class ResearchReport(BaseModel):
    """Background research generated for a research-type thought."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    topic: str
    summary: str
    details: str
    action_items: list[str] = Field(
        default_factory=list,
        alias="actionItems",
        max_length=MAX_ACTION_ITEMS,
        description="Links to relevant websites, at most five",
    )


class CapturedThought(BaseModel):
    """A thought the user offloaded through the capture surface.

    Created on submit with a concrete category; mutated in place when
    the research report arrives or the user opens it.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    text: str = Field(min_length=1)
    category: ThoughtCategory
    created_at: datetime = Field(default_factory=datetime.now)
    opened: bool = False
    research_report: ResearchReport | None = None

    @field_validator("text")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value

    @field_validator("category")
    @classmethod
    def _require_concrete_category(cls, value: ThoughtCategory) -> ThoughtCategory:
        if value is ThoughtCategory.AUTO:
            raise ValueError("stored thoughts need a resolved category")
        return value


# ---------------------------------------------------------------------------
# Session Models
# ---------------------------------------------------------------------------


class SessionSummary(BaseModel):
    """Snapshot of the current or last focus session."""

    model_config = ConfigDict(frozen=True)

    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration_seconds: float = Field(default=0.0, ge=0.0)
    thought_count: int = Field(default=0, ge=0)
    reminder_count: int = Field(default=0, ge=0)
    research_count: int = Field(default=0, ge=0)
    unopened_count: int = Field(default=0, ge=0)
    active: bool = False
