"""Tests for the core domain models."""

from __future__ import annotations

import pydantic
import pytest

from flowbuddy.domain.models import (
    CapturedThought,
    ResearchReport,
    ScreenContext,
    ScreenStatus,
    ThoughtCategory,
)


class TestScreenContext:
    def test_status_is_case_insensitive(self) -> None:
        context = ScreenContext(status="Distracted", app="YouTube", summary="The user is watching a video.")
        assert context.status is ScreenStatus.DISTRACTED

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ScreenContext(status="idle", app="Finder", summary="Nothing")

    def test_describe(self) -> None:
        context = ScreenContext(status="distracted", app="Reddit", summary="The user is browsing.")
        assert context.describe() == "Reddit: The user is browsing."


class TestResearchReport:
    def test_accepts_camel_case_action_items(self) -> None:
        report = ResearchReport.model_validate({
            "topic": "t", "summary": "s", "details": "d", "actionItems": ["https://a.test"],
        })
        assert report.action_items == ["https://a.test"]

    def test_rejects_more_than_five_action_items(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ResearchReport(topic="t", summary="s", details="d", action_items=["x"] * 6)

    def test_is_immutable(self) -> None:
        report = ResearchReport(topic="t", summary="s", details="d")
        with pytest.raises(pydantic.ValidationError):
            report.topic = "other"


class TestCapturedThought:
    def test_defaults(self) -> None:
        thought = CapturedThought(text="Buy milk", category=ThoughtCategory.REMINDER)
        assert thought.opened is False
        assert thought.research_report is None
        assert len(thought.id) == 32

    def test_ids_are_unique(self) -> None:
        a = CapturedThought(text="a", category=ThoughtCategory.REMINDER)
        b = CapturedThought(text="a", category=ThoughtCategory.REMINDER)
        assert a.id != b.id

    def test_blank_text_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            CapturedThought(text="   ", category=ThoughtCategory.RESEARCH)

    def test_auto_category_cannot_be_stored(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            CapturedThought(text="What is RNN?", category=ThoughtCategory.AUTO)
