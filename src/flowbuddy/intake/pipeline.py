"""Thought intake pipeline.

Turns text typed into the capture surface into a stored CapturedThought
with a concrete category, and optionally attaches a background research
report later, all without blocking the caller on network latency.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from flowbuddy.classifier.base import ClassifierError
from flowbuddy.classifier.client import ClassifierClient
from flowbuddy.domain.models import CapturedThought, ResearchReport, ThoughtCategory
from flowbuddy.intake.store import ThoughtRepository
from flowbuddy.state.session import SessionState

logger = logging.getLogger(__name__)

REMINDER_KEYWORD = "remind"


def fallback_category(text: str) -> ThoughtCategory:
    """Keyword heuristic used when the remote classifier is unavailable."""
    if REMINDER_KEYWORD in text.lower():
        return ThoughtCategory.REMINDER
    return ThoughtCategory.RESEARCH


class ThoughtClassificationPipeline:
    """Classifies, stores and optionally researches offloaded thoughts.

    Every submission runs in its own task and only touches its own
    record, so any number of submissions may be in flight at once.
    """

    def __init__(
        self,
        state: SessionState,
        repository: ThoughtRepository,
        classifier: ClassifierClient,
    ) -> None:
        self._state = state
        self._repository = repository
        self._classifier = classifier
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of submissions and research jobs still running."""
        return len(self._tasks)

    def submit(
        self, text: str, category: ThoughtCategory = ThoughtCategory.AUTO
    ) -> asyncio.Task | None:
        """Schedule a thought for processing and return immediately.

        The submission belongs to the session that is current at this
        call, even if the task only starts running later.

        Returns:
            The processing task, or None if the text is empty.
        """
        if not text or not text.strip():
            return None
        return self._spawn(
            self._intake(text, category, self._state.session_generation, datetime.now()),
            name="thought-intake",
        )

    async def process(
        self, text: str, category: ThoughtCategory = ThoughtCategory.AUTO
    ) -> CapturedThought | None:
        """Resolve the category, store the thought and maybe schedule research.

        Awaits only the classification decision; research runs detached.

        Returns:
            The stored thought, or None if the session it was submitted in
            was started over or finished while it was being classified.
        """
        return await self._intake(text, category, self._state.session_generation, datetime.now())

    async def _intake(
        self,
        text: str,
        category: ThoughtCategory,
        generation: int,
        created_at: datetime,
    ) -> CapturedThought | None:
        resolved = await self.resolve_category(text, category)

        if generation != self._state.session_generation:
            logger.debug("Session changed while classifying %r, not storing it", text)
            return None

        thought = CapturedThought(text=text, category=resolved, created_at=created_at)
        self._repository.insert(thought)
        logger.info("Stored thought %s as %s", thought.id, resolved.value)

        if self._state.background_research_enabled and resolved is ThoughtCategory.RESEARCH:
            self._spawn(self._research_and_attach(thought, generation), name="thought-research")
        return thought

    async def resolve_category(self, text: str, category: ThoughtCategory) -> ThoughtCategory:
        """Use an explicit category as-is; classify AUTO remotely or by keyword."""
        if category is not ThoughtCategory.AUTO:
            return category
        try:
            is_reminder = await self._classifier.classify_reminder(text)
        except ClassifierError as e:
            resolved = fallback_category(text)
            logger.warning(
                "Thought classification failed (%s), falling back to %s", e, resolved.value
            )
            return resolved
        return ThoughtCategory.REMINDER if is_reminder else ThoughtCategory.RESEARCH

    async def run_research(self, text: str) -> ResearchReport:
        """Generate a research report for ``text``.

        Raises:
            RequestError: If the research request fails.
            DecodeError: If the reply is not a valid report.
        """
        return await self._classifier.generate_research(text)

    async def _research_and_attach(self, thought: CapturedThought, generation: int) -> None:
        try:
            report = await self.run_research(thought.text)
        except ClassifierError as e:
            logger.warning("Background research for %s failed: %s", thought.id, e)
            return

        if generation != self._state.session_generation:
            logger.debug("Session changed while researching %s, dropping report", thought.id)
            return
        stored = self._repository.get(thought.id)
        if stored is None:
            logger.debug("Thought %s was deleted before research finished", thought.id)
            return
        stored.research_report = report
        self._repository.update(stored)
        logger.info("Attached research report to %s (%s)", thought.id, report.topic)

    def mark_opened(self, thought_id: str) -> bool:
        """Flag a thought as read. Returns False if it no longer exists."""
        thought = self._repository.get(thought_id)
        if thought is None:
            return False
        if not thought.opened:
            thought.opened = True
            self._repository.update(thought)
        return True

    def _spawn(self, coro, name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Thought processing failed: %s", task.exception())

    async def drain(self) -> None:
        """Wait until every submission and research job has finished."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))
