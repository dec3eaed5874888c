"""Single-slot task supervisor.

Runs at most one piece of asynchronous work at a time. Work offered
while the slot is busy is dropped, not queued.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class SingleFlightRunner:
    """Accepts new work only when idle.

    The busy flag is taken synchronously in ``try_run`` so two offers in
    the same loop iteration cannot both start, and it is released from
    the task's done callback so it clears on success, failure and
    cancellation alike.
    """

    def __init__(self, name: str = "worker") -> None:
        self._name = name
        self._busy = False
        self._task: asyncio.Task | None = None
        self._dropped = 0

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def dropped(self) -> int:
        """How many offers were rejected because the slot was busy."""
        return self._dropped

    def try_run(self, factory: Callable[[], Awaitable[None]]) -> asyncio.Task | None:
        """Start ``factory()`` as a task if idle; otherwise drop it.

        Returns:
            The started task, or None if the offer was dropped.
        """
        if self._busy:
            self._dropped += 1
            logger.debug("%s busy, dropping work (%d dropped)", self._name, self._dropped)
            return None

        self._busy = True
        try:
            task = asyncio.get_running_loop().create_task(factory())
        except BaseException:
            self._busy = False
            raise
        self._task = task
        task.add_done_callback(self._release)
        return task

    def _release(self, task: asyncio.Task) -> None:
        if task is self._task:
            self._task = None
        self._busy = False
        if task.cancelled():
            logger.debug("%s work cancelled", self._name)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s work failed: %s", self._name, exc)

    async def wait_idle(self) -> None:
        """Wait for the in-flight work, if any, to finish."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})
