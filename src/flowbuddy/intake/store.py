"""Persistence collaborator for captured thoughts.

The storage engine is not part of the core; the pipeline and session
state only rely on the ThoughtRepository interface. Two implementations
are provided: a process-local store and a JSON file store.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

from pydantic import TypeAdapter

from flowbuddy.domain.models import CapturedThought

logger = logging.getLogger(__name__)

ThoughtFilter = Callable[[CapturedThought], bool]

_THOUGHT_LIST = TypeAdapter(list[CapturedThought])


class ThoughtRepository(ABC):
    """Abstract record store for CapturedThought objects."""

    @abstractmethod
    def insert(self, thought: CapturedThought) -> None:
        ...

    @abstractmethod
    def update(self, thought: CapturedThought) -> None:
        """Persist in-place changes to an already inserted thought."""
        ...

    @abstractmethod
    def get(self, thought_id: str) -> CapturedThought | None:
        ...

    @abstractmethod
    def delete_all(self, predicate: ThoughtFilter | None = None) -> int:
        """Delete every thought matching ``predicate`` (all when None).

        Returns the number of deleted records.
        """
        ...

    @abstractmethod
    def query(self, newest_first: bool = True) -> list[CapturedThought]:
        """All stored thoughts sorted by creation time."""
        ...

    def __contains__(self, thought_id: str) -> bool:
        return self.get(thought_id) is not None

    def __len__(self) -> int:
        return len(self.query())


class InMemoryThoughtStore(ThoughtRepository):
    """Keeps thoughts in a dict for the lifetime of the process."""

    def __init__(self) -> None:
        self._records: dict[str, CapturedThought] = {}

    def insert(self, thought: CapturedThought) -> None:
        if thought.id in self._records:
            raise ValueError(f"Thought {thought.id} already stored")
        self._records[thought.id] = thought
        self._changed()

    def update(self, thought: CapturedThought) -> None:
        if thought.id not in self._records:
            raise KeyError(thought.id)
        self._records[thought.id] = thought
        self._changed()

    def get(self, thought_id: str) -> CapturedThought | None:
        return self._records.get(thought_id)

    def delete_all(self, predicate: ThoughtFilter | None = None) -> int:
        doomed = [
            tid for tid, thought in self._records.items()
            if predicate is None or predicate(thought)
        ]
        for tid in doomed:
            del self._records[tid]
        if doomed:
            self._changed()
        return len(doomed)

    def query(self, newest_first: bool = True) -> list[CapturedThought]:
        return sorted(
            self._records.values(),
            key=lambda thought: thought.created_at,
            reverse=newest_first,
        )

    def _changed(self) -> None:
        """Hook called after every mutation."""


class JsonFileThoughtStore(InMemoryThoughtStore):
    """In-memory store mirrored to a JSON file after every mutation."""

    def __init__(self, path: Path | str) -> None:
        super().__init__()
        self._path = Path(path).expanduser()
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        thoughts = _THOUGHT_LIST.validate_json(self._path.read_bytes())
        self._records = {thought.id: thought for thought in thoughts}
        logger.info("Loaded %d captured thoughts from %s", len(self._records), self._path)

    def _changed(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_bytes(_THOUGHT_LIST.dump_json(self.query(newest_first=False), by_alias=True, indent=2))
        tmp.replace(self._path)
