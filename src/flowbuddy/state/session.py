"""Process-wide observable session state.

A single SessionState is constructed by the composition root and handed
to the monitor, the intake pipeline and the focus controller. Every
field write is applied in order and notifies subscribers synchronously
on the thread that performed it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable

from flowbuddy.domain.models import ALLOWED_INTERVALS

if TYPE_CHECKING:
    from flowbuddy.intake.store import ThoughtRepository

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any, Any], None]

FIELDS = (
    "capture_surface_open",
    "monitoring_enabled",
    "monitoring_interval_seconds",
    "background_research_enabled",
    "current_distraction",
    "session_start",
    "session_end",
)


class SessionState:
    """Observable store for flags, the current distraction and session bounds.

    Each field has a single writer: the monitoring scheduler owns
    ``current_distraction``, the focus controller owns
    ``capture_surface_open``, and UI actions own the toggles and the
    session lifecycle.

    Example usage::

        state = SessionState(repository=store)
        unsubscribe = state.subscribe("current_distraction", on_change)
        state.monitoring_enabled = True
    """

    def __init__(
        self,
        repository: ThoughtRepository | None = None,
        monitoring_enabled: bool = False,
        monitoring_interval_seconds: int = 10,
        background_research_enabled: bool = False,
    ) -> None:
        _check_interval(monitoring_interval_seconds)
        self._repository = repository
        self._values: dict[str, Any] = {
            "capture_surface_open": False,
            "monitoring_enabled": monitoring_enabled,
            "monitoring_interval_seconds": monitoring_interval_seconds,
            "background_research_enabled": background_research_enabled,
            "current_distraction": None,
            "session_start": None,
            "session_end": None,
        }
        self._subscribers: dict[str, list[Subscriber]] = {name: [] for name in FIELDS}
        self._session_generation = 0

    # -- subscriptions -----------------------------------------------------

    def subscribe(self, field: str, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback(new, old)`` for changes to ``field``.

        Returns a function that removes the subscription again.
        """
        if field not in self._subscribers:
            raise ValueError(f"Unknown session state field: {field!r}")
        self._subscribers[field].append(callback)

        def unsubscribe() -> None:
            try:
                self._subscribers[field].remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def _set(self, field: str, value: Any) -> None:
        old = self._values[field]
        if old == value:
            return
        self._values[field] = value
        logger.debug("State %s: %r -> %r", field, old, value)
        for callback in list(self._subscribers[field]):
            callback(value, old)

    # -- fields ------------------------------------------------------------

    @property
    def capture_surface_open(self) -> bool:
        return self._values["capture_surface_open"]

    @capture_surface_open.setter
    def capture_surface_open(self, value: bool) -> None:
        self._set("capture_surface_open", bool(value))

    @property
    def monitoring_enabled(self) -> bool:
        return self._values["monitoring_enabled"]

    @monitoring_enabled.setter
    def monitoring_enabled(self, value: bool) -> None:
        value = bool(value)
        if not value:
            # A distraction is only meaningful while monitoring runs.
            self._set("current_distraction", None)
        self._set("monitoring_enabled", value)

    @property
    def monitoring_interval_seconds(self) -> int:
        return self._values["monitoring_interval_seconds"]

    @monitoring_interval_seconds.setter
    def monitoring_interval_seconds(self, value: int) -> None:
        _check_interval(value)
        self._set("monitoring_interval_seconds", value)

    @property
    def background_research_enabled(self) -> bool:
        return self._values["background_research_enabled"]

    @background_research_enabled.setter
    def background_research_enabled(self, value: bool) -> None:
        self._set("background_research_enabled", bool(value))

    @property
    def current_distraction(self) -> str | None:
        return self._values["current_distraction"]

    @current_distraction.setter
    def current_distraction(self, value: str | None) -> None:
        if value is not None and not self.monitoring_enabled:
            logger.debug("Ignoring distraction while monitoring is disabled")
            value = None
        self._set("current_distraction", value)

    @property
    def session_start(self) -> datetime | None:
        return self._values["session_start"]

    @property
    def session_end(self) -> datetime | None:
        return self._values["session_end"]

    # -- session lifecycle -------------------------------------------------

    @property
    def session_generation(self) -> int:
        """Incremented whenever a session starts or is finished."""
        return self._session_generation

    @property
    def is_session_active(self) -> bool:
        return self.session_start is not None and self.session_end is None

    def start_session(self) -> None:
        self._session_generation += 1
        self._set("session_end", None)
        self._set("session_start", datetime.now())
        logger.info("Session started at %s", self.session_start.strftime("%H:%M:%S"))

    def stop_session(self) -> None:
        self._set("session_end", datetime.now())
        logger.info("Session stopped after %.0fs", self.session_elapsed())

    def finish_session(self) -> int:
        """Clear the session bounds and delete its captured thoughts.

        Returns the number of deleted records.
        """
        start = self.session_start
        self._session_generation += 1
        self._set("session_start", None)
        self._set("session_end", None)

        if self._repository is None:
            return 0
        if start is None:
            deleted = self._repository.delete_all()
        else:
            deleted = self._repository.delete_all(lambda thought: thought.created_at >= start)
        logger.info("Session finished, deleted %d captured thoughts", deleted)
        return deleted

    def session_elapsed(self, now: datetime | None = None) -> float:
        """Seconds between session start and its end (or ``now``)."""
        if self.session_start is None:
            return 0.0
        end = self.session_end or now or datetime.now()
        return max(0.0, (end - self.session_start).total_seconds())

    def resolve_distraction(self) -> None:
        """Dismiss the current distraction banner."""
        self._set("current_distraction", None)


def _check_interval(value: int) -> None:
    if value not in ALLOWED_INTERVALS:
        raise ValueError(
            f"Monitoring interval must be one of {ALLOWED_INTERVALS}, got {value!r}"
        )
