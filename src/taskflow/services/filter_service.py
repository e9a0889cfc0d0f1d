"""Service for applying board filters to tasks."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from ..models import Filters, Label, Status, Task, When
from ..utils import now_utc, utc_date
from .ordering import column

if TYPE_CHECKING:
    from .task_store import TaskStore

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 7
DEFAULT_REFRESH_INTERVAL = 60.0


class FilterService:
    """Service for applying filters to tasks."""

    def apply(
        self,
        tasks: Sequence[Task],
        labels: Sequence[Label],
        filters: Filters,
        now: datetime,
    ) -> list[Task]:
        """Return the tasks matching every active criterion, in board order."""
        today = utc_date(now)
        required = self._required_groups(labels, filters.label_ids)
        group_of = {label.id: label.group_key for label in labels}
        query = filters.query.strip().lower()

        result: list[Task] = []
        for task in tasks:
            if self._matches(task, filters.when, today, required, group_of, query):
                result.append(task)
        return result

    def _required_groups(self, labels: Sequence[Label], label_ids: Sequence[str]) -> set[str]:
        """
        Resolve filter label ids to name groups.

        Labels sharing a name are interchangeable here. Ids that no longer
        resolve to a label (e.g. deleted since the filter was set) are ignored.
        """
        by_id = {label.id: label for label in labels}
        groups: set[str] = set()
        for label_id in label_ids:
            label = by_id.get(label_id)
            if label is None:
                logger.debug("Ignoring filter on unknown label: %s", label_id)
                continue
            groups.add(label.group_key)
        return groups

    def _matches(
        self,
        task: Task,
        when: When,
        today: date,
        required: set[str],
        group_of: dict[str, str],
        query: str,
    ) -> bool:
        """Check if a task matches the filter."""
        if when == When.TODAY and task.due_date != today:
            return False

        if when == When.UPCOMING:
            if task.due_date is None:
                return False
            if not today < task.due_date <= today + timedelta(days=UPCOMING_DAYS):
                return False

        # Every required name group must be covered by at least one label
        if required:
            carried = {group_of[lid] for lid in task.labels if lid in group_of}
            if not required <= carried:
                return False

        if query:
            haystack = f"{task.title} {task.description or ''}".lower()
            if query not in haystack:
                return False

        return True


class FilteredTaskView:
    """
    Visible tasks for the store's current state and filters.

    Recomputed after every store change and on a periodic tick so that
    `today`/`upcoming` stay correct as the clock moves. The tick runs on a
    daemon timer thread; listeners registered here may be called from it.
    """

    def __init__(
        self,
        store: TaskStore,
        clock: Callable[[], datetime] = now_utc,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        filter_service: FilterService | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self.interval = interval
        self._filter_service = filter_service or FilterService()
        self._listeners: list[Callable[[], None]] = []
        self._timer: threading.Timer | None = None
        self._running = False
        self._tasks = self._compute()
        self._unsubscribe = store.subscribe(self.refresh)

    @property
    def tasks(self) -> list[Task]:
        """Visible tasks in board order."""
        return list(self._tasks)

    def column(self, status: Status) -> list[Task]:
        """Visible tasks of one column."""
        return column(self._tasks, status)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run after every recompute. Returns a disposer."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def refresh(self) -> None:
        """Recompute the visible tasks and notify listeners."""
        self._tasks = self._compute()
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Filtered view listener failed")

    def start(self) -> None:
        """Begin the periodic recompute."""
        if self._running:
            return
        self._running = True
        self._schedule()
        logger.debug("Filter tick started (every %.0fs)", self.interval)

    def stop(self) -> None:
        """Stop ticking and detach from the store."""
        self._running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._unsubscribe()

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self) -> None:
        if not self._running:
            return
        self.refresh()
        if self._running:
            self._schedule()

    def _compute(self) -> list[Task]:
        state = self._store.state
        return self._filter_service.apply(
            state.tasks, state.labels, self._store.filters, self._clock()
        )
