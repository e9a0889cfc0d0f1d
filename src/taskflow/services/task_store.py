"""The task store: board state, optimistic mutations and remote sync."""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from datetime import date, datetime
from typing import Any

from ..errors import RemoteStoreError
from ..models import (
    DEFAULT_LABELS,
    EDITABLE_FIELDS,
    BoardState,
    Filters,
    Label,
    LabelColor,
    Notification,
    Status,
    Task,
    When,
)
from ..models.task import SCALAR_COLUMNS
from ..repositories import RemoteStore
from ..storage import BoardCache
from ..utils import new_id, now_utc
from . import ordering
from .session import Session

logger = logging.getLogger(__name__)

SAVE_FAILED = "Couldn't save changes. Please retry."
LOAD_FAILED = "Couldn't load your board. Please retry."

LABEL_FIELDS = frozenset({"name", "color"})
FILTER_FIELDS = frozenset(field.name for field in dataclasses.fields(Filters))

Listener = Callable[[], None]
NotificationListener = Callable[[Notification], None]
RemoteJob = Callable[[RemoteStore, str], None]


class TaskStore:
    """
    Single source of truth for the board and its filters.

    Every mutation replaces the in-memory state synchronously, writes the
    snapshot to the local cache, notifies subscribers and then, for
    authenticated sessions, submits the matching remote writes to a
    background executor without waiting for them.

    Remote writes are not queued or ordered: two quick mutations of the
    same record race, and whichever write lands last wins. A failed write
    publishes a notification and leaves local state as it is, so local and
    remote can diverge until the next full load.
    """

    def __init__(
        self,
        cache: BoardCache,
        remote: RemoteStore | None = None,
        session: Session | None = None,
        executor: Executor | None = None,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = new_id,
        max_workers: int = 4,
    ) -> None:
        self._cache = cache
        self._remote = remote
        self._session = session or Session(guest=True)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="taskflow-remote"
        )
        self._clock = clock
        self._new_id = id_factory

        self._state = BoardState()
        self._filters = Filters()
        self._listeners: list[Listener] = []
        self._notification_listeners: list[NotificationListener] = []
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()
        self._closed = False

    # --- Reads ---

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def filters(self) -> Filters:
        return self._filters

    @property
    def is_guest(self) -> bool:
        return self._remote_target() is None

    @property
    def owner_id(self) -> str | None:
        target = self._remote_target()
        return None if target is None else target[1]

    def get_task(self, task_id: str) -> Task | None:
        return self._state.get_task(task_id)

    def tasks_in(self, status: Status | str) -> list[Task]:
        """Tasks of one column, in board order."""
        return ordering.column(self._state.tasks, Status(status))

    def column_index(self, task_id: str) -> int | None:
        """Position of a task within its column. Capture before deleting to undo."""
        return ordering.column_index(self._state.tasks, task_id)

    # --- Subscriptions ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback run after every state change. Returns a disposer."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def on_notification(self, listener: NotificationListener) -> Callable[[], None]:
        """
        Register a callback for user-facing notifications. Returns a disposer.

        Save failures are reported from the executor thread that ran the
        failed write.
        """
        self._notification_listeners.append(listener)

        def dispose() -> None:
            if listener in self._notification_listeners:
                self._notification_listeners.remove(listener)

        return dispose

    # --- Initialization ---

    def initialize(self) -> BoardState:
        """
        Load the board for this session.

        Guests read the local cache. Authenticated sessions fetch labels,
        tasks and their label links in parallel, then make sure the default
        labels exist. Nothing raises: a failed load falls back to the local
        mirror (or an empty board with default labels) and publishes a
        notification.
        """
        target = self._remote_target()
        if target is None:
            state = self._cache.load() or BoardState()
            logger.info("Guest board loaded: %d tasks", len(state.tasks))
        else:
            state = self._load_remote(*target)

        self._commit(state)
        return state

    def _load_remote(self, remote: RemoteStore, owner_id: str) -> BoardState:
        labels_future = self._executor.submit(remote.labels.list, owner_id)
        tasks_future = self._executor.submit(remote.tasks.list, owner_id)
        links_future = self._executor.submit(remote.task_labels.list, owner_id)

        try:
            label_rows = labels_future.result()
            task_rows = tasks_future.result()
            link_rows = links_future.result()
            labels = tuple(Label.from_row(row) for row in label_rows)
            tasks = _join_tasks(task_rows, link_rows)
        except (RemoteStoreError, ValueError, KeyError) as e:
            logger.error("Board load failed for %s: %s", owner_id, e)
            self._publish(Notification.error(LOAD_FAILED))
            return self._cache.load() or BoardState()

        labels = self._seed_default_labels(remote, labels, owner_id)
        logger.info(
            "Board loaded for %s: %d tasks, %d labels", owner_id, len(tasks), len(labels)
        )
        return BoardState(tasks=tasks, labels=labels)

    def _seed_default_labels(
        self, remote: RemoteStore, labels: tuple[Label, ...], owner_id: str
    ) -> tuple[Label, ...]:
        """Create default labels whose names the owner doesn't have yet."""
        present = {label.group_key for label in labels}
        missing = tuple(
            Label(id=self._new_id(), name=default.name, color=default.color)
            for default in DEFAULT_LABELS
            if default.group_key not in present
        )
        if not missing:
            return labels

        logger.info("Seeding %d default labels for %s", len(missing), owner_id)
        try:
            remote.labels.insert([label.to_row() for label in missing], owner_id)
        except RemoteStoreError as e:
            logger.warning("Default label seeding failed: %s", e)
            self._publish(Notification.error(SAVE_FAILED))
        return (*labels, *missing)

    # --- Task mutations ---

    def add_task(
        self,
        title: str,
        status: Status | str = Status.BACKLOG,
        description: str | None = None,
        due_date: date | str | None = None,
        labels: Iterable[str] = (),
    ) -> Task:
        """Create a task at the front of the board."""
        now = self._clock()
        task = Task(
            id=self._new_id(),
            title=title,
            status=status,
            description=description,
            due_date=due_date,
            labels=tuple(labels),
            created_at=now,
            updated_at=now,
        )
        self._replace_tasks((task, *self._state.tasks))
        logger.info("Task added: %s (status=%s)", task.id, task.status.value)

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.tasks.insert([task.to_row()], owner_id)
            if task.labels:
                remote.task_labels.insert(task.link_rows(), owner_id)

        self._dispatch(f"insert task {task.id}", push)
        return task

    def update_task(self, task_id: str, **changes: Any) -> Task | None:
        """
        Merge changes into a task and bump its `updated_at`.

        Label changes replace the task's whole label set remotely.
        Returns the updated task, or None if no task has this id.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        current = self.get_task(task_id)
        if current is None:
            logger.debug("update_task: task not found: %s", task_id)
            return None

        updated = Task.model_validate(
            {**current.model_dump(), **changes, "updated_at": self._clock()}
        )
        self._replace_tasks(tuple(updated if t.id == task_id else t for t in self._state.tasks))
        logger.info("Task updated: %s (%s)", task_id, ", ".join(sorted(changes)) or "touch")

        row = updated.to_row()
        patch = {column: row[column] for column in SCALAR_COLUMNS if column in changes}
        patch["updated_at"] = row["updated_at"]
        replace_labels = "labels" in changes

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.tasks.update(task_id, owner_id, patch)
            if replace_labels:
                remote.task_labels.delete_by_task(task_id, owner_id)
                if updated.labels:
                    remote.task_labels.insert(updated.link_rows(), owner_id)

        self._dispatch(f"update task {task_id}", push)
        return updated

    def delete_task(self, task_id: str) -> Task | None:
        """Remove a task. Returns the removed snapshot for undo, or None."""
        tasks, removed = ordering.remove_task(self._state.tasks, task_id)
        if removed is None:
            logger.debug("delete_task: task not found: %s", task_id)
            return None

        self._replace_tasks(tasks)
        logger.info("Task deleted: %s", task_id)

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.tasks.delete(task_id, owner_id)

        self._dispatch(f"delete task {task_id}", push)
        return removed

    def restore_task(self, task: Task, index: int | None = None) -> Task:
        """
        Put a deleted task back, at `index` of its column or at the front.

        Any task with the same id is replaced.
        """
        restored = task.model_copy(update={"updated_at": self._clock()})
        tasks, _ = ordering.remove_task(self._state.tasks, task.id)
        self._replace_tasks(ordering.insert_task(tasks, restored, index))
        logger.info("Task restored: %s (index=%s)", task.id, index)

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.tasks.upsert([restored.to_row()], owner_id)
            remote.task_labels.delete_by_task(restored.id, owner_id)
            if restored.labels:
                remote.task_labels.insert(restored.link_rows(), owner_id)

        self._dispatch(f"restore task {task.id}", push)
        return restored

    def move_task(
        self, task_id: str, status: Status | str, index: int | None = None
    ) -> Task | None:
        """
        Move a task to `index` of the `status` column, or to its front.

        Only the status is synced; column order is local. Returns the moved
        task, or None if no task has this id.
        """
        status = Status(status)
        tasks, current = ordering.remove_task(self._state.tasks, task_id)
        if current is None:
            logger.debug("move_task: task not found: %s", task_id)
            return None

        moved = current.model_copy(update={"status": status, "updated_at": self._clock()})
        self._replace_tasks(ordering.insert_task(tasks, moved, index))
        logger.info(
            "Task moved: %s (%s -> %s, index=%s)",
            task_id,
            current.status.value,
            status.value,
            index,
        )

        patch = {"status": status.value, "updated_at": moved.updated_at.isoformat()}

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.tasks.update(task_id, owner_id, patch)

        self._dispatch(f"move task {task_id}", push)
        return moved

    # --- Label mutations ---

    def add_label(self, name: str, color: LabelColor | str) -> Label:
        """Create a label at the end of the label list."""
        label = Label(id=self._new_id(), name=name, color=color)
        self._commit(self._state.model_copy(update={"labels": (*self._state.labels, label)}))
        logger.info("Label added: %s (%s)", label.id, label.name)

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.labels.insert([label.to_row()], owner_id)

        self._dispatch(f"insert label {label.id}", push)
        return label

    def update_label(self, label_id: str, **changes: Any) -> Label | None:
        """Merge changes into a label. Returns it, or None if unknown."""
        unknown = set(changes) - LABEL_FIELDS
        if unknown:
            raise ValueError(f"Unknown label fields: {', '.join(sorted(unknown))}")

        current = self._state.get_label(label_id)
        if current is None:
            logger.debug("update_label: label not found: %s", label_id)
            return None

        updated = Label.model_validate({**current.model_dump(), **changes})
        labels = tuple(updated if label.id == label_id else label for label in self._state.labels)
        self._commit(self._state.model_copy(update={"labels": labels}))
        logger.info("Label updated: %s", label_id)

        row = updated.to_row()
        patch = {field: row[field] for field in changes}

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.labels.update(label_id, owner_id, patch)

        self._dispatch(f"update label {label_id}", push)
        return updated

    def delete_label(self, label_id: str) -> Label | None:
        """Remove a label and strip it from every task in one transition."""
        removed = self._state.get_label(label_id)
        if removed is None:
            logger.debug("delete_label: label not found: %s", label_id)
            return None

        labels = tuple(label for label in self._state.labels if label.id != label_id)
        tasks = tuple(task.without_label(label_id) for task in self._state.tasks)
        self._commit(self._state.model_copy(update={"labels": labels, "tasks": tasks}))
        logger.info("Label deleted: %s", label_id)

        def push(remote: RemoteStore, owner_id: str) -> None:
            remote.labels.delete(label_id, owner_id)

        self._dispatch(f"delete label {label_id}", push)
        return removed

    # --- Filters ---

    def set_filters(self, **changes: Any) -> Filters:
        """Merge changes into the filters. Local only; subscribers are notified."""
        unknown = set(changes) - FILTER_FIELDS
        if unknown:
            raise ValueError(f"Unknown filter fields: {', '.join(sorted(unknown))}")
        if "when" in changes:
            changes["when"] = When(changes["when"])
        if "label_ids" in changes:
            if isinstance(changes["label_ids"], str):
                raise ValueError("label_ids must be a collection of ids, not a string")
            changes["label_ids"] = tuple(changes["label_ids"])

        self._filters = dataclasses.replace(self._filters, **changes)
        logger.debug("Filters set: %s", self._filters)
        self._emit()
        return self._filters

    # --- Lifecycle ---

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for in-flight remote writes. Returns False on timeout."""
        with self._pending_lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Wait for in-flight writes and release the executor."""
        if self._closed:
            return
        self._closed = True
        self.flush()
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # --- Private Methods ---

    def _remote_target(self) -> tuple[RemoteStore, str] | None:
        """The remote store and owner to sync with, or None for guests."""
        if self._remote is None or self._session.is_guest or self._session.owner_id is None:
            return None
        return self._remote, self._session.owner_id

    def _replace_tasks(self, tasks: tuple[Task, ...]) -> None:
        self._commit(self._state.model_copy(update={"tasks": tasks}))

    def _commit(self, state: BoardState) -> None:
        """Swap in a new state, mirror it locally and notify subscribers."""
        self._state = state
        self._cache.save(state)
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Store listener failed")

    def _publish(self, notification: Notification) -> None:
        for listener in list(self._notification_listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener failed")

    def _dispatch(self, description: str, job: RemoteJob) -> None:
        """Run a remote write in the background. Guests never reach the remote."""
        target = self._remote_target()
        if target is None:
            return
        if self._closed:
            logger.warning("Store closed, dropping remote %s", description)
            self._publish(Notification.error(SAVE_FAILED))
            return

        remote, owner_id = target

        def run() -> None:
            try:
                job(remote, owner_id)
            except RemoteStoreError as e:
                logger.warning("Remote %s failed: %s", description, e)
                self._publish(Notification.error(SAVE_FAILED))
            except Exception:
                logger.exception("Remote %s failed unexpectedly", description)
                self._publish(Notification.error(SAVE_FAILED))
            else:
                logger.debug("Remote %s done", description)

        future = self._executor.submit(run)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)


def _join_tasks(
    task_rows: list[dict[str, Any]], link_rows: list[dict[str, Any]]
) -> tuple[Task, ...]:
    """Rebuild each task's labels from association rows."""
    labels_by_task: dict[str, list[str]] = defaultdict(list)
    for link in link_rows:
        labels_by_task[link["task_id"]].append(link["label_id"])
    return tuple(Task.from_row(row, labels_by_task.get(row["id"], ())) for row in task_rows)
