"""Board commands run from the command line."""

from __future__ import annotations

import argparse
import logging

from ..app import TaskflowApp
from ..models import STATUS_ORDER, STATUS_TITLES, Label, Task
from ..services import TaskStore
from .output import dim, error, header, info, label_chip, notification, success

logger = logging.getLogger(__name__)


def run_command(app: TaskflowApp, args: argparse.Namespace) -> int:
    """Run one command against a started app. Returns the exit code."""
    if args.command == "guest":
        return run_guest(app, args)

    app.start()
    try:
        if args.command == "board":
            return run_board(app, args)
        return COMMANDS[args.command](app.store, args)
    except ValueError as e:
        # Bad input from the command line (blank title, malformed date, ...)
        error(str(e))
        return 2
    finally:
        app.close()
        for note in app.notifications:
            notification(note)


def run_guest(app: TaskflowApp, args: argparse.Namespace) -> int:
    """Switch this device in or out of guest mode."""
    enabled = args.mode == "on"
    app.cache.set_guest(enabled)
    success(f"Guest mode {'enabled' if enabled else 'disabled'}")
    return 0


def run_board(app: TaskflowApp, args: argparse.Namespace) -> int:
    """Print every column, filtered."""
    store, view = app.store, app.view
    label_ids = _label_ids_for(store, args.label or [])
    if label_ids is None:
        return 2
    store.set_filters(query=args.query or "", when=args.when, label_ids=label_ids)

    labels = {label.id: label for label in store.state.labels}
    mode = "guest" if store.is_guest else f"synced as {store.owner_id}"
    info(f"Board ({mode})")
    for status in STATUS_ORDER:
        tasks = view.column(status)
        header(f"\n{STATUS_TITLES[status]} ({len(tasks)})")
        for task in tasks:
            print(_format_task(task, labels))
    return 0


def run_add(store: TaskStore, args: argparse.Namespace) -> int:
    label_ids = _label_ids_for(store, args.label or [], first_only=True)
    if label_ids is None:
        return 2
    task = store.add_task(
        args.title,
        status=args.status,
        description=args.description,
        due_date=args.due,
        labels=label_ids,
    )
    success(f"Added {task.id[:8]} {task.title}")
    return 0


def run_update(store: TaskStore, args: argparse.Namespace) -> int:
    task = _resolve_task(store, args.task)
    if task is None:
        return 1
    changes: dict = {}
    if args.title is not None:
        changes["title"] = args.title
    if args.description is not None:
        changes["description"] = args.description or None
    if args.due is not None:
        changes["due_date"] = args.due or None
    if args.label is not None:
        label_ids = _label_ids_for(store, args.label, first_only=True)
        if label_ids is None:
            return 2
        changes["labels"] = label_ids
    if not changes:
        info("Nothing to update")
        return 0
    store.update_task(task.id, **changes)
    success(f"Updated {task.id[:8]}")
    return 0


def run_move(store: TaskStore, args: argparse.Namespace) -> int:
    task = _resolve_task(store, args.task)
    if task is None:
        return 1
    moved = store.move_task(task.id, args.status, args.index)
    if moved is None:
        error(f"No task matches {args.task}")
        return 1
    success(f"Moved {task.id[:8]} to {STATUS_TITLES[moved.status]}")
    return 0


def run_delete(store: TaskStore, args: argparse.Namespace) -> int:
    task = _resolve_task(store, args.task)
    if task is None:
        return 1
    store.delete_task(task.id)
    success(f"Deleted {task.id[:8]} {task.title}")
    return 0


def run_labels(store: TaskStore, args: argparse.Namespace) -> int:
    for label in store.state.labels:
        print(f"  {label_chip(label)} {dim(label.id)}")
    return 0


def run_label_add(store: TaskStore, args: argparse.Namespace) -> int:
    label = store.add_label(args.name, args.color)
    success(f"Added label {label_chip(label)}")
    return 0


def run_label_delete(store: TaskStore, args: argparse.Namespace) -> int:
    removed = store.delete_label(args.label)
    if removed is None:
        error(f"No label with id {args.label}")
        return 1
    success(f"Deleted label {removed.name}")
    return 0


COMMANDS = {
    "add": run_add,
    "update": run_update,
    "move": run_move,
    "delete": run_delete,
    "labels": run_labels,
    "label-add": run_label_add,
    "label-delete": run_label_delete,
}


def _format_task(task: Task, labels: dict[str, Label]) -> str:
    parts = [f"  {dim(task.id[:8])} {task.title}"]
    if task.due_date:
        parts.append(dim(f"due {task.due_date.isoformat()}"))
    chips = [label_chip(labels[lid]) for lid in task.labels if lid in labels]
    if chips:
        parts.append(" ".join(chips))
    return "  ".join(parts)


def _resolve_task(store: TaskStore, ref: str) -> Task | None:
    """Find a task by full id or unique id prefix."""
    exact = store.get_task(ref)
    if exact is not None:
        return exact
    matches = [task for task in store.state.tasks if task.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        error(f"No task matches {ref}")
    else:
        error(f"{ref} matches {len(matches)} tasks, use a longer prefix")
    return None


def _label_ids_for(
    store: TaskStore, names: list[str], first_only: bool = False
) -> list[str] | None:
    """Map label names (case-insensitive) to ids. None if a name is unknown."""
    label_ids: list[str] = []
    for name in names:
        key = name.strip().casefold()
        matches = [label.id for label in store.state.labels if label.group_key == key]
        if not matches:
            error(f"Unknown label: {name}")
            return None
        label_ids.extend(matches[:1] if first_only else matches)
    return label_ids
