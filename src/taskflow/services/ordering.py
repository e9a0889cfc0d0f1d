"""Column ordering within the single task sequence.

A board keeps one sequence of tasks. A column's order is the order of
that column's tasks inside the sequence, so placing a task at index k of
a column means finding the right absolute position in the sequence.
"""

from collections.abc import Sequence

from ..models import Status, Task


def column(tasks: Sequence[Task], status: Status) -> list[Task]:
    """The tasks of one column, in board order."""
    return [task for task in tasks if task.status == status]


def column_index(tasks: Sequence[Task], task_id: str) -> int | None:
    """Position of a task within its own column, or None if absent."""
    seen: dict[Status, int] = {}
    for task in tasks:
        position = seen.get(task.status, 0)
        if task.id == task_id:
            return position
        seen[task.status] = position + 1
    return None


def insertion_index(tasks: Sequence[Task], status: Status, index: int | None) -> int:
    """
    Absolute position that puts a task at `index` within the `status` column.

    Without an index the task goes to the very front of the sequence, which
    also makes it first in its column. An index past the end of the column
    appends to the whole sequence. Negative indexes count as 0.
    """
    if index is None:
        return 0
    index = max(index, 0)

    seen = 0
    for position, task in enumerate(tasks):
        if task.status == status:
            if seen == index:
                return position
            seen += 1
    return len(tasks)


def insert_task(tasks: Sequence[Task], task: Task, index: int | None = None) -> tuple[Task, ...]:
    """New sequence with `task` placed at `index` of its status column."""
    position = insertion_index(tasks, task.status, index)
    return (*tasks[:position], task, *tasks[position:])


def remove_task(tasks: Sequence[Task], task_id: str) -> tuple[tuple[Task, ...], Task | None]:
    """New sequence without the task, plus the removed task (if found)."""
    removed: Task | None = None
    kept: list[Task] = []
    for task in tasks:
        if removed is None and task.id == task_id:
            removed = task
        else:
            kept.append(task)
    return tuple(kept), removed
