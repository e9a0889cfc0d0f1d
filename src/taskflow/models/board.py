"""Board state, filter and notification models."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict

from .enums import When
from .label import DEFAULT_LABELS, Label
from .task import Task


class BoardState(BaseModel):
    """Everything on the board.

    Column order is not stored separately: a task's position in its column
    is its position relative to the other tasks of the same status in
    `tasks`.
    """

    model_config = ConfigDict(frozen=True)

    tasks: tuple[Task, ...] = ()
    labels: tuple[Label, ...] = DEFAULT_LABELS

    def to_json(self) -> str:
        """Serialize to the local snapshot payload."""
        return self.model_dump_json(by_alias=True)

    def get_task(self, task_id: str) -> Task | None:
        """Find a task by id."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_label(self, label_id: str) -> Label | None:
        """Find a label by id."""
        for label in self.labels:
            if label.id == label_id:
                return label
        return None


@dataclass(frozen=True)
class Filters:
    """Per-session view criteria. Never persisted."""

    query: str = ""  # substring of title + description
    when: When = When.ALL
    label_ids: tuple[str, ...] = ()  # matched by label name group


@dataclass(frozen=True)
class Notification:
    """A short-lived message for the user."""

    level: Literal["error", "info"]
    message: str

    @classmethod
    def error(cls, message: str) -> "Notification":
        return cls(level="error", message=message)

    @classmethod
    def info(cls, message: str) -> "Notification":
        return cls(level="info", message=message)
