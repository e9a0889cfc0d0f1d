"""Enums for task status, label colors and date filters."""

from enum import Enum


class Status(str, Enum):
    """Board columns a task can live in."""

    BACKLOG = "backlog"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class LabelColor(str, Enum):
    """The fixed label palette."""

    RED = "red"
    ORANGE = "orange"
    AMBER = "amber"
    YELLOW = "yellow"
    LIME = "lime"
    GREEN = "green"
    TEAL = "teal"
    CYAN = "cyan"
    SKY = "sky"
    BLUE = "blue"
    INDIGO = "indigo"
    VIOLET = "violet"
    PURPLE = "purple"
    FUCHSIA = "fuchsia"
    PINK = "pink"
    ROSE = "rose"


class When(str, Enum):
    """Due date windows for filtering."""

    ALL = "all"
    TODAY = "today"
    UPCOMING = "upcoming"


STATUS_ORDER: tuple[Status, ...] = (Status.BACKLOG, Status.IN_PROGRESS, Status.DONE)

STATUS_TITLES: dict[Status, str] = {
    Status.BACKLOG: "Backlog",
    Status.IN_PROGRESS: "In Progress",
    Status.DONE: "Done",
}
