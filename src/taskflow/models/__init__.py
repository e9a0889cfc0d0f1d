"""Data models."""

from .board import BoardState, Filters, Notification
from .enums import STATUS_ORDER, STATUS_TITLES, LabelColor, Status, When
from .label import DEFAULT_LABELS, Label
from .task import EDITABLE_FIELDS, Task

__all__ = [
    "DEFAULT_LABELS",
    "EDITABLE_FIELDS",
    "STATUS_ORDER",
    "STATUS_TITLES",
    "BoardState",
    "Filters",
    "Label",
    "LabelColor",
    "Notification",
    "Status",
    "Task",
    "When",
]
