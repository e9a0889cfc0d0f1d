"""Service layer for business logic."""

from .filter_service import FilteredTaskView, FilterService
from .session import Session, resolve_session
from .task_store import LOAD_FAILED, SAVE_FAILED, TaskStore

__all__ = [
    "LOAD_FAILED",
    "SAVE_FAILED",
    "FilterService",
    "FilteredTaskView",
    "Session",
    "TaskStore",
    "resolve_session",
]
