"""Task domain model."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import Status

# Fields a caller may change through an update patch
EDITABLE_FIELDS = frozenset({"title", "description", "status", "due_date", "labels"})

# Remote columns that hold scalar task data (labels live in task_labels)
SCALAR_COLUMNS = ("title", "description", "status", "due_date", "updated_at")


class Task(BaseModel):
    """A single card on the board.

    Serialized with camelCase aliases for the local snapshot and with
    snake_case columns for remote rows.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    description: str | None = None
    status: Status = Status.BACKLOG
    due_date: date | None = Field(default=None, alias="dueDate")
    labels: tuple[str, ...] = ()  # label ids, display order
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject blank titles."""
        if not v.strip():
            raise ValueError("Task title cannot be empty")
        return v

    def without_label(self, label_id: str) -> "Task":
        """Copy of this task with one label id stripped."""
        if label_id not in self.labels:
            return self
        return self.model_copy(
            update={"labels": tuple(lid for lid in self.labels if lid != label_id)}
        )

    def to_row(self) -> dict[str, Any]:
        """Convert to a remote `tasks` row."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def link_rows(self) -> list[dict[str, str]]:
        """Association rows for this task's labels."""
        return [{"task_id": self.id, "label_id": label_id} for label_id in self.labels]

    @classmethod
    def from_row(cls, row: dict[str, Any], labels: tuple[str, ...] | list[str] = ()) -> "Task":
        """Create Task from a remote `tasks` row plus its joined label ids."""
        return cls(
            id=row["id"],
            title=row["title"],
            description=row.get("description"),
            status=row["status"],
            due_date=row.get("due_date"),
            labels=tuple(labels),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
