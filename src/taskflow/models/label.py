"""Label domain model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import LabelColor


class Label(BaseModel):
    """A colored tag that tasks reference by id.

    Names are not unique. Labels sharing a name (ignoring case) are treated
    as one group when filtering.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    color: LabelColor

    @property
    def group_key(self) -> str:
        """Case-insensitive name used to group same-named labels."""
        return self.name.strip().casefold()

    def to_row(self) -> dict[str, Any]:
        """Convert to a remote `labels` row (owner is stamped by the adapter)."""
        return {"id": self.id, "name": self.name, "color": self.color.value}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Label":
        """Create Label from a remote `labels` row."""
        return cls(id=row["id"], name=row["name"], color=row["color"])


DEFAULT_LABELS: tuple[Label, ...] = (
    Label(id="lbl-red", name="Urgent", color=LabelColor.RED),
    Label(id="lbl-blue", name="Info", color=LabelColor.BLUE),
    Label(id="lbl-green", name="Feature", color=LabelColor.GREEN),
    Label(id="lbl-amber", name="Chore", color=LabelColor.AMBER),
)
