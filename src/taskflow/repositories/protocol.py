"""Protocols for the remote store the task board syncs with."""

from __future__ import annotations

from typing import Any, Protocol

Row = dict[str, Any]


class RecordTable(Protocol):
    """Owner-scoped CRUD over one record kind (`tasks` or `labels`).

    Every method raises RemoteStoreError on failure. Nothing is retried.
    """

    def list(self, owner_id: str) -> list[Row]:
        """Return all rows belonging to the owner."""
        ...

    def insert(self, rows: list[Row], owner_id: str) -> None:
        """Insert rows, stamping them with the owner."""
        ...

    def upsert(self, rows: list[Row], owner_id: str) -> None:
        """Insert rows, or overwrite rows that already exist by id."""
        ...

    def update(self, record_id: str, owner_id: str, patch: Row) -> None:
        """Update the given columns of one record."""
        ...

    def delete(self, record_id: str, owner_id: str) -> None:
        """Delete one record. Dependent association rows cascade."""
        ...


class AssociationTable(Protocol):
    """Owner-scoped access to task-label association rows."""

    def list(self, owner_id: str) -> list[Row]:
        """Return all `{task_id, label_id}` rows belonging to the owner."""
        ...

    def insert(self, rows: list[Row], owner_id: str) -> None:
        """Insert association rows, stamping them with the owner."""
        ...

    def delete_by_task(self, task_id: str, owner_id: str) -> None:
        """Delete every association row of one task."""
        ...


class RemoteStore(Protocol):
    """The three tables a board is stored in."""

    tasks: RecordTable
    labels: RecordTable
    task_labels: AssociationTable


class IdentityProvider(Protocol):
    """Source of the signed-in user's id."""

    def get_user_id(self) -> str | None:
        """Return the owner id, or None when nobody is signed in."""
        ...
