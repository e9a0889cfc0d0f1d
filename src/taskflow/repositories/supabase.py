"""Supabase-backed remote store."""

from __future__ import annotations

import logging
from typing import Any

from ..errors import RemoteStoreError
from ..supabase import SupabaseClient

logger = logging.getLogger(__name__)

Row = dict[str, Any]

OWNER_COLUMN = "user_id"
RETURN_MINIMAL = "return=minimal"


def _eq(value: str) -> str:
    return f"eq.{value}"


class SupabaseTable:
    """
    One owner-scoped table behind PostgREST.

    Every read and write filters on `user_id`, so a row belonging to
    another owner can never be touched even if its id is known.
    """

    def __init__(
        self,
        client: SupabaseClient,
        table: str,
        columns: str = "*",
        order: str | None = None,
    ) -> None:
        self.client = client
        self.table = table
        self.columns = columns
        self.order = order

    @property
    def path(self) -> str:
        return f"/rest/v1/{self.table}"

    def list(self, owner_id: str) -> list[Row]:
        params = {"select": self.columns, OWNER_COLUMN: _eq(owner_id)}
        if self.order:
            params["order"] = self.order
        data = self.client.request("GET", self.path, params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteStoreError(f"Unexpected response listing {self.table}")
        logger.debug("Listed %d %s rows for %s", len(data), self.table, owner_id)
        return data

    def insert(self, rows: list[Row], owner_id: str) -> None:
        if not rows:
            return
        self.client.request(
            "POST", self.path, json=self._stamp(rows, owner_id), prefer=RETURN_MINIMAL
        )

    def upsert(self, rows: list[Row], owner_id: str) -> None:
        if not rows:
            return
        self.client.request(
            "POST",
            self.path,
            json=self._stamp(rows, owner_id),
            prefer=f"resolution=merge-duplicates,{RETURN_MINIMAL}",
        )

    def update(self, record_id: str, owner_id: str, patch: Row) -> None:
        self.client.request(
            "PATCH",
            self.path,
            params={"id": _eq(record_id), OWNER_COLUMN: _eq(owner_id)},
            json=patch,
            prefer=RETURN_MINIMAL,
        )

    def delete(self, record_id: str, owner_id: str) -> None:
        self.client.request(
            "DELETE",
            self.path,
            params={"id": _eq(record_id), OWNER_COLUMN: _eq(owner_id)},
            prefer=RETURN_MINIMAL,
        )

    def delete_by_task(self, task_id: str, owner_id: str) -> None:
        self.client.request(
            "DELETE",
            self.path,
            params={"task_id": _eq(task_id), OWNER_COLUMN: _eq(owner_id)},
            prefer=RETURN_MINIMAL,
        )

    @staticmethod
    def _stamp(rows: list[Row], owner_id: str) -> list[Row]:
        return [{**row, OWNER_COLUMN: owner_id} for row in rows]


class SupabaseRemoteStore:
    """Remote store over the `tasks`, `labels` and `task_labels` tables."""

    def __init__(self, client: SupabaseClient) -> None:
        self.client = client
        self.tasks = SupabaseTable(
            client,
            "tasks",
            columns="id,title,description,status,due_date,created_at,updated_at",
            order="created_at.desc",
        )
        self.labels = SupabaseTable(client, "labels", columns="id,name,color", order="name.asc")
        self.task_labels = SupabaseTable(client, "task_labels", columns="task_id,label_id")

    def get_user_id(self) -> str | None:
        return self.client.get_user_id()
