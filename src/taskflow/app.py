"""taskflow application wiring."""

from __future__ import annotations

import logging
from typing import Any

from .config import Settings
from .models import Notification
from .repositories import SupabaseRemoteStore
from .services import FilteredTaskView, Session, TaskStore, resolve_session
from .storage import BoardCache, LocalStorage
from .supabase import SupabaseClient

logger = logging.getLogger(__name__)


class TaskflowApp:
    """
    One board session built from settings.

    Owns the Supabase client (when configured), the task store and the
    filtered view, and tears them down in order on close.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.cache = BoardCache(LocalStorage(settings.data_dir))
        self.client: SupabaseClient | None = None
        self.remote: SupabaseRemoteStore | None = None

        url, key = settings.supabase_url, settings.supabase_key
        if url and key:
            self.client = SupabaseClient(
                url,
                key,
                access_token=settings.access_token,
                timeout=settings.request_timeout,
            )
            self.remote = SupabaseRemoteStore(self.client)
        else:
            logger.debug("Supabase not configured, remote sync disabled")

        self.notifications: list[Notification] = []
        self.session: Session | None = None
        self._store: TaskStore | None = None
        self._view: FilteredTaskView | None = None

    @property
    def store(self) -> TaskStore:
        if self._store is None:
            raise RuntimeError("App not started")
        return self._store

    @property
    def view(self) -> FilteredTaskView:
        if self._view is None:
            raise RuntimeError("App not started")
        return self._view

    def start(self) -> TaskStore:
        """Resolve the session, load the board and attach the filtered view."""
        self.session = resolve_session(self.cache, self.remote, force_guest=self.settings.guest)
        store = TaskStore(
            self.cache,
            remote=self.remote,
            session=self.session,
            max_workers=self.settings.max_workers,
        )
        store.on_notification(self.notifications.append)
        store.initialize()
        self._store = store
        self._view = FilteredTaskView(store, interval=self.settings.refresh_interval)
        self._view.start()
        return store

    def close(self) -> None:
        """Stop the view, finish pending remote writes and close the client."""
        if self._view is not None:
            self._view.stop()
        if self._store is not None:
            self._store.close()
        if self.client is not None:
            self.client.close()

    def __enter__(self) -> TaskflowApp:
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
