"""Tests for TaskStore in guest mode."""

from datetime import date

import pytest
from pydantic import ValidationError

from taskflow.models import DEFAULT_LABELS, BoardState, Status, When
from taskflow.services import Session, TaskStore
from taskflow.storage import STORAGE_KEY, BoardCache


def ids(tasks) -> list[str]:
    return [t.id for t in tasks]


class TestGuestInitialize:
    """Tests for loading a guest board."""

    def test_empty_cache_gives_default_labels(self, guest_store: TaskStore):
        assert guest_store.is_guest is True
        assert guest_store.owner_id is None
        assert guest_store.state.tasks == ()
        assert guest_store.state.labels == DEFAULT_LABELS

    def test_loads_cached_board(self, cache: BoardCache, clock, ids):
        first = TaskStore(cache, clock=clock, id_factory=ids)
        first.initialize()
        first.add_task("Persisted")
        first.close()

        second = TaskStore(cache, clock=clock)
        second.initialize()
        assert [t.title for t in second.state.tasks] == ["Persisted"]
        second.close()

    def test_malformed_cache_gives_empty_board(self, cache: BoardCache, clock):
        cache.storage.set_item(STORAGE_KEY, "][")
        store = TaskStore(cache, clock=clock)
        state = store.initialize()
        assert state == BoardState()
        store.close()

    def test_undecodable_cache_gives_empty_board(self, cache: BoardCache, clock):
        cache.storage.ensure_directory()
        cache.storage.path_for(STORAGE_KEY).write_bytes(b"\xff\xfe{garbage")
        store = TaskStore(cache, session=Session(guest=True), clock=clock)
        assert store.initialize() == BoardState()
        store.close()

    def test_no_remote_means_guest(self, cache: BoardCache):
        """Even a session with an owner is guest without a remote store."""
        store = TaskStore(cache, session=Session(owner_id="user-1"))
        assert store.is_guest is True
        store.close()


class TestAddAndUpdate:
    """Tests for add_task and update_task."""

    def test_add_task_prepends(self, guest_store: TaskStore, clock):
        first = guest_store.add_task("First")
        second = guest_store.add_task("Second", status=Status.DONE)
        assert ids(guest_store.state.tasks) == [second.id, first.id]
        assert first.created_at == clock.now
        assert first.updated_at == clock.now
        assert first.status == Status.BACKLOG

    def test_add_task_accepts_plain_values(self, guest_store: TaskStore):
        task = guest_store.add_task(
            "Plan", status="in_progress", due_date="2024-06-20", labels=["lbl-red"]
        )
        assert task.status == Status.IN_PROGRESS
        assert task.due_date == date(2024, 6, 20)
        assert task.labels == ("lbl-red",)

    def test_add_task_blank_title_rejected(self, guest_store: TaskStore):
        with pytest.raises(ValidationError):
            guest_store.add_task("  ")
        assert guest_store.state.tasks == ()

    def test_add_task_written_through_to_cache(self, guest_store: TaskStore, cache: BoardCache):
        task = guest_store.add_task("Cached")
        assert cache.load().get_task(task.id) == task

    def test_update_task_merges_and_bumps_updated_at(self, guest_store: TaskStore, clock):
        task = guest_store.add_task("Draft", description="keep me")
        clock.advance(minutes=5)

        updated = guest_store.update_task(task.id, title="Final")

        assert updated.title == "Final"
        assert updated.description == "keep me"
        assert updated.created_at == task.created_at
        assert updated.updated_at == clock.now
        assert guest_store.get_task(task.id) == updated

    def test_update_task_keeps_position(self, guest_store: TaskStore):
        a = guest_store.add_task("A")
        b = guest_store.add_task("B")
        guest_store.update_task(a.id, status=Status.DONE)
        assert ids(guest_store.state.tasks) == [b.id, a.id]

    def test_update_unknown_task(self, guest_store: TaskStore):
        assert guest_store.update_task("missing", title="x") is None

    def test_update_unknown_field(self, guest_store: TaskStore):
        task = guest_store.add_task("A")
        with pytest.raises(ValueError, match="created_at"):
            guest_store.update_task(task.id, created_at=None)

    def test_previous_snapshot_not_mutated(self, guest_store: TaskStore):
        """Each change produces a new state; old snapshots stay as they were."""
        task = guest_store.add_task("A")
        before = guest_store.state
        guest_store.update_task(task.id, title="B")
        assert before.get_task(task.id).title == "A"
        assert guest_store.state is not before


class TestDeleteRestoreMove:
    """Tests for delete_task, restore_task and move_task."""

    def test_delete_returns_snapshot(self, guest_store: TaskStore):
        task = guest_store.add_task("Gone")
        assert guest_store.delete_task(task.id) == task
        assert guest_store.state.tasks == ()
        assert guest_store.delete_task(task.id) is None

    def test_delete_then_restore_round_trip(self, guest_store: TaskStore, clock):
        """Restoring at the original column index gives back the same sequence."""
        guest_store.add_task("d1", status=Status.DONE)
        for title in ["b1", "b2", "b3"]:
            guest_store.add_task(title, labels=["lbl-blue"])
        before = guest_store.state.tasks  # b3 b2 b1 d1
        victim = before[1]
        index = guest_store.column_index(victim.id)
        assert index == 1

        clock.advance(seconds=1)
        snapshot = guest_store.delete_task(victim.id)
        guest_store.restore_task(snapshot, index)

        after = guest_store.state.tasks
        assert ids(after) == ids(before)
        assert [t.model_dump(exclude={"updated_at"}) for t in after] == [
            t.model_dump(exclude={"updated_at"}) for t in before
        ]
        assert guest_store.get_task(victim.id).updated_at == clock.now

    def test_restore_keeps_column_order_across_statuses(self, guest_store: TaskStore):
        """With other columns interleaved, every column's order still comes back."""
        for title, status in [
            ("b1", Status.BACKLOG),
            ("p1", Status.IN_PROGRESS),
            ("b2", Status.BACKLOG),
            ("b3", Status.BACKLOG),
        ]:
            guest_store.add_task(title, status=status)
        before = {status: ids(guest_store.tasks_in(status)) for status in Status}
        victim = guest_store.tasks_in(Status.BACKLOG)[1]

        index = guest_store.column_index(victim.id)
        guest_store.restore_task(guest_store.delete_task(victim.id), index)

        assert {status: ids(guest_store.tasks_in(status)) for status in Status} == before

    def test_restore_without_index_goes_to_front(self, guest_store: TaskStore):
        a = guest_store.add_task("A")
        b = guest_store.add_task("B")
        snapshot = guest_store.delete_task(a.id)
        guest_store.restore_task(snapshot)
        assert ids(guest_store.state.tasks) == [a.id, b.id]

    def test_restore_replaces_same_id(self, guest_store: TaskStore):
        a = guest_store.add_task("A")
        guest_store.restore_task(a.model_copy(update={"title": "A again"}), 0)
        assert len(guest_store.state.tasks) == 1
        assert guest_store.get_task(a.id).title == "A again"

    def test_move_to_front_of_column(self, guest_store: TaskStore, clock):
        a = guest_store.add_task("A")
        done = guest_store.add_task("Done", status=Status.DONE)
        clock.advance(minutes=1)

        moved = guest_store.move_task(a.id, Status.DONE)

        assert moved.status == Status.DONE
        assert moved.updated_at == clock.now
        assert ids(guest_store.tasks_in(Status.DONE)) == [a.id, done.id]

    def test_move_to_index(self, guest_store: TaskStore):
        d2 = guest_store.add_task("d2", status=Status.DONE)
        d1 = guest_store.add_task("d1", status=Status.DONE)
        a = guest_store.add_task("A")

        guest_store.move_task(a.id, "done", 1)

        assert ids(guest_store.tasks_in("done")) == [d1.id, a.id, d2.id]
        assert guest_store.tasks_in(Status.BACKLOG) == []

    def test_move_unknown_task(self, guest_store: TaskStore):
        before = guest_store.state
        assert guest_store.move_task("missing", Status.DONE) is None
        assert guest_store.state is before

    def test_ascending_moves_keep_call_order(self, guest_store: TaskStore):
        """Moving tasks to indices 0..n-1 of a column keeps the call order."""
        tasks = [guest_store.add_task(name) for name in ["x", "y", "z", "w"]]
        guest_store.add_task("existing", status=Status.DONE)
        order = [tasks[2], tasks[0], tasks[3], tasks[1]]

        for index, task in enumerate(order):
            guest_store.move_task(task.id, Status.DONE, index)

        column = guest_store.tasks_in(Status.DONE)
        assert ids(column[: len(order)]) == ids(order)
        assert column[-1].title == "existing"

    def test_ascending_restores_keep_call_order(self, guest_store: TaskStore):
        tasks = [guest_store.add_task(name) for name in ["x", "y", "z"]]
        snapshots = [guest_store.delete_task(t.id) for t in tasks]
        for index, snapshot in enumerate(reversed(snapshots)):
            guest_store.restore_task(snapshot, index)
        assert ids(guest_store.tasks_in(Status.BACKLOG)) == ids(reversed(snapshots))


class TestLabels:
    """Tests for label operations."""

    def test_add_label_appends(self, guest_store: TaskStore):
        label = guest_store.add_label("Blocked", "rose")
        assert guest_store.state.labels[-1] == label
        assert len(guest_store.state.labels) == len(DEFAULT_LABELS) + 1

    def test_update_label(self, guest_store: TaskStore):
        updated = guest_store.update_label("lbl-red", name="Hot")
        assert updated.name == "Hot"
        assert updated.color.value == "red"
        assert guest_store.state.get_label("lbl-red").name == "Hot"

    def test_update_label_unknown_field(self, guest_store: TaskStore):
        with pytest.raises(ValueError):
            guest_store.update_label("lbl-red", id="other")

    def test_update_unknown_label(self, guest_store: TaskStore):
        assert guest_store.update_label("missing", name="x") is None

    def test_delete_label_strips_tasks(self, guest_store: TaskStore):
        """No task keeps a dangling label id after its label is deleted."""
        a = guest_store.add_task("A", labels=["lbl-red", "lbl-blue"])
        b = guest_store.add_task("B", labels=["lbl-red"])
        calls = []
        guest_store.subscribe(lambda: calls.append(guest_store.state))

        guest_store.delete_label("lbl-red")

        assert len(calls) == 1
        state = calls[0]
        assert state.get_label("lbl-red") is None
        assert state.get_task(a.id).labels == ("lbl-blue",)
        assert state.get_task(b.id).labels == ()

    def test_delete_unknown_label(self, guest_store: TaskStore):
        assert guest_store.delete_label("missing") is None


class TestFiltersAndSubscriptions:
    """Tests for set_filters and subscribe."""

    def test_set_filters_merges(self, guest_store: TaskStore):
        guest_store.set_filters(query="docs")
        filters = guest_store.set_filters(when="today", label_ids=["lbl-red"])
        assert filters.query == "docs"
        assert filters.when == When.TODAY
        assert filters.label_ids == ("lbl-red",)

    def test_set_filters_not_persisted(self, guest_store: TaskStore, cache: BoardCache):
        guest_store.set_filters(query="docs")
        assert "docs" not in (cache.storage.get_item(STORAGE_KEY) or "")

    def test_set_filters_unknown_field(self, guest_store: TaskStore):
        with pytest.raises(ValueError):
            guest_store.set_filters(status="done")

    def test_set_filters_bad_when(self, guest_store: TaskStore):
        with pytest.raises(ValueError):
            guest_store.set_filters(when="someday")

    def test_set_filters_rejects_bare_label_id(self, guest_store: TaskStore):
        with pytest.raises(ValueError):
            guest_store.set_filters(label_ids="lbl-red")
        assert guest_store.filters.label_ids == ()

    def test_subscribe_and_dispose(self, guest_store: TaskStore):
        calls = []
        dispose = guest_store.subscribe(lambda: calls.append(1))
        guest_store.add_task("A")
        guest_store.set_filters(query="a")
        dispose()
        guest_store.add_task("B")
        assert calls == [1, 1]

    def test_failing_listener_does_not_block_others(self, guest_store: TaskStore):
        calls = []

        def broken():
            raise RuntimeError("boom")

        guest_store.subscribe(broken)
        guest_store.subscribe(lambda: calls.append(1))
        guest_store.add_task("A")
        assert calls == [1]


class TestGuestIsolation:
    """Guests never touch the remote store."""

    def test_no_remote_calls(self, cache: BoardCache, remote, clock, ids):
        store = TaskStore(
            cache, remote=remote, session=Session(guest=True), clock=clock, id_factory=ids
        )
        store.initialize()

        task = store.add_task("A", labels=["lbl-red"])
        store.update_task(task.id, title="B", labels=[])
        store.move_task(task.id, Status.DONE, 0)
        snapshot = store.delete_task(task.id)
        store.restore_task(snapshot)
        label = store.add_label("X", "teal")
        store.update_label(label.id, color="pink")
        store.delete_label(label.id)
        store.flush()
        store.close()

        assert remote.all_calls() == []
        assert cache.load().get_task(task.id) is not None

    def test_guest_flag_session_ignores_owner(self, cache: BoardCache, remote):
        store = TaskStore(cache, remote=remote, session=Session(owner_id="user-1", guest=True))
        store.initialize()
        store.add_task("A")
        store.close()
        assert store.is_guest is True
        assert remote.all_calls() == []
