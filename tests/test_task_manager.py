"""
Tests for TaskManager
"""

import pytest
from unittest.mock import MagicMock
from tasq.config.constants import DEFAULT_JUSTIFICATION
from tasq.models.events import CollectionChanged
from tasq.models.task import Task, TaskStatus
from tasq.models.taxonomy import Level, Quadrant
from tasq.services.prioritization import quadrant_of
from tasq.services.task_manager import TaskManager
from tasq.services.task_store import InMemoryTaskStore
from tasq.utils.error_handler import (
    NotFoundError,
    PersistenceWriteError,
    ValidationError,
)


def always(_prompt):
    return True


def never(_prompt):
    return False


class FlakyStore(InMemoryTaskStore):
    """In-memory store whose next N writes fail"""

    def __init__(self):
        super().__init__()
        self.failures = 0

    def _commit(self, records):
        if self.failures:
            self.failures -= 1
            raise PersistenceWriteError("disk full")
        super()._commit(records)


def stored_ids(store):
    return {task.id for task in store.list_all()}


class TestQuickCreate:

    def test_quick_create_uses_self_assessment(self, task_manager, memory_store, draft):
        """Pay rent, user High/Medium, lands in DO with the default justification"""
        task = task_manager.quick_create(draft)

        assert task.status == TaskStatus.ACCEPTED
        assert task.ai_urgency == Level.HIGH
        assert task.ai_importance == Level.MEDIUM
        assert task.justification == DEFAULT_JUSTIFICATION
        assert quadrant_of(task) == Quadrant.DO
        assert task_manager.active_count == 1
        assert stored_ids(memory_store) == {task.id}

    def test_quick_create_defaults_to_low(self, task_manager):
        """No self-assessment places the task in ELIMINATE"""
        task = task_manager.quick_create({"title": "Sort drawer", "daysFromNow": 5})
        assert task.ai_urgency == Level.LOW
        assert task.ai_importance == Level.LOW
        assert quadrant_of(task) == Quadrant.ELIMINATE

    def test_missing_title_changes_nothing(self, task_manager, received_events, draft):
        draft["title"] = "   "
        with pytest.raises(ValidationError):
            task_manager.quick_create(draft)
        assert task_manager.tasks == []
        assert received_events == []

    def test_emits_collection_changed(self, task_manager, received_events, draft):
        task = task_manager.quick_create(draft)
        assert len(received_events) == 1
        event = received_events[0]
        assert isinstance(event, CollectionChanged)
        assert event.reason == "created"
        assert event.tasks == [task]
        assert event.active_count == 1
        assert event.completed_count == 0


class TestCreate:

    def test_rejects_pending_task(self, task_manager, due_date):
        task = Task(
            title="t",
            complete_by=due_date,
            ai_urgency=Level.LOW,
            ai_importance=Level.LOW,
            status=TaskStatus.PENDING_REVIEW,
        )
        with pytest.raises(ValidationError):
            task_manager.create(task)

    def test_rejects_duplicate_id(self, task_manager, draft):
        task = task_manager.quick_create(draft)
        with pytest.raises(ValidationError, match="already exists"):
            task_manager.create(task)
        assert len(task_manager.tasks) == 1


class TestToggleAndDelete:

    def test_toggle_twice_restores_state(self, task_manager, draft):
        task = task_manager.quick_create(draft)

        completed = task_manager.toggle_complete(task.id)
        assert completed.status == TaskStatus.COMPLETED
        assert task_manager.active_count == 0
        assert task_manager.completed_count == 1

        restored = task_manager.toggle_complete(task.id)
        assert restored.status == TaskStatus.ACCEPTED
        assert restored.model_dump(exclude={"status"}) == task.model_dump(exclude={"status"})
        assert task_manager.active_count == 1

    def test_toggle_keeps_quadrant(self, task_manager, draft):
        task = task_manager.quick_create(draft)
        toggled = task_manager.toggle_complete(task.id)
        assert quadrant_of(toggled) == quadrant_of(task)

    def test_delete_confirmed(self, task_manager, memory_store, draft):
        task = task_manager.quick_create(draft)
        assert task_manager.delete(task.id, always) is True
        assert task_manager.tasks == []
        assert stored_ids(memory_store) == set()

    def test_delete_declined(self, task_manager, received_events, draft):
        task = task_manager.quick_create(draft)
        received_events.clear()
        assert task_manager.delete(task.id, never) is False
        assert task_manager.tasks == [task]
        assert received_events == []

    def test_delete_prompt_names_task(self, task_manager, draft):
        task = task_manager.quick_create(draft)
        confirm = MagicMock(return_value=False)
        task_manager.delete(task.id, confirm)
        confirm.assert_called_once_with('Are you sure you want to delete the task "Pay rent"?')

    def test_delete_unknown_id(self, task_manager, received_events, draft):
        task_manager.quick_create(draft)
        received_events.clear()
        with pytest.raises(NotFoundError):
            task_manager.delete("missing", always)
        assert len(task_manager.tasks) == 1
        assert received_events == []

    def test_toggle_unknown_id(self, task_manager):
        with pytest.raises(NotFoundError):
            task_manager.toggle_complete("missing")


class TestClearCompleted:

    def test_clears_only_completed(self, task_manager, memory_store, draft):
        kept = task_manager.quick_create(draft)
        done = [task_manager.quick_create({**draft, "title": f"done {i}"}) for i in range(2)]
        for task in done:
            task_manager.toggle_complete(task.id)

        assert task_manager.clear_completed(always) == 2
        assert task_manager.tasks == [kept]
        assert stored_ids(memory_store) == {kept.id}
        assert task_manager.completed_count == 0

    def test_nothing_to_clear_skips_confirmation(self, task_manager, draft):
        task_manager.quick_create(draft)
        confirm = MagicMock(return_value=True)
        assert task_manager.clear_completed(confirm) == 0
        confirm.assert_not_called()

    def test_declined(self, task_manager, draft):
        task = task_manager.quick_create(draft)
        task_manager.toggle_complete(task.id)
        confirm = MagicMock(return_value=False)
        assert task_manager.clear_completed(confirm) == 0
        confirm.assert_called_once_with("Are you sure you want to clear all 1 completed tasks?")
        assert task_manager.completed_count == 1


class TestReassign:

    def test_move_to_delegate(self, task_manager, draft):
        """Dragging a DO task to DELEGATE writes High/Low and keeps everything else"""
        task = task_manager.quick_create(draft)
        moved = task_manager.move_to_quadrant(task.id, Quadrant.DELEGATE)

        assert moved.ai_urgency == Level.HIGH
        assert moved.ai_importance == Level.LOW
        assert quadrant_of(moved) == Quadrant.DELEGATE
        assert moved.status == TaskStatus.ACCEPTED
        assert moved.user_urgency == task.user_urgency
        assert moved.user_importance == task.user_importance
        assert moved.justification == task.justification

    def test_reassign_completed_keeps_status(self, task_manager, draft):
        task = task_manager.quick_create(draft)
        task_manager.toggle_complete(task.id)
        moved = task_manager.reassign(task.id, Level.LOW, Level.MEDIUM)
        assert moved.status == TaskStatus.COMPLETED
        assert quadrant_of(moved) == Quadrant.SCHEDULE

    def test_matrix_grouping(self, task_manager, draft):
        first = task_manager.quick_create(draft)
        second = task_manager.quick_create({**draft, "title": "Call mom"})
        task_manager.move_to_quadrant(first.id, Quadrant.SCHEDULE)

        groups = task_manager.by_quadrant()
        assert list(groups) == [Quadrant.DO, Quadrant.SCHEDULE, Quadrant.DELEGATE, Quadrant.ELIMINATE]
        assert [t.id for t in groups[Quadrant.DO]] == [second.id]
        assert [t.id for t in groups[Quadrant.SCHEDULE]] == [first.id]
        assert groups[Quadrant.ELIMINATE] == []


class TestUpdate:

    def test_update_fields(self, task_manager, draft):
        task = task_manager.quick_create(draft)
        updated = task_manager.update(task.id, {"title": "Pay rent early", "description": None})
        assert updated.title == "Pay rent early"
        assert updated.description == ""
        assert updated.id == task.id
        assert updated.created_at == task.created_at

    def test_empty_patch_is_noop(self, task_manager, received_events, draft):
        task = task_manager.quick_create(draft)
        received_events.clear()
        assert task_manager.update(task.id, {}) == task
        assert received_events == []

    def test_invalid_patch(self, task_manager, draft):
        task = task_manager.quick_create(draft)
        with pytest.raises(ValidationError):
            task_manager.update(task.id, {"title": ""})
        assert task_manager.get(task.id) == task


class TestPersistence:

    def test_load_restores_insertion_order(self, draft):
        store = InMemoryTaskStore()
        first = TaskManager(store)
        a = first.quick_create({**draft, "title": "a"})
        b = first.quick_create({**draft, "title": "b"})

        second = TaskManager(store)
        assert second.load() == 2
        assert [t.id for t in second.tasks] == [a.id, b.id]

    def test_failed_write_keeps_memory_and_resyncs(self, draft, received_events, event_bus):
        store = FlakyStore()
        manager = TaskManager(store, event_bus)

        store.failures = 1
        lost = manager.quick_create(draft)
        assert manager.tasks == [lost]
        assert stored_ids(store) == set()
        assert received_events[-1].reason == "created"

        later = manager.quick_create({**draft, "title": "later"})
        assert stored_ids(store) == {lost.id, later.id}

    def test_resync_removes_stale_records(self, draft):
        store = FlakyStore()
        manager = TaskManager(store)
        first = manager.quick_create(draft)

        store.failures = 1
        manager.delete(first.id, always)
        assert stored_ids(store) == {first.id}

        second = manager.quick_create({**draft, "title": "second"})
        assert stored_ids(store) == {second.id}
