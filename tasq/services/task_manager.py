"""
Task collection manager
"""

from typing import Callable, Dict, List, Optional, Union
from tasq.config.constants import (
    DEFAULT_JUSTIFICATION,
    CONFIRM_DELETE_PROMPT,
    CONFIRM_CLEAR_COMPLETED_PROMPT,
)
from tasq.models.events import CollectionChanged, CollectionSnapshot
from tasq.models.task import Task, TaskDraft, TaskPatch, TaskStatus, ON_BOARD_STATUSES
from tasq.models.taxonomy import Level, Quadrant
from tasq.services.event_bus import EventBus
from tasq.services.lifecycle import TaskEvent, next_status
from tasq.services.prioritization import group_by_quadrant, placement_for, quick_create_levels
from tasq.services.task_store import TaskStore
from tasq.utils.error_handler import NotFoundError, PersistenceWriteError, ValidationError
from tasq.utils.logger import logger
from tasq.utils.validation import apply_changes, validate_model

ConfirmCallback = Callable[[str], bool]


class TaskManager:
    """Authoritative in-memory task collection, persisted after each mutation"""

    def __init__(self, store: TaskStore, event_bus: Optional[EventBus] = None):
        """
        Initialize task manager

        Args:
            store: Persistence collaborator
            event_bus: Bus for presentation events (a private one is created if omitted)
        """
        self.store = store
        self.events = event_bus or EventBus()
        self.logger = logger
        self._tasks: Dict[str, Task] = {}
        self._needs_resync = False

    def load(self) -> int:
        """
        Load the collection from the store

        Returns:
            Number of tasks loaded

        Raises:
            StoreCorruptedError: If the store cannot be read
        """
        stored = self.store.list_all()
        # Store lists newest first; the collection keeps insertion order
        self._tasks = {task.id: task for task in reversed(stored)}
        self.logger.info(f"[TaskManager] Loaded {len(self._tasks)} tasks")
        return len(self._tasks)

    # -------------------- reads --------------------

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks.values())

    def get(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks.values() if task.status == TaskStatus.ACCEPTED)

    @property
    def completed_count(self) -> int:
        return sum(1 for task in self._tasks.values() if task.status == TaskStatus.COMPLETED)

    def by_quadrant(self) -> Dict[Quadrant, List[Task]]:
        return group_by_quadrant(self._tasks.values())

    def snapshot(self) -> CollectionSnapshot:
        return CollectionSnapshot(
            tasks=self.tasks,
            active_count=self.active_count,
            completed_count=self.completed_count,
        )

    # -------------------- mutations --------------------

    def quick_create(self, draft: Union[TaskDraft, dict]) -> Task:
        """
        Create a task directly on the board, without classification

        Args:
            draft: Entry form input

        Returns:
            The created task (status Accepted)

        Raises:
            ValidationError: If title or due date is missing
        """
        draft = validate_model(TaskDraft, draft)
        ai_urgency, ai_importance = quick_create_levels(draft.user_urgency, draft.user_importance)
        task = validate_model(Task, {
            "title": draft.title,
            "description": draft.description,
            "user_urgency": draft.user_urgency,
            "user_importance": draft.user_importance,
            "ai_urgency": ai_urgency,
            "ai_importance": ai_importance,
            "justification": DEFAULT_JUSTIFICATION,
            "complete_by": draft.complete_by,
            "status": next_status(None, TaskEvent.QUICK_CREATE),
        })
        return self.create(task)

    def create(self, task: Task) -> Task:
        """
        Insert an already-built on-board task

        Raises:
            ValidationError: If the task is not on the board or its id is taken
        """
        if task.status not in ON_BOARD_STATUSES:
            raise ValidationError(f"Only accepted or completed tasks can be added, got '{task.status.value}'")
        if task.id in self._tasks:
            raise ValidationError(f"Task id '{task.id}' already exists")

        self._tasks[task.id] = task
        self.logger.info(f"[TaskManager] Created task '{task.title}' ({task.id})")
        self._persist(lambda: self.store.insert(task))
        self._notify("created")
        return task

    def update(self, task_id: str, patch: Union[TaskPatch, dict]) -> Task:
        """
        Apply a partial update to a task

        Raises:
            NotFoundError: If the id is unknown
            ValidationError: If the patch is invalid
        """
        patch = validate_model(TaskPatch, patch)
        task = self.get(task_id)
        changes = patch.changes()
        if not changes:
            return task

        updated = apply_changes(task, **changes)
        self._replace(updated, reason="updated")
        return updated

    def delete(self, task_id: str, confirm: ConfirmCallback) -> bool:
        """
        Delete a task after confirmation

        Args:
            task_id: Task ID
            confirm: Callable receiving the prompt text, returns True to proceed

        Returns:
            True if the task was deleted, False if confirmation was declined

        Raises:
            NotFoundError: If the id is unknown
        """
        task = self.get(task_id)
        next_status(task.status, TaskEvent.DELETE)

        if not confirm(CONFIRM_DELETE_PROMPT.format(title=task.title)):
            self.logger.info(f"[TaskManager] Delete of {task_id} not confirmed")
            return False

        del self._tasks[task_id]
        self.logger.info(f"[TaskManager] Deleted task '{task.title}' ({task_id})")
        self._persist(lambda: self.store.remove(task_id))
        self._notify("deleted")
        return True

    def toggle_complete(self, task_id: str) -> Task:
        """Flip a task between Accepted and Completed"""
        task = self.get(task_id)
        updated = apply_changes(task, status=next_status(task.status, TaskEvent.TOGGLE))
        self._replace(updated, reason="toggled")
        return updated

    def clear_completed(self, confirm: ConfirmCallback) -> int:
        """
        Remove every completed task after confirmation

        Returns:
            Number of tasks removed (0 if none were completed or not confirmed)
        """
        completed = [task for task in self._tasks.values() if task.is_completed]
        if not completed:
            return 0

        if not confirm(CONFIRM_CLEAR_COMPLETED_PROMPT.format(count=len(completed))):
            self.logger.info("[TaskManager] Clear completed not confirmed")
            return 0

        for task in completed:
            next_status(task.status, TaskEvent.CLEAR_COMPLETED)
            del self._tasks[task.id]

        def remove_all():
            for task in completed:
                self.store.remove(task.id)

        self.logger.info(f"[TaskManager] Cleared {len(completed)} completed tasks")
        self._persist(remove_all)
        self._notify("cleared_completed")
        return len(completed)

    def reassign(self, task_id: str, urgency: Level, importance: Level) -> Task:
        """Overwrite a task's AI levels; status and self-assessment are untouched"""
        task = self.get(task_id)
        next_status(task.status, TaskEvent.REASSIGN)
        updated = apply_changes(task, ai_urgency=Level(urgency), ai_importance=Level(importance))
        self._replace(updated, reason="reassigned")
        return updated

    def move_to_quadrant(self, task_id: str, quadrant: Quadrant) -> Task:
        """
        Drop a task into a quadrant

        Both AI levels are overwritten with the quadrant's representative
        High/Low pair; a previous Medium assessment is not preserved.
        """
        urgency, importance = placement_for(Quadrant(quadrant))
        return self.reassign(task_id, urgency, importance)

    # -------------------- internals --------------------

    def _replace(self, task: Task, reason: str) -> None:
        self._tasks[task.id] = task
        self.logger.debug(f"[TaskManager] Task {task.id} {reason}")
        self._persist(lambda: self.store.replace(task.id, task))
        self._notify(reason)

    def _persist(self, write: Callable[[], None]) -> None:
        """Run a store write; failures are logged and never roll back memory"""
        try:
            if self._needs_resync:
                self._resync()
            else:
                write()
            self._needs_resync = False
        except PersistenceWriteError as e:
            self._needs_resync = True
            self.logger.error(f"[TaskManager] {e}. In-memory state kept; will resync on next write.")

    def _resync(self) -> None:
        """Bring the store in line with the in-memory collection"""
        stored = {task.id: task for task in self.store.list_all()}
        for task_id in stored:
            if task_id not in self._tasks:
                self.store.remove(task_id)
        for task in self._tasks.values():
            if task.id not in stored:
                self.store.insert(task)
            elif stored[task.id] != task:
                self.store.replace(task.id, task)
        self.logger.info(f"[TaskManager] Store resynchronized ({len(self._tasks)} tasks)")

    def _notify(self, reason: str) -> None:
        self.events.emit(CollectionChanged(
            reason=reason,
            tasks=self.tasks,
            active_count=self.active_count,
            completed_count=self.completed_count,
        ))
