"""
Review workflow: AI-assisted creation with a single pending-review slot
"""

from typing import Optional, Union
from tasq.models.classification import ClassificationResult
from tasq.models.events import ClassificationFailed, ClassificationFinished, ClassificationStarted
from tasq.models.task import ReviewEdits, Task, TaskDraft
from tasq.services.classifier import Classifier
from tasq.services.event_bus import EventBus
from tasq.services.lifecycle import TaskEvent, next_status
from tasq.services.task_manager import TaskManager
from tasq.utils.error_handler import (
    ClassifierError,
    InvalidTransitionError,
    ReviewBusyError,
    format_error_message,
)
from tasq.utils.logger import logger
from tasq.utils.validation import apply_changes, validate_model


class ReviewController:
    """
    Holds at most one task in Pending Review and drives it to accept/reject.

    Only one classification may be outstanding at a time: a second submit or
    re-analysis while one is in flight is rejected with ReviewBusyError. Every
    occupancy of the slot gets a new generation number, and a classifier
    response that resolves after its generation was discarded is ignored.
    """

    def __init__(
        self,
        classifier: Classifier,
        task_manager: TaskManager,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Initialize review controller

        Args:
            classifier: External classifier
            task_manager: Collection that receives accepted tasks
            event_bus: Bus for progress/failure events (defaults to the manager's)
        """
        self.classifier = classifier
        self.task_manager = task_manager
        self.events = event_bus or task_manager.events
        self.logger = logger
        self._pending: Optional[Task] = None
        self._in_flight = False
        self._generation = 0
        self.failed_draft: Optional[TaskDraft] = None

    @property
    def pending(self) -> Optional[Task]:
        return self._pending

    @property
    def is_analyzing(self) -> bool:
        return self._in_flight

    async def submit_for_review(self, draft: Union[TaskDraft, dict]) -> Optional[Task]:
        """
        Classify a draft and hold the result for review

        Args:
            draft: Entry form input

        Returns:
            The Pending Review task, or None if the submission was rejected
            while the classifier was still running

        Raises:
            ValidationError: If the draft is invalid
            ReviewBusyError: If a task is already pending or a call is in flight
            ClassifierError: If classification failed (no task is held)
        """
        draft = validate_model(TaskDraft, draft)
        self._ensure_idle()
        if self._pending is not None:
            raise ReviewBusyError("Another task is already awaiting review")

        status = next_status(None, TaskEvent.SUBMIT_FOR_REVIEW)
        self._generation += 1
        generation = self._generation

        try:
            result = await self._classify(generation, draft.title, draft, reanalysis=False)
        except ClassifierError:
            self.failed_draft = draft
            raise

        if result is None:
            return None

        self._pending = validate_model(Task, {
            "title": draft.title,
            "description": draft.description,
            "user_urgency": draft.user_urgency,
            "user_importance": draft.user_importance,
            "ai_urgency": result.urgency,
            "ai_importance": result.importance,
            "justification": result.justification,
            "complete_by": draft.complete_by,
            "status": status,
        })
        self.failed_draft = None
        self.logger.info(f"[Review] Task '{draft.title}' awaiting review ({self._pending.id})")
        self.events.emit(ClassificationFinished(task_id=self._pending.id))
        return self._pending

    async def reanalyze(self, edits: Union[ReviewEdits, dict, None] = None) -> Optional[Task]:
        """
        Re-run classification for the pending task with edited inputs

        On success the edits and the new assessment replace the held values;
        status stays Pending Review. On failure the held task is unchanged.

        Returns:
            Updated pending task, or None if it was rejected meanwhile

        Raises:
            ReviewBusyError: If a classification is already in flight
            InvalidTransitionError: If no task is pending
            ClassifierError: If classification failed
        """
        edits = validate_model(ReviewEdits, edits)
        self._ensure_idle()
        pending = self._require_pending()
        candidate = apply_changes(pending, **edits.changes())
        generation = self._generation

        result = await self._classify(generation, candidate.title, candidate, reanalysis=True)
        if result is None:
            return None

        self._pending = apply_changes(
            candidate,
            ai_urgency=result.urgency,
            ai_importance=result.importance,
            justification=result.justification,
        )
        self.logger.info(f"[Review] Re-analysis updated task {self._pending.id}")
        self.events.emit(ClassificationFinished(task_id=self._pending.id))
        return self._pending

    def accept_pending(self, edits: Union[ReviewEdits, dict, None] = None) -> Task:
        """
        Commit the pending task to the collection

        Raises:
            ReviewBusyError: If a classification is still in flight
            InvalidTransitionError: If no task is pending
        """
        edits = validate_model(ReviewEdits, edits)
        if self._in_flight:
            raise ReviewBusyError("Wait for the analysis to finish before committing")
        pending = self._require_pending()

        accepted = apply_changes(
            pending,
            **edits.changes(),
            status=next_status(pending.status, TaskEvent.ACCEPT),
        )
        task = self.task_manager.create(accepted)
        self._clear_slot()
        self.logger.info(f"[Review] Accepted task '{task.title}' ({task.id})")
        return task

    def reject_pending(self) -> bool:
        """
        Discard the pending task, including a submission still being classified

        Returns:
            True if something was discarded
        """
        if self._pending is None and not self._in_flight:
            return False

        if self._pending is not None:
            next_status(self._pending.status, TaskEvent.REJECT)
            self.logger.info(f"[Review] Rejected task '{self._pending.title}' ({self._pending.id})")
        else:
            self.logger.info("[Review] Discarded submission in flight")

        self._clear_slot()
        return True

    # -------------------- internals --------------------

    async def _classify(
        self,
        generation: int,
        title: str,
        fields: Union[Task, TaskDraft],
        reanalysis: bool,
    ) -> Optional[ClassificationResult]:
        """Run one classifier call; returns None if its generation went stale"""
        self._in_flight = True
        self.events.emit(ClassificationStarted(title=title, reanalysis=reanalysis))
        try:
            result = await self.classifier.classify(
                title=fields.title,
                description=fields.description,
                complete_by=fields.complete_by,
                user_urgency=fields.user_urgency,
                user_importance=fields.user_importance,
            )
        except Exception as e:
            if generation != self._generation:
                self.logger.debug(f"[Review] Ignoring failure of discarded classification: {e}")
                return None
            if not isinstance(e, ClassifierError):
                e = ClassifierError(str(e), cause=e)
            self.events.emit(ClassificationFailed(message=format_error_message(e)))
            raise e
        finally:
            if generation == self._generation:
                self._in_flight = False

        if generation != self._generation:
            self.logger.debug(f"[Review] Ignoring late classification for '{title}'")
            return None
        return result

    def _ensure_idle(self) -> None:
        if self._in_flight:
            raise ReviewBusyError("An AI analysis is already in progress")

    def _require_pending(self) -> Task:
        if self._pending is None:
            raise InvalidTransitionError("No task is awaiting review")
        return self._pending

    def _clear_slot(self) -> None:
        self._pending = None
        self._in_flight = False
        self._generation += 1
