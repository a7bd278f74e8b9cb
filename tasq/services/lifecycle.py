"""
Task lifecycle state machine
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
from tasq.models.task import TaskStatus
from tasq.utils.error_handler import InvalidTransitionError


class TaskEvent(str, Enum):
    """Events that drive task status changes"""
    QUICK_CREATE = "quick_create"
    SUBMIT_FOR_REVIEW = "submit_for_review"
    ACCEPT = "accept"
    REJECT = "reject"
    TOGGLE = "toggle"
    DELETE = "delete"
    REASSIGN = "reassign"
    CLEAR_COMPLETED = "clear_completed"


# (from status, event) -> to status. None means no entity: not yet created,
# discarded from review, or destroyed.
TRANSITIONS: Dict[Tuple[Optional[TaskStatus], TaskEvent], Optional[TaskStatus]] = {
    (None, TaskEvent.QUICK_CREATE): TaskStatus.ACCEPTED,
    (None, TaskEvent.SUBMIT_FOR_REVIEW): TaskStatus.PENDING_REVIEW,
    (TaskStatus.PENDING_REVIEW, TaskEvent.ACCEPT): TaskStatus.ACCEPTED,
    (TaskStatus.PENDING_REVIEW, TaskEvent.REJECT): None,
    (TaskStatus.ACCEPTED, TaskEvent.TOGGLE): TaskStatus.COMPLETED,
    (TaskStatus.COMPLETED, TaskEvent.TOGGLE): TaskStatus.ACCEPTED,
    (TaskStatus.ACCEPTED, TaskEvent.DELETE): None,
    (TaskStatus.COMPLETED, TaskEvent.DELETE): None,
    (TaskStatus.ACCEPTED, TaskEvent.REASSIGN): TaskStatus.ACCEPTED,
    (TaskStatus.COMPLETED, TaskEvent.REASSIGN): TaskStatus.COMPLETED,
    (TaskStatus.COMPLETED, TaskEvent.CLEAR_COMPLETED): None,
}


def _label(status: Optional[TaskStatus]) -> str:
    return status.value if status is not None else "(none)"


def is_allowed(current: Optional[TaskStatus], event: TaskEvent) -> bool:
    """Return True if ``event`` may be applied in status ``current``."""
    return (current, event) in TRANSITIONS


def next_status(current: Optional[TaskStatus], event: TaskEvent) -> Optional[TaskStatus]:
    """
    Apply a lifecycle event to a status

    Args:
        current: Current status, or None if the task does not exist yet
        event: Event to apply

    Returns:
        Resulting status, or None if the task is discarded/destroyed

    Raises:
        InvalidTransitionError: If the event is not allowed from ``current``
    """
    event = TaskEvent(event)
    if not is_allowed(current, event):
        raise InvalidTransitionError(
            f"Cannot apply '{event.value}' to a task in status {_label(current)}"
        )
    return TRANSITIONS[(current, event)]


def allowed_events(current: Optional[TaskStatus]) -> List[TaskEvent]:
    """List the events permitted from ``current``, in declaration order."""
    return [event for (status, event) in TRANSITIONS if status == current]
