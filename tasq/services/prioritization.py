"""
Prioritization engine: quadrant placement for tasks
"""

from typing import Dict, Iterable, List, Optional, Tuple
from tasq.models.task import Task, ON_BOARD_STATUSES
from tasq.models.taxonomy import Level, Quadrant, classify, representative_levels
from tasq.utils.error_handler import ValidationError


def quadrant_of(task: Task) -> Quadrant:
    """
    Compute the quadrant a task belongs to

    Placement is driven only by the AI levels; the user's self-assessment is
    advisory and never consulted here.

    Raises:
        ValidationError: If the task has no AI assessment yet
    """
    if task.ai_urgency is None or task.ai_importance is None:
        raise ValidationError(f"Task '{task.id}' has no urgency/importance assessment")
    return classify(task.ai_urgency, task.ai_importance)


def placement_for(quadrant: Quadrant) -> Tuple[Level, Level]:
    """(urgency, importance) written when a task is dropped into ``quadrant``."""
    return representative_levels(quadrant)


def quick_create_levels(
    user_urgency: Optional[Level],
    user_importance: Optional[Level],
) -> Tuple[Level, Level]:
    """AI levels for a task created without classification."""
    return user_urgency or Level.LOW, user_importance or Level.LOW


def group_by_quadrant(tasks: Iterable[Task]) -> Dict[Quadrant, List[Task]]:
    """
    Partition on-board tasks by quadrant

    Args:
        tasks: Tasks in insertion order

    Returns:
        Mapping with every quadrant present (in DO, SCHEDULE, DELEGATE,
        ELIMINATE order); each list keeps the relative input order
    """
    groups: Dict[Quadrant, List[Task]] = {quadrant: [] for quadrant in Quadrant}
    for task in tasks:
        if task.status not in ON_BOARD_STATUSES:
            continue
        groups[quadrant_of(task)].append(task)
    return groups
