"""
Urgency/importance levels and Eisenhower quadrants

Pure mapping functions between levels and quadrants. ``classify`` is total
over every (urgency, importance) pair. ``representative_levels`` is used for
manual placement and is intentionally lossy: it collapses Medium into the
High/Low extremes, so ``classify(*representative_levels(q)) == q`` holds but
the reverse does not.
"""

from enum import Enum
from typing import Dict, Tuple


class Level(str, Enum):
    """Ordinal level for urgency and importance"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Quadrant(str, Enum):
    """Eisenhower matrix quadrant"""
    DO = "DO"
    SCHEDULE = "SCHEDULE"
    DELEGATE = "DELEGATE"
    ELIMINATE = "ELIMINATE"

    @property
    def label(self) -> str:
        return QUADRANT_LABELS[self]

    @property
    def action(self) -> str:
        return QUADRANT_ACTIONS[self]


QUADRANT_LABELS: Dict[Quadrant, str] = {
    Quadrant.DO: "Do (Urgent & Important)",
    Quadrant.SCHEDULE: "Schedule (Important & Not Urgent)",
    Quadrant.DELEGATE: "Delegate (Urgent & Not Important)",
    Quadrant.ELIMINATE: "Eliminate (Not Urgent & Not Important)",
}

QUADRANT_ACTIONS: Dict[Quadrant, str] = {
    Quadrant.DO: "Do First",
    Quadrant.SCHEDULE: "Schedule",
    Quadrant.DELEGATE: "Delegate",
    Quadrant.ELIMINATE: "Eliminate",
}

# Drag-and-drop placement: (urgency, importance)
REPRESENTATIVE_LEVELS: Dict[Quadrant, Tuple[Level, Level]] = {
    Quadrant.DO: (Level.HIGH, Level.HIGH),
    Quadrant.SCHEDULE: (Level.LOW, Level.HIGH),
    Quadrant.DELEGATE: (Level.HIGH, Level.LOW),
    Quadrant.ELIMINATE: (Level.LOW, Level.LOW),
}

_SIGNIFICANT = (Level.MEDIUM, Level.HIGH)


def is_urgent(level: Level) -> bool:
    return Level(level) in _SIGNIFICANT


def is_important(level: Level) -> bool:
    return Level(level) in _SIGNIFICANT


def classify(urgency: Level, importance: Level) -> Quadrant:
    """
    Map an urgency/importance pair to its quadrant

    Args:
        urgency: Urgency level
        importance: Importance level

    Returns:
        The single quadrant for this pair
    """
    urgent = is_urgent(urgency)
    important = is_important(importance)

    if urgent and important:
        return Quadrant.DO
    if important:
        return Quadrant.SCHEDULE
    if urgent:
        return Quadrant.DELEGATE
    return Quadrant.ELIMINATE


def representative_levels(quadrant: Quadrant) -> Tuple[Level, Level]:
    """
    Get the (urgency, importance) pair written when a task is dropped into a quadrant

    Args:
        quadrant: Target quadrant

    Returns:
        Tuple of (urgency, importance)
    """
    return REPRESENTATIVE_LEVELS[Quadrant(quadrant)]
