"""
Events emitted to the presentation layer
"""

from typing import List
from pydantic import BaseModel, Field
from tasq.models.task import Task


class CollectionSnapshot(BaseModel):
    """Full collection plus its aggregate counts"""
    tasks: List[Task] = Field(default_factory=list)
    active_count: int = 0
    completed_count: int = 0


class CollectionChanged(CollectionSnapshot):
    """Emitted after every mutation of the task collection"""
    reason: str


class ClassificationStarted(BaseModel):
    """Classifier call is in progress"""
    title: str
    reanalysis: bool = False


class ClassificationFinished(BaseModel):
    """Classifier call resolved and the pending task was updated"""
    task_id: str


class ClassificationFailed(BaseModel):
    """Classifier call failed; the user may retry"""
    message: str
    retryable: bool = True
