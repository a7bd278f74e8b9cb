"""
Pytest configuration and fixtures
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from tasq.models.classification import ClassificationResult
from tasq.models.taxonomy import Level
from tasq.services.classifier import Classifier
from tasq.services.event_bus import EventBus
from tasq.services.review_controller import ReviewController
from tasq.services.task_manager import TaskManager
from tasq.services.task_store import InMemoryTaskStore


DUE_DATE = datetime(2030, 1, 15, tzinfo=timezone.utc)


@pytest.fixture
def due_date():
    return DUE_DATE


@pytest.fixture
def draft():
    """Entry form input"""
    return {
        "title": "Pay rent",
        "description": "Transfer to landlord",
        "userUrgency": "High",
        "userImportance": "Medium",
        "completeBy": DUE_DATE.isoformat(),
    }


@pytest.fixture
def memory_store():
    return InMemoryTaskStore()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def received_events(event_bus):
    """Events delivered to a subscribed presentation handler"""
    events = []
    event_bus.subscribe(events.append)
    return events


@pytest.fixture
def task_manager(memory_store, event_bus):
    manager = TaskManager(memory_store, event_bus)
    manager.load()
    return manager


@pytest.fixture
def mock_classifier():
    """Mock classifier returning Low urgency / High importance"""
    classifier = MagicMock(spec=Classifier)
    classifier.classify = AsyncMock(return_value=ClassificationResult(
        urgency=Level.LOW,
        importance=Level.HIGH,
        justification="Important for the long term, but not pressing.",
    ))
    return classifier


@pytest.fixture
def review_controller(mock_classifier, task_manager, event_bus):
    return ReviewController(mock_classifier, task_manager, event_bus)

