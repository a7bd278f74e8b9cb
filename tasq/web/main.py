"""
HTTP API for the task board
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Tuple
from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, model_validator
from tasq.config.settings import settings
from tasq.models.events import ClassificationFailed, ClassificationFinished, ClassificationStarted
from tasq.models.task import Task, ON_BOARD_STATUSES
from tasq.models.taxonomy import Level, Quadrant
from tasq.services.classifier import OpenAIClassifier
from tasq.services.event_bus import EventBus
from tasq.services.lifecycle import allowed_events
from tasq.services.prioritization import quadrant_of
from tasq.services.review_controller import ReviewController
from tasq.services.task_manager import TaskManager
from tasq.services.task_store import InMemoryTaskStore, JsonFileTaskStore, TaskStore
from tasq.utils.date_utils import get_current_datetime, to_iso
from tasq.utils.error_handler import (
    ClassifierError,
    InvalidTransitionError,
    NotFoundError,
    ReviewBusyError,
    StoreCorruptedError,
    TasqError,
    ValidationError,
    handle_error,
)
from tasq.utils.logger import logger
from tasq.utils.validation import validate_model

ERROR_STATUS_CODES = {
    ValidationError: 422,
    NotFoundError: 404,
    ClassifierError: 502,
    ReviewBusyError: 409,
    InvalidTransitionError: 409,
}


class ReassignRequest(BaseModel):
    """Either a target quadrant or an explicit level pair"""

    model_config = ConfigDict(populate_by_name=True)

    quadrant: Optional[Quadrant] = None
    urgency: Optional[Level] = None
    importance: Optional[Level] = None

    @model_validator(mode="after")
    def check_target(self) -> "ReassignRequest":
        has_levels = self.urgency is not None and self.importance is not None
        if self.quadrant is None and not has_levels:
            raise ValueError("Provide a quadrant or both urgency and importance")
        if self.quadrant is not None and (self.urgency is not None or self.importance is not None):
            raise ValueError("Provide a quadrant or levels, not both")
        return self


class QueryConfirmation:
    """Confirmation capability backed by the ``confirm`` query parameter"""

    def __init__(self, confirmed: bool):
        self.confirmed = confirmed
        self.prompt: Optional[str] = None

    def __call__(self, prompt: str) -> bool:
        self.prompt = prompt
        return self.confirmed


def serialize_task(task: Task) -> Dict[str, Any]:
    record = task.to_record()
    record["quadrant"] = quadrant_of(task).value if task.status in ON_BOARD_STATUSES else None
    record["allowedEvents"] = [event.value for event in allowed_events(task.status)]
    return record


def build_store() -> TaskStore:
    settings.validate()
    if settings.TASKS_STORE_BACKEND == "memory":
        logger.warning("Using in-memory task store; tasks will not survive a restart")
        return InMemoryTaskStore()
    return JsonFileTaskStore(settings.TASKS_STORE_PATH)


def build_services() -> Tuple[TaskManager, ReviewController]:
    """Wire the default services from settings"""
    event_bus = EventBus()
    task_manager = TaskManager(build_store(), event_bus)
    review_controller = ReviewController(OpenAIClassifier(), task_manager, event_bus)
    if not settings.has_classifier():
        logger.warning("OPENAI_API_KEY is not set; AI-assisted creation will fail, use quick create")
    return task_manager, review_controller


def create_app(
    task_manager: Optional[TaskManager] = None,
    review_controller: Optional[ReviewController] = None,
) -> FastAPI:
    """
    Create the API application

    Args:
        task_manager: Loaded task manager (default services are built and loaded on startup if omitted)
        review_controller: Review controller bound to ``task_manager``

    Returns:
        FastAPI application
    """
    load_on_startup = task_manager is None
    if task_manager is None:
        task_manager, default_review = build_services()
        review_controller = review_controller or default_review
    if review_controller is None:
        review_controller = ReviewController(OpenAIClassifier(), task_manager)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if load_on_startup:
            try:
                count = task_manager.load()
            except StoreCorruptedError as e:
                logger.critical(f"[Startup] {e}")
                raise
            logger.info(f"[Startup] Task board ready with {count} tasks")
        yield

    app = FastAPI(title="TasQ", lifespan=lifespan)
    app.state.task_manager = task_manager
    app.state.review_controller = review_controller
    app.state.classifier_error = None

    def track_classifier(event: BaseModel):
        if isinstance(event, (ClassificationStarted, ClassificationFinished)):
            app.state.classifier_error = None
        elif isinstance(event, ClassificationFailed):
            app.state.classifier_error = event.message

    task_manager.events.subscribe(track_classifier)
    if review_controller.events is not task_manager.events:
        review_controller.events.subscribe(track_classifier)

    @app.exception_handler(TasqError)
    async def tasq_error_handler(request: Request, exc: TasqError):
        status_code = next(
            (code for error_cls, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_cls)),
            500,
        )
        return JSONResponse(status_code=status_code, content=handle_error(exc).model_dump())

    def snapshot_response() -> Dict[str, Any]:
        snapshot = task_manager.snapshot()
        return {
            # Newest first, as the store lists them
            "tasks": [serialize_task(task) for task in reversed(snapshot.tasks)],
            "activeCount": snapshot.active_count,
            "completedCount": snapshot.completed_count,
        }

    def confirmation_required(confirmation: QueryConfirmation) -> JSONResponse:
        return JSONResponse(status_code=409, content={
            "message": confirmation.prompt,
            "error_code": "confirmation_required",
            "retryable": True,
            "details": None,
        })

    def review_response() -> Dict[str, Any]:
        pending = review_controller.pending
        return {
            "pending": pending.to_record() if pending else None,
            "isAnalyzing": review_controller.is_analyzing,
            "error": app.state.classifier_error,
        }

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok", "timestamp": to_iso(get_current_datetime())}

    @app.get("/api/tasks")
    async def list_tasks():
        return snapshot_response()

    @app.get("/api/matrix")
    async def get_matrix():
        groups = task_manager.by_quadrant()
        return {
            "quadrants": {
                quadrant.value: {
                    "label": quadrant.label,
                    "action": quadrant.action,
                    "tasks": [serialize_task(task) for task in tasks],
                }
                for quadrant, tasks in groups.items()
            },
            "activeCount": task_manager.active_count,
            "completedCount": task_manager.completed_count,
        }

    @app.post("/api/tasks", status_code=201)
    async def quick_create(payload: Dict[str, Any] = Body(...)):
        task = task_manager.quick_create(payload)
        return serialize_task(task)

    @app.delete("/api/tasks/completed")
    async def clear_completed(confirm: bool = False):
        if task_manager.completed_count == 0:
            return {"removed": 0, **snapshot_response()}
        confirmation = QueryConfirmation(confirm)
        removed = task_manager.clear_completed(confirmation)
        if not confirmation.confirmed:
            return confirmation_required(confirmation)
        return {"removed": removed, **snapshot_response()}

    @app.get("/api/tasks/{task_id}")
    async def get_task(task_id: str):
        return serialize_task(task_manager.get(task_id))

    @app.put("/api/tasks/{task_id}")
    async def update_task(task_id: str, payload: Dict[str, Any] = Body(...)):
        return serialize_task(task_manager.update(task_id, payload))

    @app.delete("/api/tasks/{task_id}")
    async def delete_task(task_id: str, confirm: bool = False):
        confirmation = QueryConfirmation(confirm)
        if not task_manager.delete(task_id, confirmation):
            return confirmation_required(confirmation)
        return {"message": "Task deleted successfully", **snapshot_response()}

    @app.post("/api/tasks/{task_id}/toggle")
    async def toggle_task(task_id: str):
        return serialize_task(task_manager.toggle_complete(task_id))

    @app.post("/api/tasks/{task_id}/reassign")
    async def reassign_task(task_id: str, payload: Dict[str, Any] = Body(...)):
        request = validate_model(ReassignRequest, payload)
        if request.quadrant is not None:
            task = task_manager.move_to_quadrant(task_id, request.quadrant)
        else:
            task = task_manager.reassign(task_id, request.urgency, request.importance)
        return serialize_task(task)

    @app.get("/api/review")
    async def get_review():
        return review_response()

    @app.post("/api/review")
    async def submit_review(payload: Dict[str, Any] = Body(...)):
        await review_controller.submit_for_review(payload)
        return review_response()

    @app.post("/api/review/reanalyze")
    async def reanalyze_review(payload: Optional[Dict[str, Any]] = Body(None)):
        await review_controller.reanalyze(payload)
        return review_response()

    @app.post("/api/review/accept")
    async def accept_review(payload: Optional[Dict[str, Any]] = Body(None)):
        task = review_controller.accept_pending(payload)
        return serialize_task(task)

    @app.delete("/api/review")
    async def reject_review():
        discarded = review_controller.reject_pending()
        return {"discarded": discarded, **review_response()}

    return app
