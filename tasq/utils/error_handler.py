"""
Error handling utilities
"""

from typing import Optional
from tasq.models.response import ErrorResponse
from tasq.utils.logger import logger


class TasqError(Exception):
    """Base exception for task engine errors"""
    pass


class ValidationError(TasqError):
    """Input rejected before any mutation (missing title, due date, ...)"""
    pass


class ClassifierError(TasqError):
    """External classification failed or returned malformed data"""
    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(self.message)


class NotFoundError(TasqError):
    """Operation referenced an unknown task id"""
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' not found")


class PersistenceWriteError(TasqError):
    """Durable write failed after the in-memory mutation succeeded"""
    pass


class StoreCorruptedError(TasqError):
    """Durable store could not be read at startup"""
    pass


class InvalidTransitionError(TasqError):
    """Lifecycle event is not allowed from the current status"""
    pass


class ReviewBusyError(TasqError):
    """Review slot is occupied or a classification is already in flight"""
    pass


def handle_error(error: Exception) -> ErrorResponse:
    """
    Handle error and return user-friendly message

    Args:
        error: Exception to handle

    Returns:
        ErrorResponse with user-friendly message
    """
    if isinstance(error, ClassifierError):
        logger.warning(f"Classifier error: {error.message}")
        return ErrorResponse(
            message="AI analysis failed. Please try again or use Quick Create.",
            error_code="classifier_failed",
            retryable=True,
        )

    if isinstance(error, ValidationError):
        logger.info(f"Validation error: {error}")
        return ErrorResponse(
            message=f"Validation error: {str(error)}",
            error_code="validation_error",
        )

    if isinstance(error, NotFoundError):
        logger.info(str(error))
        return ErrorResponse(
            message=str(error),
            error_code="not_found",
            details={"id": error.task_id},
        )

    if isinstance(error, ReviewBusyError):
        return ErrorResponse(
            message=str(error),
            error_code="review_busy",
            retryable=True,
        )

    if isinstance(error, InvalidTransitionError):
        logger.warning(f"Invalid transition: {error}")
        return ErrorResponse(
            message=str(error),
            error_code="invalid_transition",
        )

    logger.error(f"Error occurred: {error}", exc_info=True)

    # Generic error message
    return ErrorResponse(
        message="Something went wrong. Please try again later.",
        error_code="internal_error",
    )


def format_error_message(error: Exception) -> str:
    """
    Format error message for user

    Args:
        error: Exception to format

    Returns:
        User-friendly error message
    """
    error_response = handle_error(error)
    return error_response.message
