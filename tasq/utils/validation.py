"""
Input validation helpers
"""

from typing import Any, Type, TypeVar, Union
from pydantic import BaseModel, ValidationError as PydanticValidationError
from tasq.utils.error_handler import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def describe_errors(error: PydanticValidationError) -> str:
    """Flatten pydantic errors into one readable line"""
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        message = err.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def validate_model(model_cls: Type[ModelT], data: Union[ModelT, dict, None]) -> ModelT:
    """
    Build (or pass through) a model, converting pydantic errors to ValidationError

    Args:
        model_cls: Model class to validate against
        data: Model instance or raw mapping

    Returns:
        Validated model instance

    Raises:
        ValidationError: If the data is invalid
    """
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e)) from e


def apply_changes(model: ModelT, **changes: Any) -> ModelT:
    """Copy a model with changes applied and re-validated"""
    data = model.model_dump()
    data.update(changes)
    return validate_model(type(model), data)
