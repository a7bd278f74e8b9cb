"""
Classifier result model
"""

from typing import Any
from pydantic import BaseModel, field_validator
from tasq.models.taxonomy import Level


class ClassificationResult(BaseModel):
    """Urgency/importance assessment returned by the classifier"""

    urgency: Level
    importance: Level
    justification: str

    @field_validator("urgency", "importance", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> Any:
        # Models sometimes answer "high" or "HIGH"
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("justification", mode="before")
    @classmethod
    def validate_justification(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Justification is required")
        return value.strip()
