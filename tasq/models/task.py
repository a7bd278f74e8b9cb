"""
Task model
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from tasq.config.constants import DEFAULT_JUSTIFICATION, TASK_TITLE_MAX_LENGTH
from tasq.models.taxonomy import Level
from tasq.utils.date_utils import get_current_datetime, parse_timestamp, resolve_complete_by


class TaskStatus(str, Enum):
    """Task lifecycle status"""
    DRAFT = "Draft"  # Form in progress, never persisted
    PENDING_REVIEW = "Pending Review"
    ACCEPTED = "Accepted"
    COMPLETED = "Completed"


ON_BOARD_STATUSES = (TaskStatus.ACCEPTED, TaskStatus.COMPLETED)


def new_task_id() -> str:
    return uuid.uuid4().hex


def _clean_title(value: Any) -> str:
    if value is None:
        raise ValueError("Title is required")
    title = str(value).strip()
    if not title:
        raise ValueError("Title is required")
    if len(title) > TASK_TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be at most {TASK_TITLE_MAX_LENGTH} characters")
    return title


def _parse_optional_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return parse_timestamp(value)


class Task(BaseModel):
    """Task model"""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_task_id)
    title: str
    description: str = ""
    user_urgency: Optional[Level] = Field(None, alias="userUrgency")
    user_importance: Optional[Level] = Field(None, alias="userImportance")
    ai_urgency: Optional[Level] = Field(None, alias="aiUrgency")
    ai_importance: Optional[Level] = Field(None, alias="aiImportance")
    justification: str = DEFAULT_JUSTIFICATION
    complete_by: datetime = Field(..., alias="completeBy")
    status: TaskStatus = TaskStatus.DRAFT
    created_at: datetime = Field(default_factory=get_current_datetime, alias="createdAt")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, value: Any) -> str:
        return _clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, value: Any) -> str:
        return value or ""

    @field_validator("complete_by", "created_at", mode="before")
    @classmethod
    def validate_timestamps(cls, value: Any) -> datetime:
        if value is None:
            raise ValueError("Timestamp is required")
        return parse_timestamp(value)

    @model_validator(mode="after")
    def check_assessment(self) -> "Task":
        if self.status in ON_BOARD_STATUSES and (self.ai_urgency is None or self.ai_importance is None):
            raise ValueError(f"A task in status '{self.status.value}' needs both AI urgency and importance")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def to_record(self) -> Dict[str, Any]:
        """Serialize for storage / API (camelCase, absent optionals as null)"""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Task":
        return cls.model_validate(record)


class TaskDraft(BaseModel):
    """Entry form input, before any task exists"""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    user_urgency: Optional[Level] = Field(None, alias="userUrgency")
    user_importance: Optional[Level] = Field(None, alias="userImportance")
    complete_by: Optional[datetime] = Field(None, alias="completeBy")
    days_from_now: Optional[int] = Field(None, alias="daysFromNow")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, value: Any) -> str:
        return _clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, value: Any) -> str:
        return value or ""

    @field_validator("complete_by", mode="before")
    @classmethod
    def validate_complete_by(cls, value: Any) -> Optional[datetime]:
        return _parse_optional_timestamp(value)

    @model_validator(mode="after")
    def resolve_due_date(self) -> "TaskDraft":
        self.complete_by = resolve_complete_by(self.complete_by, self.days_from_now)
        self.days_from_now = None
        return self


class PartialUpdate(BaseModel):
    """Base for partial edits: only explicitly provided fields are applied"""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    NON_NULLABLE: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self) -> "PartialUpdate":
        for name in self.model_fields_set & self.NON_NULLABLE:
            if getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be cleared")
        return self

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        if "description" in data and data["description"] is None:
            data["description"] = ""
        return data


class ReviewEdits(PartialUpdate):
    """Edits made to a pending task while it awaits review"""

    NON_NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"complete_by"})

    description: Optional[str] = None
    user_urgency: Optional[Level] = Field(None, alias="userUrgency")
    user_importance: Optional[Level] = Field(None, alias="userImportance")
    complete_by: Optional[datetime] = Field(None, alias="completeBy")

    @field_validator("complete_by", mode="before")
    @classmethod
    def validate_complete_by(cls, value: Any) -> Optional[datetime]:
        return _parse_optional_timestamp(value)


class TaskPatch(PartialUpdate):
    """Partial update of a stored task"""

    NON_NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"title", "complete_by", "justification"})

    title: Optional[str] = None
    description: Optional[str] = None
    user_urgency: Optional[Level] = Field(None, alias="userUrgency")
    user_importance: Optional[Level] = Field(None, alias="userImportance")
    complete_by: Optional[datetime] = Field(None, alias="completeBy")
    justification: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return _clean_title(value)

    @field_validator("complete_by", mode="before")
    @classmethod
    def validate_complete_by(cls, value: Any) -> Optional[datetime]:
        return _parse_optional_timestamp(value)
