"""
Tests for task models and date resolution
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from pydantic import ValidationError as PydanticValidationError
from tasq.config.constants import DEFAULT_JUSTIFICATION
from tasq.models.classification import ClassificationResult
from tasq.models.task import ReviewEdits, Task, TaskDraft, TaskPatch, TaskStatus
from tasq.models.taxonomy import Level
from tasq.utils.date_utils import parse_timestamp, resolve_complete_by
from tasq.utils.error_handler import ValidationError
from tasq.utils.validation import validate_model


class TestTaskDraft:
    """Tests for entry form validation"""

    def test_valid_draft(self, draft, due_date):
        result = TaskDraft.model_validate(draft)
        assert result.title == "Pay rent"
        assert result.user_urgency == Level.HIGH
        assert result.complete_by == due_date

    def test_title_is_trimmed(self, draft):
        draft["title"] = "  Pay rent  "
        assert TaskDraft.model_validate(draft).title == "Pay rent"

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_missing_title_rejected(self, draft, title):
        draft["title"] = title
        with pytest.raises(ValidationError, match="Title is required"):
            validate_model(TaskDraft, draft)

    def test_missing_due_date_rejected(self, draft):
        del draft["completeBy"]
        with pytest.raises(ValidationError, match="Due date is required"):
            validate_model(TaskDraft, draft)

    def test_days_from_now(self, draft):
        """daysFromNow resolves to an absolute due date"""
        del draft["completeBy"]
        draft["daysFromNow"] = 3
        before = datetime.now(timezone.utc)
        result = TaskDraft.model_validate(draft)
        assert result.days_from_now is None
        assert before + timedelta(days=3) <= result.complete_by
        assert result.complete_by <= datetime.now(timezone.utc) + timedelta(days=3)

    def test_days_from_now_must_be_positive(self, draft):
        del draft["completeBy"]
        draft["daysFromNow"] = 0
        with pytest.raises(ValidationError, match="at least 1"):
            validate_model(TaskDraft, draft)

    def test_both_due_date_forms_rejected(self, draft):
        draft["daysFromNow"] = 2
        with pytest.raises(ValidationError, match="not both"):
            validate_model(TaskDraft, draft)

    def test_optional_fields_default_to_absent(self):
        result = TaskDraft.model_validate({"title": "Read book", "completeBy": "2030-02-01"})
        assert result.description == ""
        assert result.user_urgency is None
        assert result.user_importance is None

    def test_invalid_level_rejected(self, draft):
        draft["userUrgency"] = "Extreme"
        with pytest.raises(ValidationError):
            validate_model(TaskDraft, draft)


class TestTask:
    """Tests for the Task model"""

    def test_defaults(self, due_date):
        task = Task(title="Draft", complete_by=due_date)
        assert task.status == TaskStatus.DRAFT
        assert task.description == ""
        assert task.justification == DEFAULT_JUSTIFICATION
        assert task.created_at.tzinfo is not None
        assert len(task.id) == 32

    def test_ids_are_unique(self, due_date):
        ids = {Task(title="t", complete_by=due_date).id for _ in range(50)}
        assert len(ids) == 50

    def test_on_board_task_requires_ai_levels(self, due_date):
        with pytest.raises(PydanticValidationError):
            Task(title="t", complete_by=due_date, status=TaskStatus.ACCEPTED)

    def test_record_uses_camel_case_and_nulls(self, due_date):
        task = Task(
            title="Pay rent",
            complete_by=due_date,
            ai_urgency=Level.HIGH,
            ai_importance=Level.LOW,
            status=TaskStatus.ACCEPTED,
        )
        record = task.to_record()
        assert record["completeBy"] == "2030-01-15T00:00:00Z"
        assert record["aiUrgency"] == "High"
        assert record["userUrgency"] is None
        assert record["status"] == "Accepted"

    def test_from_record_restores_task(self, due_date):
        task = Task(
            title="Pay rent",
            complete_by=due_date,
            ai_urgency=Level.MEDIUM,
            ai_importance=Level.HIGH,
            status=TaskStatus.COMPLETED,
        )
        assert Task.from_record(task.to_record()) == task


class TestPartialUpdates:
    """Tests for ReviewEdits and TaskPatch"""

    def test_only_set_fields_are_changes(self):
        patch = TaskPatch.model_validate({"title": "New title"})
        assert patch.changes() == {"title": "New title"}

    @pytest.mark.parametrize("payload", [
        {"status": "Completed"},
        {"aiUrgency": "Low"},
        {"title": "ok", "unknown": 1},
    ])
    def test_unknown_fields_rejected(self, payload):
        """Status and AI levels change only through their own operations"""
        with pytest.raises(ValidationError, match="Extra inputs are not permitted"):
            validate_model(TaskPatch, payload)

    def test_review_edits_reject_title(self):
        with pytest.raises(ValidationError):
            validate_model(ReviewEdits, {"title": "Renamed"})

    def test_clearing_description(self):
        patch = TaskPatch.model_validate({"description": None})
        assert patch.changes() == {"description": ""}

    def test_clearing_optional_level(self):
        patch = TaskPatch.model_validate({"userUrgency": None})
        assert patch.changes() == {"user_urgency": None}

    @pytest.mark.parametrize("field", ["title", "completeBy", "justification"])
    def test_required_fields_cannot_be_cleared(self, field):
        with pytest.raises(ValidationError, match="cannot be cleared"):
            validate_model(TaskPatch, {field: None})

    def test_review_edits_due_date_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            validate_model(ReviewEdits, {"completeBy": None})

    def test_empty_edits(self):
        assert validate_model(ReviewEdits, None).changes() == {}


class TestClassificationResult:

    def test_levels_are_normalized(self):
        result = ClassificationResult.model_validate({
            "urgency": " high",
            "importance": "LOW",
            "justification": "  Due tomorrow.  ",
        })
        assert result.urgency == Level.HIGH
        assert result.importance == Level.LOW
        assert result.justification == "Due tomorrow."

    @pytest.mark.parametrize("payload", [
        {"urgency": "High", "importance": "Low"},
        {"urgency": "High", "importance": "Low", "justification": "  "},
        {"urgency": "Urgent", "importance": "Low", "justification": "x"},
    ])
    def test_malformed_result_rejected(self, payload):
        with pytest.raises(PydanticValidationError):
            ClassificationResult.model_validate(payload)


class TestDateUtils:

    def test_date_only_is_midnight_utc(self):
        assert parse_timestamp("2030-01-15") == datetime(2030, 1, 15, tzinfo=timezone.utc)
        assert parse_timestamp(date(2030, 1, 15)) == datetime(2030, 1, 15, tzinfo=timezone.utc)

    def test_zulu_suffix(self):
        assert parse_timestamp("2030-01-15T10:30:00Z") == datetime(2030, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_offset_is_normalized_to_utc(self):
        assert parse_timestamp("2030-01-15T12:00:00+02:00") == datetime(2030, 1, 15, 10, tzinfo=timezone.utc)

    def test_alternate_date_format(self):
        assert parse_timestamp("15.01.2030") == datetime(2030, 1, 15, tzinfo=timezone.utc)

    def test_unparseable(self):
        with pytest.raises(ValueError):
            parse_timestamp("next tuesday")

    def test_resolve_from_offset(self):
        now = datetime(2030, 1, 1, 9, tzinfo=timezone.utc)
        assert resolve_complete_by(days_from_now=2, now=now) == datetime(2030, 1, 3, 9, tzinfo=timezone.utc)
