"""
Tests for Habit Tracker models

Test strategy:
1. Unit tests for individual components (models, validators)
2. Flow tests against in-memory storage
3. File storage tests only ever write under tmp_path
"""

import json
from uuid import uuid4

import pytest

from habit_tracker.models.tracker import (
    GridCell,
    GridRow,
    MonthGrid,
    ProgressStats,
    Task,
)
from habit_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from habit_tracker.models.validation import ValidationIssue, ValidationResult


class TestTrackerModels:
    """Tests for tracker-related Pydantic models."""

    def test_task_creation(self):
        """Test Task model creation."""
        task = Task(name="Exercise")
        assert task.name == "Exercise"
        assert task.id is not None

    def test_task_strips_whitespace(self):
        """Test that whitespace is stripped from task names."""
        task = Task(name="  Read  ")
        assert task.name == "Read"

    def test_task_rejects_empty_name(self):
        """Test that an empty task name is rejected."""
        with pytest.raises(ValueError):
            Task(name="   ")

    def test_progress_stats_percentage_bounds(self):
        """Test percentage must be within 0-100."""
        with pytest.raises(ValueError):
            ProgressStats(completed=1, total=1, percentage=101)

    def test_grid_row_completed_count(self):
        """Test GridRow counts checked cells."""
        row = GridRow(
            task_index=0,
            task_id=uuid4(),
            task_name="A",
            cells=[
                GridCell(day=1, date_key="2024-03-01", checked=True),
                GridCell(day=2, date_key="2024-03-02"),
                GridCell(day=3, date_key="2024-03-03", checked=True),
            ],
        )
        assert row.completed_count == 2

    def test_month_grid_is_empty(self):
        """Test a grid without rows is empty."""
        grid = MonthGrid(month=0, year=2024, title="January 2024")
        assert grid.is_empty


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TASK_ADDED,
            description="Task added: Exercise",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent conversion to log dict."""
        entity_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.TASK_DELETED,
            entity_type="task",
            entity_id=entity_id,
            description="Task deleted: Read",
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "task_deleted"
        assert log_dict["entity_id"] == str(entity_id)
        assert log_dict["correlation_id"] is None

    def test_audit_event_json_line(self):
        """Test an event survives the JSON-lines format."""
        event = AuditEventBuilder.completion_toggled(
            task_id=uuid4(),
            date_key="2024-03-01",
            checked=True,
            changed=True,
            correlation_id=uuid4(),
        )
        line = event.to_json_line()
        assert "\n" not in line
        assert json.loads(line)["details"]["date_key"] == "2024-03-01"

        parsed = AuditEvent.from_json_line(line)
        assert parsed.event_id == event.event_id
        assert parsed.correlation_id == event.correlation_id
        assert parsed.timestamp == event.timestamp

    def test_audit_event_builder_task_added(self):
        """Test AuditEventBuilder for task added."""
        task_id = uuid4()
        correlation_id = uuid4()

        event = AuditEventBuilder.task_added(
            task_id=task_id,
            name="Exercise",
            index=3,
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.TASK_ADDED
        assert event.entity_id == task_id
        assert event.correlation_id == correlation_id
        assert event.details["index"] == 3
        assert event.is_user_action is True

    def test_audit_event_builder_task_rejected(self):
        """Test a rejected task is a warning."""
        event = AuditEventBuilder.task_rejected(
            name="",
            reason="Task name is required",
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["reason"] == "Task name is required"

    def test_audit_event_builder_state_loaded_with_warnings(self):
        """Test load warnings raise the severity."""
        clean = AuditEventBuilder.state_loaded(2, 5, [])
        noisy = AuditEventBuilder.state_loaded(2, 5, ["trackerTasks: unreadable JSON"])
        assert clean.severity == AuditSeverity.INFO
        assert noisy.severity == AuditSeverity.WARNING

    def test_audit_event_builder_completion_toggled(self):
        """Test the toggle description names the action."""
        event = AuditEventBuilder.completion_toggled(
            task_id=uuid4(),
            date_key="2024-03-02",
            checked=False,
            changed=False,
        )
        assert event.description == "Task unchecked for 2024-03-02"
        assert event.details["changed"] is False


class TestValidationResult:
    """Tests for validation result model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="completions[2024-03-01]",
                    issue_type="out_of_range",
                    message="Task indices [4] do not exist",
                    severity="error",
                ),
            ],
        )

        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test result with only warnings."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="completions[2024-03-01]",
                    issue_type="duplicate_index",
                    message="Duplicate task indices were collapsed",
                    severity="warning",
                ),
            ],
        )

        assert result.has_errors is False
        assert result.error_count == 0

    def test_validation_issue_severity(self):
        """Test severity is restricted to known levels."""
        with pytest.raises(ValueError):
            ValidationIssue(
                field="tasks",
                issue_type="wrong_type",
                message="bad",
                severity="fatal",
            )


class TestEventTypes:
    """Tests for the audit event catalogue."""

    def test_all_event_types_exist(self):
        """Test all expected event types are defined."""
        expected = [
            "STATE_LOADED", "STATE_LOAD_FAILED", "STATE_SAVED", "SAVE_FAILED",
            "TASK_ADDED", "TASK_REJECTED", "TASK_DELETED",
            "COMPLETION_TOGGLED", "MONTH_SELECTED", "SYSTEM_ERROR",
        ]
        for name in expected:
            assert hasattr(AuditEventType, name)

    def test_event_type_values(self):
        """Test event type string values."""
        assert AuditEventType.COMPLETION_TOGGLED.value == "completion_toggled"
        assert AuditEventType.STATE_LOAD_FAILED.value == "state_load_failed"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
