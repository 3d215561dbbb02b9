"""
Data Models Package

This package contains all Pydantic models used in the Habit Tracker.
"""

from habit_tracker.models.tracker import (
    DayHeader,
    GridCell,
    GridRow,
    MonthGrid,
    Progress,
    ProgressStats,
    Task,
    TrackerState,
)
from habit_tracker.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from habit_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Tracker models
    "DayHeader",
    "GridCell",
    "GridRow",
    "MonthGrid",
    "Progress",
    "ProgressStats",
    "Task",
    "TrackerState",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
