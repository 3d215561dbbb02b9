"""
Audit Models for Habit Tracker

Every mutation, load and save is recorded as an audit event.
This provides:
1. A history of what the user changed and when
2. Debugging information when stored data turns out to be corrupt
3. Ability to reconstruct how the current state came about

Audit logs are append-only.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Lifecycle
    STATE_LOADED = "state_loaded"
    STATE_LOAD_FAILED = "state_load_failed"
    STATE_SAVED = "state_saved"
    SAVE_FAILED = "save_failed"

    # Tasks
    TASK_ADDED = "task_added"
    TASK_REJECTED = "task_rejected"
    TASK_DELETED = "task_deleted"

    # Completions
    COMPLETION_TOGGLED = "completion_toggled"

    # Navigation
    MONTH_SELECTED = "month_selected"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'task', 'completion', 'state')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - one tracker session
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one tracker session)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as a single line for the JSON-lines audit file."""
        return json.dumps(self.to_log_dict(), ensure_ascii=False)

    @classmethod
    def from_json_line(cls, line: str) -> 'AuditEvent':
        """Parse a line written by to_json_line."""
        data = json.loads(line)
        return cls(
            event_id=UUID(data["event_id"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            event_type=AuditEventType(data["event_type"]),
            severity=AuditSeverity(data["severity"]),
            entity_type=data.get("entity_type"),
            entity_id=UUID(data["entity_id"]) if data.get("entity_id") else None,
            correlation_id=UUID(data["correlation_id"]) if data.get("correlation_id") else None,
            description=data["description"],
            details=data.get("details") or {},
            error_message=data.get("error_message"),
            is_user_action=bool(data.get("is_user_action", False)),
        )


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.task_added(task_id, name, index, correlation_id)
        event = AuditEventBuilder.month_selected(month, year, correlation_id)
    """

    @staticmethod
    def state_loaded(
        task_count: int,
        date_count: int,
        warnings: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            severity=AuditSeverity.WARNING if warnings else AuditSeverity.INFO,
            entity_type="state",
            correlation_id=correlation_id,
            description=f"Tracker loaded with {task_count} tasks and {date_count} dates",
            details={
                "task_count": task_count,
                "date_count": date_count,
                "warnings": warnings,
            },
        )

    @staticmethod
    def state_load_failed(
        error_message: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            correlation_id=correlation_id,
            description=f"Stored tracker data rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            error_message=error_message,
        )

    @staticmethod
    def state_saved(
        task_count: int,
        date_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="state",
            correlation_id=correlation_id,
            description="Tracker state saved",
            details={
                "task_count": task_count,
                "date_count": date_count,
            },
        )

    @staticmethod
    def save_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            correlation_id=correlation_id,
            description="Failed to save tracker state",
            error_message=error_message,
        )

    @staticmethod
    def task_added(
        task_id: UUID,
        name: str,
        index: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TASK_ADDED,
            entity_type="task",
            entity_id=task_id,
            correlation_id=correlation_id,
            description=f"Task added: {name}",
            details={
                "name": name,
                "index": index,
            },
            is_user_action=True,
        )

    @staticmethod
    def task_rejected(
        name: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TASK_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="task",
            correlation_id=correlation_id,
            description=f"Task rejected: {reason}",
            details={
                "name": name,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def task_deleted(
        task_id: UUID,
        name: str,
        index: int,
        completions_removed: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TASK_DELETED,
            entity_type="task",
            entity_id=task_id,
            correlation_id=correlation_id,
            description=f"Task deleted: {name}",
            details={
                "name": name,
                "index": index,
                "completions_removed": completions_removed,
            },
            is_user_action=True,
        )

    @staticmethod
    def completion_toggled(
        task_id: UUID,
        date_key: str,
        checked: bool,
        changed: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        action = "checked" if checked else "unchecked"
        return AuditEvent(
            event_type=AuditEventType.COMPLETION_TOGGLED,
            entity_type="completion",
            entity_id=task_id,
            correlation_id=correlation_id,
            description=f"Task {action} for {date_key}",
            details={
                "date_key": date_key,
                "checked": checked,
                "changed": changed,
            },
            is_user_action=True,
        )

    @staticmethod
    def month_selected(
        month: int,
        year: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_SELECTED,
            severity=AuditSeverity.DEBUG,
            entity_type="state",
            correlation_id=correlation_id,
            description=f"Month selected: {month + 1:02d}/{year}",
            details={
                "month": month,
                "year": year,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
