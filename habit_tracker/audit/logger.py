"""
Audit Logger

DESIGN DECISION: Every tracker action is logged.
This provides:
1. Traceability of task and completion changes
2. Debugging capability when stored data is rejected
3. A user-visible history of recent actions

The audit logger:
- Gracefully handles failures (a broken audit file never blocks a mutation)
- Supports correlation IDs to group the events of one session
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from habit_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from habit_tracker.models.validation import ValidationIssue
from habit_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        correlation_id: Optional[UUID] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
            correlation_id: Session id attached to every event.
                    A fresh one is created if omitted.
        """
        self._storage = storage
        self._correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger(__name__)

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        if event.correlation_id is None:
            event.correlation_id = self._correlation_id

        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent persisted events, newest first (empty without storage)."""
        if not self._storage:
            return []
        try:
            return self._storage.get_recent_events(limit)
        except Exception as e:
            self._logger.error("audit_read_failed", error=str(e))
            return []

    def log_state_loaded(self, task_count: int, date_count: int, warnings: list[str]) -> None:
        """Log a successful load."""
        self.log(AuditEventBuilder.state_loaded(
            task_count=task_count,
            date_count=date_count,
            warnings=warnings,
        ))

    def log_state_load_failed(self, error_message: str, issues: list[ValidationIssue]) -> None:
        """Log stored data being rejected."""
        self.log(AuditEventBuilder.state_load_failed(
            error_message=error_message,
            issues=[issue.model_dump() for issue in issues],
        ))

    def log_state_saved(self, task_count: int, date_count: int) -> None:
        self.log(AuditEventBuilder.state_saved(
            task_count=task_count,
            date_count=date_count,
        ))

    def log_save_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(error_message=error_message))

    def log_task_added(self, task_id: UUID, name: str, index: int) -> None:
        """Log a task being added."""
        self.log(AuditEventBuilder.task_added(
            task_id=task_id,
            name=name,
            index=index,
        ))

    def log_task_rejected(self, name: str, reason: str) -> None:
        """Log an add_task that was refused."""
        self.log(AuditEventBuilder.task_rejected(name=name, reason=reason))

    def log_task_deleted(
        self,
        task_id: UUID,
        name: str,
        index: int,
        completions_removed: int,
    ) -> None:
        """Log a task deletion."""
        self.log(AuditEventBuilder.task_deleted(
            task_id=task_id,
            name=name,
            index=index,
            completions_removed=completions_removed,
        ))

    def log_completion_toggled(
        self,
        task_id: UUID,
        date_key: str,
        checked: bool,
        changed: bool,
    ) -> None:
        self.log(AuditEventBuilder.completion_toggled(
            task_id=task_id,
            date_key=date_key,
            checked=checked,
            changed=changed,
        ))

    def log_month_selected(self, month: int, year: int) -> None:
        self.log(AuditEventBuilder.month_selected(month=month, year=year))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One is created per tracker session.
    """
    return uuid4()
