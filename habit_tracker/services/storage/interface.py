"""
Abstract Storage Interface

DESIGN DECISION: Storage is an abstract key-value blob store.
The tracker persists exactly two blobs (task names and the completion
map) and overwrites them wholesale after every mutation. This allows us to:
1. Use JSON files on disk for the app
2. Use in-memory storage for testing
3. Keep the tracker state decoupled from where bytes end up

The audit trail gets its own append-only interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from habit_tracker.models.audit import AuditEvent
from habit_tracker.models.validation import ValidationIssue


class BlobStoreInterface(ABC):
    """
    Abstract interface for named blob storage.

    Blobs are opaque strings (the tracker writes JSON into them).
    """

    @abstractmethod
    def load_blob(self, name: str) -> Optional[str]:
        """
        Read a blob.

        Args:
            name: Blob name

        Returns:
            The stored string, or None if the blob does not exist

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save_blob(self, name: str, payload: str) -> None:
        """
        Overwrite a blob.

        Args:
            name: Blob name
            payload: New content

        Raises:
            StorageWriteError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageWriteError(StorageError):
    """A blob could not be written."""
    pass


class CorruptStateError(StorageError):
    """
    Stored data is present but does not match the expected schema.

    Carries the validation issues that caused the rejection.
    """

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []
