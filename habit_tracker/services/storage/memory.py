"""In-memory storage implementations (tests and storage-less runs)."""

from typing import Optional

from habit_tracker.models.audit import AuditEvent
from habit_tracker.services.storage.interface import (
    AuditStorageInterface,
    BlobStoreInterface,
)


class InMemoryBlobStore(BlobStoreInterface):
    """Blob store holding everything in a dict."""

    def __init__(self, blobs: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(blobs or {})

    @property
    def blobs(self) -> dict[str, str]:
        """Copy of the stored blobs."""
        return dict(self._blobs)

    def load_blob(self, name: str) -> Optional[str]:
        return self._blobs.get(name)

    def save_blob(self, name: str, payload: str) -> None:
        self._blobs[name] = payload


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit storage holding events in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events[-limit:])) if limit > 0 else []
