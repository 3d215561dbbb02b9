"""Services package."""

from habit_tracker.services.storage import (
    AuditStorageInterface,
    BlobStoreInterface,
    CorruptStateError,
    InMemoryAuditStorage,
    InMemoryBlobStore,
    JsonFileBlobStore,
    JsonLinesAuditStorage,
    StorageError,
    StorageWriteError,
    TrackerRepository,
)

__all__ = [
    "AuditStorageInterface",
    "BlobStoreInterface",
    "CorruptStateError",
    "InMemoryAuditStorage",
    "InMemoryBlobStore",
    "JsonFileBlobStore",
    "JsonLinesAuditStorage",
    "StorageError",
    "StorageWriteError",
    "TrackerRepository",
]
