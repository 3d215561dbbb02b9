"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
JSON files on disk back the app; in-memory stores back the tests.
"""

from habit_tracker.services.storage.interface import (
    AuditStorageInterface,
    BlobStoreInterface,
    CorruptStateError,
    StorageError,
    StorageWriteError,
)
from habit_tracker.services.storage.json_file import (
    JsonFileBlobStore,
    JsonLinesAuditStorage,
)
from habit_tracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBlobStore,
)
from habit_tracker.services.storage.repository import (
    COMPLETIONS_BLOB,
    TASKS_BLOB,
    TrackerRepository,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BlobStoreInterface",
    # Exceptions
    "CorruptStateError",
    "StorageError",
    "StorageWriteError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryBlobStore",
    "JsonFileBlobStore",
    "JsonLinesAuditStorage",
    # Repository
    "COMPLETIONS_BLOB",
    "TASKS_BLOB",
    "TrackerRepository",
]
