"""Shared fixtures. Nothing here touches the real filesystem outside tmp_path."""

import pytest

from habit_tracker.audit import AuditLogger
from habit_tracker.config import get_settings
from habit_tracker.models.tracker import TrackerState
from habit_tracker.orchestrator import TrackerFlow
from habit_tracker.services.storage import (
    InMemoryAuditStorage,
    InMemoryBlobStore,
    TrackerRepository,
)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the data directory at tmp_path and reset cached settings."""
    monkeypatch.setenv("TRACKER_STORAGE_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def abc_state() -> TrackerState:
    """Tasks A, B, C tracked in March 2024."""
    return TrackerState.from_positional(
        ["A", "B", "C"],
        {},
        current_month=2,
        current_year=2024,
    )


@pytest.fixture
def memory_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def flow(memory_store, audit_storage) -> TrackerFlow:
    """A loaded flow over empty in-memory storage, March 2024 selected."""
    tracker = TrackerFlow(
        repository=TrackerRepository(memory_store),
        audit_logger=AuditLogger(audit_storage),
    )
    tracker.load(current_month=2, current_year=2024)
    return tracker
