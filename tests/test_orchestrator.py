"""
Tests for TrackerFlow and the component factory.

All flows run against in-memory storage unless a test asks for files,
in which case they land under tmp_path.
"""

import json
from datetime import date

import pytest

from habit_tracker.audit import AuditLogger
from habit_tracker.models.audit import AuditEvent, AuditEventType
from habit_tracker.orchestrator import TrackerFlow, create_app_components
from habit_tracker.services.storage import (
    COMPLETIONS_BLOB,
    TASKS_BLOB,
    AuditStorageInterface,
    CorruptStateError,
    InMemoryAuditStorage,
    InMemoryBlobStore,
    StorageError,
    StorageWriteError,
    TrackerRepository,
)


class FailingBlobStore(InMemoryBlobStore):
    """Reads fine, refuses every write."""

    def save_blob(self, name: str, payload: str) -> None:
        raise StorageWriteError(f"Failed to save blob {name}: disk full")


class FailingAuditStorage(AuditStorageInterface):
    def append_event(self, event: AuditEvent) -> bool:
        raise StorageError("audit file unavailable")

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        raise StorageError("audit file unavailable")


def _event_types(audit_storage: InMemoryAuditStorage) -> list[AuditEventType]:
    return [event.event_type for event in audit_storage.events]


def _saved(memory_store: InMemoryBlobStore) -> tuple[list, dict]:
    blobs = memory_store.blobs
    return json.loads(blobs[TASKS_BLOB]), json.loads(blobs[COMPLETIONS_BLOB])


class TestLifecycle:
    """Tests for loading and resetting."""

    def test_state_requires_load(self, memory_store):
        flow = TrackerFlow(TrackerRepository(memory_store))
        assert flow.is_loaded is False
        with pytest.raises(RuntimeError):
            _ = flow.state

    def test_load_is_audited(self, flow, audit_storage):
        assert flow.is_loaded
        assert _event_types(audit_storage) == [AuditEventType.STATE_LOADED]

    def test_load_existing_data(self, audit_storage):
        store = InMemoryBlobStore({
            TASKS_BLOB: json.dumps(["Exercise", "Read"]),
            COMPLETIONS_BLOB: json.dumps({"2024-03-01": [0, 1]}),
        })
        flow = TrackerFlow(TrackerRepository(store), AuditLogger(audit_storage))

        state = flow.load(current_month=2, current_year=2024)

        assert state.task_names == ["Exercise", "Read"]
        assert audit_storage.events[0].details["date_count"] == 1

    def test_corrupt_data_is_audited_then_reset(self, audit_storage):
        store = InMemoryBlobStore({
            TASKS_BLOB: json.dumps(["A"]),
            COMPLETIONS_BLOB: json.dumps({"2024-03-01": [3]}),
        })
        flow = TrackerFlow(TrackerRepository(store), AuditLogger(audit_storage))

        with pytest.raises(CorruptStateError):
            flow.load()

        assert _event_types(audit_storage) == [AuditEventType.STATE_LOAD_FAILED]
        assert flow.is_loaded is False

        state = flow.reset()

        assert state.tasks == []
        assert _saved(store) == ([], {})
        assert flow.is_loaded

    def test_reset_keeps_selected_month(self, flow):
        flow.add_task("A")
        flow.select_month(7)
        state = flow.reset()
        assert state.current_month == 7
        assert state.current_year == 2024
        assert state.tasks == []


class TestAddTask:
    """Tests for TrackerFlow.add_task."""

    def test_add_persists(self, flow, memory_store, audit_storage):
        task, message = flow.add_task("  Exercise ")

        assert task is not None
        assert task.name == "Exercise"
        assert message == 'Task "Exercise" added'
        assert _saved(memory_store) == (["Exercise"], {})
        assert AuditEventType.TASK_ADDED in _event_types(audit_storage)

    def test_empty_name_is_rejected_without_saving(self, flow, memory_store, audit_storage):
        task, message = flow.add_task("   ")

        assert task is None
        assert message == "Task name is required"
        assert memory_store.blobs == {}
        assert _event_types(audit_storage)[-1] == AuditEventType.TASK_REJECTED

    def test_limit(self, memory_store):
        flow = TrackerFlow(TrackerRepository(memory_store, max_tasks=2))
        flow.load(current_month=2, current_year=2024)
        flow.add_task("A")
        flow.add_task("B")

        task, message = flow.add_task("C")

        assert task is None
        assert message == "Maximum 2 tasks allowed"
        assert _saved(memory_store) == (["A", "B"], {})


class TestDeleteTask:
    """Tests for TrackerFlow.delete_task."""

    def test_delete_renumbers_saved_completions(self, flow, memory_store, audit_storage):
        for name in ("A", "B", "C"):
            flow.add_task(name)
        flow.toggle_completion(1, 1, 2, 2024, True)
        flow.toggle_completion(2, 1, 2, 2024, True)

        removed = flow.delete_task(1)

        assert removed.name == "B"
        assert _saved(memory_store) == (["A", "C"], {"2024-03-01": [1]})
        deleted = audit_storage.events[-1]
        assert deleted.event_type == AuditEventType.TASK_DELETED
        assert deleted.details["completions_removed"] == 1

    def test_delete_bad_index(self, flow):
        with pytest.raises(IndexError):
            flow.delete_task(0)


class TestToggleCompletion:
    """Tests for TrackerFlow.toggle_completion."""

    def test_toggle_persists(self, flow, memory_store):
        flow.add_task("A")

        assert flow.toggle_completion(0, 15, 2, 2024, True) is True
        assert _saved(memory_store)[1] == {"2024-03-15": [0]}

        assert flow.toggle_completion(0, 15, 2, 2024, False) is True
        assert _saved(memory_store)[1] == {}

    def test_noop_toggle_still_audited(self, flow, audit_storage):
        flow.add_task("A")
        assert flow.toggle_completion(0, 2, 2, 2024, False) is False

        toggled = audit_storage.events[-1]
        assert toggled.event_type == AuditEventType.COMPLETION_TOGGLED
        assert toggled.details["changed"] is False

    def test_invalid_day(self, flow):
        flow.add_task("A")
        with pytest.raises(ValueError):
            flow.toggle_completion(0, 30, 1, 2024, True)


class TestSelectMonth:
    """Tests for TrackerFlow.select_month."""

    def test_select_month_is_not_persisted(self, flow, memory_store, audit_storage):
        flow.select_month(5)

        assert flow.state.current_month == 5
        assert memory_store.blobs == {}
        assert _event_types(audit_storage)[-1] == AuditEventType.MONTH_SELECTED

    def test_select_month_out_of_range(self, flow):
        with pytest.raises(ValueError):
            flow.select_month(12)
        assert flow.state.current_month == 2


class TestDerivedViews:
    """Tests for progress and grid through the flow."""

    def test_progress_and_grid(self, flow):
        flow.add_task("A")
        flow.add_task("B")
        flow.toggle_completion(0, 5, 2, 2024, True)

        progress = flow.progress(today=date(2024, 3, 5))
        grid = flow.grid()

        assert progress.month.completed == 1
        assert progress.month.total == 62
        assert progress.day.percentage == 50
        assert grid.rows[0].cells[4].checked is True


class TestFailures:
    """Tests for storage failures."""

    def test_save_failure_is_raised_and_audited(self, audit_storage):
        flow = TrackerFlow(TrackerRepository(FailingBlobStore()), AuditLogger(audit_storage))
        flow.load(current_month=2, current_year=2024)

        with pytest.raises(StorageWriteError):
            flow.add_task("A")

        assert AuditEventType.SAVE_FAILED in _event_types(audit_storage)

    def test_audit_storage_failure_does_not_block(self, memory_store):
        audit_logger = AuditLogger(FailingAuditStorage())
        flow = TrackerFlow(TrackerRepository(memory_store), audit_logger)
        flow.load(current_month=2, current_year=2024)

        task, _ = flow.add_task("A")

        assert task is not None
        assert audit_logger.recent_events() == []

    def test_audit_logger_reports_storage_failure(self):
        audit_logger = AuditLogger(FailingAuditStorage())
        event = AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            description="System error: test",
        )
        assert audit_logger.log(event) is False
        assert event.correlation_id == audit_logger.correlation_id

    def test_audit_logger_without_storage(self):
        audit_logger = AuditLogger()
        event = AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            description="Tracker state saved",
        )
        assert audit_logger.log(event) is True
        assert audit_logger.recent_events() == []


class TestCreateAppComponents:
    """Tests for the factory."""

    def test_file_storage(self, tmp_path):
        flow, store = create_app_components()
        flow.load(current_month=2, current_year=2024)
        flow.add_task("Read")

        data_dir = tmp_path / "data"
        assert store is not None
        assert store.data_dir == data_dir
        assert json.loads((data_dir / "trackerTasks.json").read_text()) == ["Read"]
        assert (data_dir / "trackerCompletions.json").exists()
        assert (data_dir / "audit.jsonl").exists()

        recent = flow.audit_logger.recent_events(limit=1)
        assert recent[0].event_type == AuditEventType.TASK_ADDED

    def test_reload_from_files(self):
        flow, _ = create_app_components()
        flow.load(current_month=2, current_year=2024)
        flow.add_task("Read")
        flow.toggle_completion(0, 3, 2, 2024, True)

        reloaded, _ = create_app_components()
        state = reloaded.load(current_month=2, current_year=2024)

        assert state.task_names == ["Read"]
        assert state.completion_indices() == {"2024-03-03": [0]}

    def test_memory_only(self, tmp_path):
        flow, store = create_app_components(use_storage=False)
        flow.load()
        flow.add_task("Read")

        assert store is None
        assert not (tmp_path / "data").exists()

    def test_max_tasks_from_settings(self, monkeypatch):
        monkeypatch.setenv("TRACKER_MAX_TASKS", "1")
        flow, _ = create_app_components(use_storage=False)
        flow.load()
        flow.add_task("A")

        task, message = flow.add_task("B")

        assert task is None
        assert message == "Maximum 1 tasks allowed"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
