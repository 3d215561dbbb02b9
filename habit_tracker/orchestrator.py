"""
Main Orchestrator for Habit Tracker

This module ties together state, storage, progress and auditing, and
defines the session lifecycle:
1. Load (blobs -> validate -> TrackerState)
2. Mutate (add / delete / toggle) -> persist -> audit
3. Derive (progress, month grid) for the view layer

DESIGN DECISION: TrackerFlow is the only owner of the TrackerState.
The view layer calls its operations and re-renders from the derived
models; it never mutates state directly.
"""

from datetime import date
from typing import Optional

import structlog

from habit_tracker.audit import AuditLogger
from habit_tracker.calendar_utils import date_key
from habit_tracker.config import get_settings
from habit_tracker.grid import build_month_grid
from habit_tracker.models.tracker import MonthGrid, Progress, Task, TrackerState
from habit_tracker.progress import calculate_progress
from habit_tracker.services.storage import (
    CorruptStateError,
    InMemoryBlobStore,
    JsonFileBlobStore,
    JsonLinesAuditStorage,
    StorageError,
    TrackerRepository,
)


logger = structlog.get_logger(__name__)


class TrackerFlow:
    """
    Owns one tracker session.

    Flow:
    1. load() once at startup
    2. add_task / delete_task / toggle_completion, each persisted in full
    3. select_month to navigate (not persisted)
    4. progress() / grid() after every change to re-render
    """

    def __init__(
        self,
        repository: TrackerRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._audit_logger = audit_logger
        self._state: Optional[TrackerState] = None

    @property
    def state(self) -> TrackerState:
        """The loaded state. Raises RuntimeError before load()."""
        if self._state is None:
            raise RuntimeError("Tracker state not loaded; call load() first")
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def load(
        self,
        current_month: Optional[int] = None,
        current_year: Optional[int] = None,
    ) -> TrackerState:
        """
        Load state from storage.

        Raises:
            CorruptStateError: Stored data failed validation (audited)
            StorageError: Storage could not be read (audited)
        """
        try:
            state, warnings = self._repository.load(
                current_month=current_month,
                current_year=current_year,
            )
        except CorruptStateError as e:
            if self._audit_logger:
                self._audit_logger.log_state_load_failed(str(e), e.issues)
            raise
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_error("storage_read", str(e))
            raise

        self._state = state
        if self._audit_logger:
            self._audit_logger.log_state_loaded(
                task_count=len(state.tasks),
                date_count=len(state.completions),
                warnings=warnings,
            )
        return state

    def reset(self) -> TrackerState:
        """
        Replace the session state with an empty one and persist it.

        Used to recover from stored data that failed validation.
        """
        current = self._state
        self._state = TrackerState.from_positional(
            [],
            {},
            current_month=current.current_month if current else None,
            current_year=current.current_year if current else None,
            max_tasks=self._repository.max_tasks,
        )
        self._persist()
        return self._state

    def _persist(self) -> None:
        state = self.state
        try:
            self._repository.save(state)
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_save_failed(str(e))
            raise
        if self._audit_logger:
            self._audit_logger.log_state_saved(
                task_count=len(state.tasks),
                date_count=len(state.completions),
            )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_task(self, name: str) -> tuple[Optional[Task], str]:
        """
        Add a task.

        Returns:
            (task, message). task is None when the name was empty or the
            task limit was reached; state is unchanged in that case.
        """
        state = self.state
        cleaned = (name or "").strip()

        task = state.add_task(cleaned)
        if task is None:
            if not cleaned:
                reason = "Task name is required"
            else:
                reason = f"Maximum {state.max_tasks} tasks allowed"
            if self._audit_logger:
                self._audit_logger.log_task_rejected(name=cleaned, reason=reason)
            return None, reason

        self._persist()
        if self._audit_logger:
            self._audit_logger.log_task_added(
                task_id=task.id,
                name=task.name,
                index=len(state.tasks) - 1,
            )
        return task, f'Task "{task.name}" added'

    def delete_task(self, index: int) -> Task:
        """
        Delete the task at index and all of its completions.

        Raises:
            IndexError: No task at index
        """
        task, removed = self.state.delete_task(index)
        self._persist()
        if self._audit_logger:
            self._audit_logger.log_task_deleted(
                task_id=task.id,
                name=task.name,
                index=index,
                completions_removed=removed,
            )
        return task

    def toggle_completion(
        self,
        task_index: int,
        day: int,
        month: int,
        year: int,
        checked: bool,
    ) -> bool:
        """
        Set whether a task is done on a date; persists even when nothing changed.

        Returns:
            True if the completion map changed

        Raises:
            IndexError: No task at task_index
            ValueError: Invalid day/month for the year
        """
        state = self.state
        changed = state.toggle_completion(task_index, day, month, year, checked)
        self._persist()
        if self._audit_logger:
            self._audit_logger.log_completion_toggled(
                task_id=state.task_at(task_index).id,
                date_key=date_key(day, month, year),
                checked=checked,
                changed=changed,
            )
        return changed

    def select_month(self, month: int) -> None:
        """Select a month (0-11) of the current year."""
        state = self.state
        state.select_month(month)
        if self._audit_logger:
            self._audit_logger.log_month_selected(month, state.current_year)

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def progress(self, today: Optional[date] = None) -> Progress:
        return calculate_progress(self.state, today=today)

    def grid(self) -> MonthGrid:
        return build_month_grid(self.state)


def create_app_components(
    use_storage: bool = True,
) -> tuple[TrackerFlow, Optional[JsonFileBlobStore]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to JSON files in the data dir.
                    Set to False to keep everything in memory.

    Returns:
        (tracker_flow, blob_store). blob_store is None when running in memory.
    """
    settings = get_settings()
    storage_settings = settings.storage
    max_tasks = settings.app.max_tasks

    file_store = None
    audit_storage = None

    if use_storage:
        file_store = JsonFileBlobStore(storage_settings.data_dir)
        if storage_settings.audit_log_enabled:
            audit_storage = JsonLinesAuditStorage(storage_settings.audit_path)
        store = file_store
    else:
        logger.warning("storage_disabled", detail="tracker data kept in memory only")
        store = InMemoryBlobStore()

    repository = TrackerRepository(
        store,
        tasks_blob=storage_settings.tasks_blob_name,
        completions_blob=storage_settings.completions_blob_name,
        max_tasks=max_tasks,
    )
    flow = TrackerFlow(
        repository=repository,
        audit_logger=AuditLogger(audit_storage),
    )

    return flow, file_store
