"""
Tracker Repository

Loads and saves a TrackerState through any BlobStoreInterface.

Persisted format (two blobs, overwritten wholesale on every save):
- tasks:       JSON array of task names, in display order
- completions: JSON object, date key -> array of task indices

Tasks are identified by position on disk and by UUID in memory; this
module is the only place that converts between the two.

Load rules:
- blob absent or null      -> empty default
- blob not UTF-8 or JSON   -> empty default, reported as a warning
- blob parseable but wrong -> CorruptStateError with the issues
"""

import json
from typing import Any, Optional

from habit_tracker.config.settings import DEFAULT_MAX_TASKS
from habit_tracker.models.tracker import TrackerState
from habit_tracker.services.storage.interface import (
    BlobStoreInterface,
    CorruptStateError,
)
from habit_tracker.validation import StoredDataValidator


TASKS_BLOB = "trackerTasks"
COMPLETIONS_BLOB = "trackerCompletions"


class TrackerRepository:
    """
    Serializes the tracker state into the two blobs and back.
    """

    def __init__(
        self,
        store: BlobStoreInterface,
        tasks_blob: str = TASKS_BLOB,
        completions_blob: str = COMPLETIONS_BLOB,
        max_tasks: int = DEFAULT_MAX_TASKS,
        validator: Optional[StoredDataValidator] = None,
    ):
        self._store = store
        self._tasks_blob = tasks_blob
        self._completions_blob = completions_blob
        self._max_tasks = max_tasks
        self._validator = validator or StoredDataValidator(max_tasks)

    @property
    def store(self) -> BlobStoreInterface:
        return self._store

    @property
    def max_tasks(self) -> int:
        return self._max_tasks

    def _decode(self, name: str, default: Any, warnings: list[str]) -> Any:
        """Read and parse one blob, falling back to default when absent or unparseable."""
        try:
            raw = self._store.load_blob(name)
        except UnicodeDecodeError as e:
            warnings.append(f"{name}: not valid UTF-8 ({e.reason}), starting empty")
            return default
        if raw is None or not raw.strip():
            return default

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            warnings.append(f"{name}: unreadable JSON ({e.msg}), starting empty")
            return default
        except RecursionError:
            warnings.append(f"{name}: JSON nested too deeply, starting empty")
            return default

        # A stored null counts as absent
        if data is None:
            return default
        return data

    def load(
        self,
        current_month: Optional[int] = None,
        current_year: Optional[int] = None,
    ) -> tuple[TrackerState, list[str]]:
        """
        Load the tracker state.

        Args:
            current_month: Month to select (defaults to this month)
            current_year: Year to track (defaults to this year)

        Returns:
            (state, warnings)

        Raises:
            CorruptStateError: If a blob has the wrong shape or content
            StorageError: If the store cannot be read
        """
        warnings: list[str] = []
        tasks_data = self._decode(self._tasks_blob, [], warnings)
        completions_data = self._decode(self._completions_blob, {}, warnings)

        result = self._validator.validate(tasks_data, completions_data)
        if not result.is_valid:
            errors = [issue for issue in result.issues if issue.severity == "error"]
            summary = "; ".join(f"{issue.field}: {issue.message}" for issue in errors[:3])
            raise CorruptStateError(
                f"Stored tracker data is invalid ({len(errors)} errors): {summary}",
                issues=result.issues,
            )

        warnings.extend(result.warnings)

        state = TrackerState.from_positional(
            result.tasks,
            result.completions,
            current_month=current_month,
            current_year=current_year,
            max_tasks=self._max_tasks,
        )
        return state, warnings

    def save(self, state: TrackerState) -> None:
        """
        Persist the full state (both blobs).

        Raises:
            StorageWriteError: If either blob cannot be written
        """
        self._store.save_blob(
            self._tasks_blob,
            json.dumps(state.task_names, ensure_ascii=False),
        )
        self._store.save_blob(
            self._completions_blob,
            json.dumps(state.completion_indices(), ensure_ascii=False),
        )
