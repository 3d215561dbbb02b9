"""
Core Data Models for Habit Tracker

These models define the in-memory tracker state and the derived
structures the view layer consumes (progress, month grid).

DESIGN DECISION: Every task carries a stable UUID assigned at creation,
and completions are keyed by that id. Positional task indices still exist
at the edges (the API, the persisted blobs, the grid) and are always
derived from the current task order, so deleting a task never needs to
renumber anything in memory.
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

from habit_tracker.calendar_utils import (
    date_key,
    days_in_month,
    is_valid_day,
    parse_date_key,
)
from habit_tracker.config.settings import DEFAULT_MAX_TASKS


def _current_month() -> int:
    return date.today().month - 1


def _current_year() -> int:
    return date.today().year


# =============================================================================
# TASKS AND STATE
# =============================================================================

class Task(BaseModel):
    """
    A tracked habit/task.

    Only the name is user-visible. The id never leaves the process;
    the persisted format identifies tasks by position.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable task identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Display name"
    )


class TrackerState(BaseModel):
    """
    The whole tracker: tasks, completions and the selected month.

    Invariants (checked on construction, preserved by every mutation):
    - len(tasks) <= max_tasks
    - every completion date key is a valid YYYY-MM-DD calendar date
    - every completion set is non-empty (empty sets are pruned)
    - every task id in a completion set belongs to a task in the list
    """

    tasks: list[Task] = Field(default_factory=list)
    completions: dict[str, set[UUID]] = Field(default_factory=dict)
    current_month: int = Field(
        default_factory=_current_month,
        ge=0,
        le=11,
        description="Selected month, zero-indexed"
    )
    current_year: int = Field(
        default_factory=_current_year,
        ge=1,
        le=9998,
        description="Year being tracked (fixed for a session)"
    )
    max_tasks: int = Field(
        default=DEFAULT_MAX_TASKS,
        ge=1,
        description="Ceiling on the number of tasks"
    )

    @model_validator(mode='after')
    def validate_invariants(self) -> 'TrackerState':
        """Reject states that break the task/completion invariants."""
        if len(self.tasks) > self.max_tasks:
            raise ValueError(
                f"Too many tasks: {len(self.tasks)} (maximum {self.max_tasks})"
            )

        known_ids = {task.id for task in self.tasks}
        if len(known_ids) != len(self.tasks):
            raise ValueError("Duplicate task ids")

        for key, task_ids in self.completions.items():
            parse_date_key(key)
            if not task_ids:
                raise ValueError(f"Empty completion set stored for {key}")
            unknown = task_ids - known_ids
            if unknown:
                raise ValueError(f"Completions for {key} reference unknown tasks")

        return self

    # -------------------------------------------------------------------------
    # Construction from the positional (persisted) form
    # -------------------------------------------------------------------------

    @classmethod
    def from_positional(
        cls,
        task_names: list[str],
        completions: dict[str, list[int]],
        current_month: Optional[int] = None,
        current_year: Optional[int] = None,
        max_tasks: int = DEFAULT_MAX_TASKS,
    ) -> 'TrackerState':
        """
        Build a state from task names and a date key -> indices map.

        Indices are resolved against task_names; fresh ids are minted
        for every task.
        """
        tasks = [Task(name=name) for name in task_names]
        by_key: dict[str, set[UUID]] = {}
        for key, indices in completions.items():
            for index in indices:
                if not 0 <= index < len(tasks):
                    raise ValueError(f"Task index {index} out of range for {key}")
            ids = {tasks[index].id for index in indices}
            if ids:
                by_key[key] = ids

        fields = {}
        if current_month is not None:
            fields["current_month"] = current_month
        if current_year is not None:
            fields["current_year"] = current_year

        return cls(tasks=tasks, completions=by_key, max_tasks=max_tasks, **fields)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def task_names(self) -> list[str]:
        return [task.name for task in self.tasks]

    @property
    def is_full(self) -> bool:
        return len(self.tasks) >= self.max_tasks

    @property
    def days_in_current_month(self) -> int:
        return days_in_month(self.current_year, self.current_month)

    def task_at(self, index: int) -> Task:
        """
        Task at a position.

        Raises:
            IndexError: If index is outside [0, len(tasks)). Negative
                indices are not accepted.
        """
        if not 0 <= index < len(self.tasks):
            raise IndexError(f"No task at index {index}")
        return self.tasks[index]

    def completed_on(self, key: str) -> int:
        """Number of tasks completed on a date key (0 if none)."""
        return len(self.completions.get(key, ()))

    def is_completed(self, task_index: int, day: int, month: int, year: int) -> bool:
        task = self.task_at(task_index)
        return task.id in self.completions.get(date_key(day, month, year), ())

    def completion_indices(self) -> dict[str, list[int]]:
        """
        Positional view of the completion map.

        Returns {date_key: sorted task indices}, the shape that is
        persisted and that the view layer checks cells against.
        """
        positions = {task.id: index for index, task in enumerate(self.tasks)}
        return {
            key: sorted(positions[task_id] for task_id in task_ids)
            for key, task_ids in sorted(self.completions.items())
        }

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_task(self, name: str) -> Optional[Task]:
        """
        Append a task.

        Returns the new task, or None (state unchanged) when the trimmed
        name is empty or the task limit is reached.
        """
        name = (name or "").strip()
        if not name or self.is_full:
            return None
        task = Task(name=name)
        self.tasks.append(task)
        return task

    def delete_task(self, index: int) -> tuple[Task, int]:
        """
        Remove the task at index together with all of its completions.

        Dates left without any completion are dropped. Later tasks move
        down one position; since completions hold ids, their records
        follow them without renumbering.

        Returns:
            (removed_task, number_of_completions_removed)
        """
        task = self.task_at(index)
        del self.tasks[index]

        removed = 0
        for key in list(self.completions):
            task_ids = self.completions[key]
            if task.id in task_ids:
                task_ids.discard(task.id)
                removed += 1
            if not task_ids:
                del self.completions[key]

        return task, removed

    def toggle_completion(
        self,
        task_index: int,
        day: int,
        month: int,
        year: int,
        checked: bool,
    ) -> bool:
        """
        Mark or unmark a task as done on a date.

        Checking an already-checked task and unchecking a task with no
        record are both no-ops.

        Returns:
            True if the completion map changed.

        Raises:
            IndexError: Unknown task index.
            ValueError: Day/month out of range for the year.
        """
        task = self.task_at(task_index)
        if not is_valid_day(day, month, year):
            raise ValueError(f"Invalid date: day={day} month={month} year={year}")

        key = date_key(day, month, year)
        task_ids = self.completions.get(key)

        if checked:
            if task_ids is None:
                self.completions[key] = {task.id}
                return True
            if task.id in task_ids:
                return False
            task_ids.add(task.id)
            return True

        if task_ids is None or task.id not in task_ids:
            return False
        task_ids.discard(task.id)
        if not task_ids:
            del self.completions[key]
        return True

    def select_month(self, month: int) -> None:
        """Switch the selected month (0-11) within the current year."""
        if isinstance(month, bool) or not isinstance(month, int) or not 0 <= month <= 11:
            raise ValueError(f"Month must be an integer 0-11, got {month!r}")
        self.current_month = month


# =============================================================================
# PROGRESS MODELS
# =============================================================================

class ProgressStats(BaseModel):
    """Completed vs. possible completions, with a rounded percentage."""

    completed: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    percentage: int = Field(default=0, ge=0, le=100)


class Progress(BaseModel):
    """
    Progress for the selected month and for today.

    The day figures are zero unless the selected month is the current one.
    """

    month: ProgressStats = Field(default_factory=ProgressStats)
    day: ProgressStats = Field(default_factory=ProgressStats)


# =============================================================================
# MONTH GRID (view model)
# =============================================================================

class DayHeader(BaseModel):
    """Column header for one day of the month."""

    day: int = Field(ge=1, le=31)
    weekday: str
    full_date: str = Field(description="Tooltip text, e.g. '12 March 2026'")
    date_key: str


class GridCell(BaseModel):
    """One checkbox: a task on a day."""

    day: int = Field(ge=1, le=31)
    date_key: str
    checked: bool = False


class GridRow(BaseModel):
    """All days of the month for one task."""

    task_index: int = Field(ge=0)
    task_id: UUID
    task_name: str
    cells: list[GridCell] = Field(default_factory=list)

    @property
    def completed_count(self) -> int:
        return sum(1 for cell in self.cells if cell.checked)


class MonthGrid(BaseModel):
    """Everything needed to draw the calendar grid of one month."""

    month: int = Field(ge=0, le=11)
    year: int
    title: str
    days: list[DayHeader] = Field(default_factory=list)
    rows: list[GridRow] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows
