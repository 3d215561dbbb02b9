"""
Month Grid Builder

Turns the selected month of a TrackerState into a MonthGrid: one header
per day and one row of checkbox cells per task. The view layer draws
this and nothing else, so a cell is checked exactly when the task's
index appears in completion_indices() for that date.
"""

from habit_tracker.calendar_utils import (
    date_key,
    days_in_month,
    format_full_date,
    month_display,
    weekday_name,
)
from habit_tracker.models.tracker import (
    DayHeader,
    GridCell,
    GridRow,
    MonthGrid,
    TrackerState,
)


def build_month_grid(state: TrackerState) -> MonthGrid:
    """Build the grid for the state's selected month."""
    year, month = state.current_year, state.current_month
    days = [
        DayHeader(
            day=day,
            weekday=weekday_name(day, month, year),
            full_date=format_full_date(day, month, year),
            date_key=date_key(day, month, year),
        )
        for day in range(1, days_in_month(year, month) + 1)
    ]

    rows = []
    for index, task in enumerate(state.tasks):
        cells = [
            GridCell(
                day=header.day,
                date_key=header.date_key,
                checked=task.id in state.completions.get(header.date_key, ()),
            )
            for header in days
        ]
        rows.append(GridRow(
            task_index=index,
            task_id=task.id,
            task_name=task.name,
            cells=cells,
        ))

    return MonthGrid(
        month=month,
        year=year,
        title=month_display(month, year),
        days=days,
        rows=rows,
    )
