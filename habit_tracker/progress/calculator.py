"""
Progress Calculator

Derives completion counts and percentages from a TrackerState.

- month: every completion recorded in the selected month, out of
  tasks x days (every task done every day)
- day:   today's completions out of the task count, only when the
  selected month is the current month; zeros otherwise

Percentages are rounded half-up to whole numbers. Python's round()
rounds half to even, so Decimal quantization is used instead.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from habit_tracker.calendar_utils import date_key, key_for
from habit_tracker.models.tracker import Progress, ProgressStats, TrackerState


def percentage(completed: int, total: int) -> int:
    """Integer percentage, rounded half-up; 0 when total is 0."""
    if total <= 0:
        return 0
    value = Decimal(completed) * 100 / Decimal(total)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _stats(completed: int, total: int) -> ProgressStats:
    return ProgressStats(
        completed=completed,
        total=total,
        percentage=percentage(completed, total),
    )


def month_stats(state: TrackerState) -> ProgressStats:
    """Completion stats for the selected month."""
    year, month = state.current_year, state.current_month
    day_count = state.days_in_current_month

    completed = sum(
        state.completed_on(date_key(day, month, year))
        for day in range(1, day_count + 1)
    )
    return _stats(completed, len(state.tasks) * day_count)


def day_stats(state: TrackerState, today: date) -> ProgressStats:
    """Completion stats for today, or zeros if today is outside the selected month."""
    if today.year != state.current_year or today.month - 1 != state.current_month:
        return ProgressStats()
    return _stats(state.completed_on(key_for(today)), len(state.tasks))


def calculate_progress(state: TrackerState, today: Optional[date] = None) -> Progress:
    """
    Calculate month and day progress.

    Args:
        state: Tracker state to summarise
        today: Reference date for the day figures (defaults to date.today())
    """
    today = today or date.today()
    return Progress(
        month=month_stats(state),
        day=day_stats(state, today),
    )
