"""Progress calculation package."""

from habit_tracker.progress.calculator import (
    calculate_progress,
    day_stats,
    month_stats,
    percentage,
)

__all__ = ["calculate_progress", "day_stats", "month_stats", "percentage"]
