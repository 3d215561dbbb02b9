"""Stored data validation package."""

from habit_tracker.validation.validator import StoredDataValidator

__all__ = ["StoredDataValidator"]
