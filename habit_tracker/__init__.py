"""
Monthly Habit Tracker - Source Package

A small habit/task tracker: define named tasks, tick them off per day
within a month of the current year, and watch completion percentages.

DESIGN PRINCIPLES:
1. State is explicitly owned by one TrackerFlow per session
2. Tasks have stable identity; positions only exist at the edges
3. Stored data is validated on load, never trusted blindly
4. Every mutation is persisted and audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Habit Tracker Team"
