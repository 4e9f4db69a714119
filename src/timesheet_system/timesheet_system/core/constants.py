"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DAYS_PER_WEEK = 7
DEFAULT_TASK_NAME = "New task"
DEFAULT_LOG_SORT = "date"
HOURS_PRECISION = 2
