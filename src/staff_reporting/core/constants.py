"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_SESSION_DAYS = 7

# Shift conflict thresholds (hours per staff per week)
WEEKLY_HOURS_LIMIT = 40
WEEKLY_HOURS_SEVERE = 50
MAX_SHIFTS_PER_DAY = 2
