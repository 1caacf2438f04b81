"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Runtime values come from the settings modules; these are the fallbacks.
"""

from datetime import time

STANDARD_HOURS_PER_DAY = 8
WEEKEND_DAYS = frozenset({5, 6})  # date.weekday(): Saturday, Sunday
LATE_CUTOFF = time(9, 30)
EARLY_DEPARTURE_CUTOFF = time(17, 0)
MAX_PLAUSIBLE_SHIFT_HOURS = 24

# Per-instance payroll mode
WORKING_DAYS_PER_MONTH = 22
OVERTIME_MULTIPLIER = "1.5"
LATE_DEDUCTION_PER_INSTANCE = 50
ABSENT_DEDUCTION_PER_DAY = 500

LEDGER_MAX_RETRIES = 3
DEFAULT_LIST_LIMIT = 200
