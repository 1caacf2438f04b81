import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_payroll_test"),
}

# Fixed values so test expectations do not depend on the environment
PAYROLL = {
    "STANDARD_HOURS_PER_DAY": "8",
    "LATE_CUTOFF": "09:30",
    "EARLY_DEPARTURE_CUTOFF": "17:00",
    "WORKING_DAYS_PER_MONTH": 22,
    "OVERTIME_MULTIPLIER": "1.5",
    "LATE_DEDUCTION_PER_INSTANCE": "50",
    "ABSENT_DEDUCTION_PER_DAY": "500",
    "LEDGER_MAX_RETRIES": 3,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
