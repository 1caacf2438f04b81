import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def payroll_from_env() -> dict:
    """Payroll/attendance knobs, each overridable through the environment."""
    return {
        "STANDARD_HOURS_PER_DAY": os.getenv("STANDARD_HOURS_PER_DAY", "8"),
        "LATE_CUTOFF": os.getenv("LATE_CUTOFF", "09:30"),
        "EARLY_DEPARTURE_CUTOFF": os.getenv("EARLY_DEPARTURE_CUTOFF", "17:00"),
        "WORKING_DAYS_PER_MONTH": int(os.getenv("WORKING_DAYS_PER_MONTH", "22")),
        "OVERTIME_MULTIPLIER": os.getenv("OVERTIME_MULTIPLIER", "1.5"),
        "LATE_DEDUCTION_PER_INSTANCE": os.getenv("LATE_DEDUCTION_PER_INSTANCE", "50"),
        "ABSENT_DEDUCTION_PER_DAY": os.getenv("ABSENT_DEDUCTION_PER_DAY", "500"),
        "LEDGER_MAX_RETRIES": int(os.getenv("LEDGER_MAX_RETRIES", "3")),
    }
