# config.py
# Paths, storage keys & scheduling constants

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"

# Key-value store keys (one JSON file each under DATA_DIR)
CARDS_KEY = "cards_data"
PREFERENCES_KEY = "app_preferences"
DISMISSALS_KEY = "reminder_dismissals"
GLOBAL_REMINDERS_KEY = "global_custom_reminders"

# Billing / reminder engine
DEFAULT_BILLING_PERIOD_DAYS = 15
MAX_BILLING_PERIOD_DAYS = 365
OVERDUE_GRACE_DAYS = 7
DISMISSAL_TTL_DAYS = 90
DEFAULT_REMINDER_WINDOW_DAYS = 5

GLOBAL_TARGET_ID = "global"

# Empty defaults
EMPTY_CARDS = []
EMPTY_DISMISSALS = {}
EMPTY_GLOBAL_REMINDERS = []
