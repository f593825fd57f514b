# wallet.py
# Entry points for the UI layer: binds the local store and resolves "now"

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

import billing
import dismissals
import global_reminders
import reminders
from cards import list_cards
from models import Card, CardReminder, GlobalCustomReminder
from preferences import get_app_preferences
from storage import default_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_active_reminders(
    cards: Optional[Iterable[Card]] = None,
    window_days: Optional[int] = None,
    today: Optional[Union[date, datetime]] = None,
    enabled_reasons=None,
    global_custom_reminders: Optional[Iterable[GlobalCustomReminder]] = None,
    store=None,
) -> List[CardReminder]:
    """
    Reminder feed for the reminders screen. Anything not passed in is read
    from the store (cards, preferences, global reminders); the dismissal map
    is always read, and a failure there propagates.
    """
    store = store or default_store()
    if cards is None:
        cards = list_cards(store)
    if window_days is None or enabled_reasons is None:
        prefs = get_app_preferences(store)
        if window_days is None:
            window_days = prefs.reminder_window_days
        if enabled_reasons is None:
            enabled_reasons = prefs.reminder_types_enabled
    if global_custom_reminders is None:
        global_custom_reminders = global_reminders.list_global_reminders(store)

    dismissed = dismissals.load_dismissals(store)
    return reminders.get_active_reminders(
        cards,
        window_days,
        today or datetime.now(),
        enabled_reasons=enabled_reasons,
        global_reminders=global_custom_reminders,
        dismissals=dismissed,
    )


def dismiss_reminder(key: str, store=None) -> None:
    dismissals.dismiss_reminder(store or default_store(), key)


def clear_outdated_dismissals(store=None) -> int:
    return dismissals.clear_outdated_dismissals(store or default_store())


def reset_all_dismissals(store=None) -> None:
    dismissals.reset_all_dismissals(store or default_store())


def get_global_custom_reminders(store=None) -> List[GlobalCustomReminder]:
    return global_reminders.list_global_reminders(store or default_store())


def set_global_custom_reminders(items, store=None) -> List[GlobalCustomReminder]:
    return global_reminders.replace_global_reminders(store or default_store(), items)


def get_bill_status_message(bill_day: int, billing_period_days: Optional[int] = None,
                            today: Optional[Union[date, datetime]] = None) -> str:
    return billing.get_bill_status_message(bill_day, today or datetime.now(), billing_period_days)
