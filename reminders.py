# reminders.py
# Reminder feed: per-card and global occurrences, windowing, overdue grace, dismissal filtering

import calendar
import logging
from datetime import date
from typing import Iterable, List, Mapping, NamedTuple, Optional, Union

from pydantic import ValidationError

from billing import (
    DateLike,
    clamp_day_to_month,
    days_between,
    due_date,
    extract_expiry_month,
    format_short_date,
    next_renewal_date,
    next_statement_date,
    previous_due_date,
    previous_renewal_date,
    previous_statement_date,
    start_of_day,
)
from config import GLOBAL_TARGET_ID, OVERDUE_GRACE_DAYS
from models import Card, CardReminder, GlobalCustomReminder, ReminderTypesEnabled

logger = logging.getLogger(__name__)

# reason -> (upcoming label, overdue label, sublabel prefix)
_BILLING_TEXT = {
    "statement": ("Statement coming up", "Statement generated", "Statement on"),
    "due": ("Payment may be due", "Payment overdue", "Due by"),
    "renewal": ("Card renewal coming up", "Card renewal overdue", "Renew by"),
}
_CUSTOM_PREFIX = "Reminder on"


class Candidate(NamedTuple):
    reason: str
    when: date
    label: str
    sublabel: str
    custom_id: Optional[str] = None
    note: Optional[str] = None


def build_reminder_key(target_id: str, reason: str, target_date: date,
                       custom_id: Optional[str] = None) -> str:
    """Stable dismissal key for one occurrence of one reminder."""
    stamp = calendar.timegm(target_date.timetuple()) * 1000
    key = f"{target_id}_{reason}_{stamp}"
    if custom_id:
        key = f"{key}_{custom_id}"
    return key


def is_within_window(days_until: int, window_days: int) -> bool:
    """Upcoming within the lookahead, or overdue within the grace period."""
    if days_until >= 0:
        return days_until <= window_days
    return -days_until <= OVERDUE_GRACE_DAYS


def monthly_occurrences(day_of_month: int, today: DateLike) -> List[date]:
    """This month's and next month's occurrence of a day-of-month."""
    today = start_of_day(today)
    return [
        clamp_day_to_month(today.year, today.month, day_of_month),
        clamp_day_to_month(today.year, today.month + 1, day_of_month),
    ]


def _billing_candidate(reason: str, when: date, today: date) -> Candidate:
    upcoming, overdue, prefix = _BILLING_TEXT[reason]
    label = overdue if when < today else upcoming
    return Candidate(reason, when, label, f"{prefix} {format_short_date(when)}")


def card_candidates(card: Card, today: DateLike) -> List[Candidate]:
    """Every occurrence worth testing against the window for one card."""
    today = start_of_day(today)
    if card.skip_reminders or card.card_type != "Credit":
        return []
    bill_day = card.bill_generation_day
    if bill_day is None:
        return []

    out = [
        _billing_candidate("statement", next_statement_date(bill_day, today), today),
        _billing_candidate("statement", previous_statement_date(bill_day, today), today),
    ]

    if card.billing_period_days is not None:
        period = card.billing_period_days
        out.append(_billing_candidate("due", due_date(bill_day, today, period), today))
        out.append(_billing_candidate("due", previous_due_date(bill_day, today, period), today))

    expiry_month = extract_expiry_month(card.expiry_date)
    if expiry_month is not None:
        out.append(_billing_candidate("renewal", next_renewal_date(bill_day, expiry_month, today), today))
        out.append(_billing_candidate("renewal", previous_renewal_date(bill_day, expiry_month, today), today))

    for custom in card.custom_reminders:
        for when in monthly_occurrences(custom.day_of_month, today):
            out.append(Candidate("custom", when, custom.label,
                                 f"{_CUSTOM_PREFIX} {format_short_date(when)}",
                                 custom_id=custom.id))
    return out


def global_candidates(reminder: GlobalCustomReminder, today: DateLike) -> List[Candidate]:
    return [
        Candidate("custom", when, reminder.title,
                  f"{_CUSTOM_PREFIX} {format_short_date(when)}",
                  custom_id=reminder.id, note=reminder.label)
        for when in monthly_occurrences(reminder.day_of_month, today)
    ]


def _coerce(model, item):
    if isinstance(item, model):
        return item
    try:
        return model.model_validate(item)
    except ValidationError as e:
        logger.warning(f"Skipping malformed {model.__name__}: {e.error_count()} error(s)")
        return None


def _enabled(enabled_reasons) -> ReminderTypesEnabled:
    if enabled_reasons is None:
        return ReminderTypesEnabled()
    if isinstance(enabled_reasons, ReminderTypesEnabled):
        return enabled_reasons
    return ReminderTypesEnabled(**dict(enabled_reasons))


def get_active_reminders(
    cards: Iterable[Union[Card, dict]],
    window_days: int,
    today: DateLike,
    enabled_reasons: Optional[Union[ReminderTypesEnabled, Mapping[str, bool]]] = None,
    global_reminders: Iterable[Union[GlobalCustomReminder, dict]] = (),
    dismissals: Optional[Mapping[str, int]] = None,
) -> List[CardReminder]:
    """
    Build the reminder feed for `today`.

    Cards are processed in input order, then global reminders. An occurrence
    is kept when its reason is enabled, it falls inside the window (or the
    overdue grace period) and its key has not been dismissed. The result is
    sorted by target date; ties keep insertion order.
    """
    today = start_of_day(today)
    enabled = _enabled(enabled_reasons)
    dismissed = dismissals or {}
    seen = set()
    reminders: List[CardReminder] = []

    def _accept(target, card, target_id, candidate):
        if not enabled.is_enabled(candidate.reason):
            return
        days_until = days_between(today, candidate.when)
        if not is_within_window(days_until, window_days):
            return
        key = build_reminder_key(target_id, candidate.reason, candidate.when, candidate.custom_id)
        if key in dismissed or key in seen:
            return
        seen.add(key)
        reminders.append(CardReminder(
            key=key,
            target=target,
            card=card,
            reason=candidate.reason,
            target_date=candidate.when,
            days_until=days_until,
            label=candidate.label,
            sublabel=candidate.sublabel,
            custom_id=candidate.custom_id,
            note=candidate.note,
        ))

    for item in cards:
        card = _coerce(Card, item)
        if card is None:
            continue
        try:
            candidates = card_candidates(card, today)
        except (OverflowError, ValueError) as e:
            logger.warning(f"Skipping reminders for card {card.id}: {e}")
            continue
        for candidate in candidates:
            _accept("card", card, card.id, candidate)

    for item in global_reminders:
        reminder = _coerce(GlobalCustomReminder, item)
        if reminder is None:
            continue
        for candidate in global_candidates(reminder, today):
            _accept("global", None, GLOBAL_TARGET_ID, candidate)

    # sorted() is stable
    return sorted(reminders, key=lambda r: r.target_date)
