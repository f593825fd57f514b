# billing.py
# Billing-cycle date math: clamped days, statement / due / renewal occurrences, status text

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from config import DEFAULT_BILLING_PERIOD_DAYS

DateLike = Union[date, datetime]

_EXPIRY_RE = re.compile(r"^\s*(\d{2})\s*/?\s*(\d{2})\s*$")


def start_of_day(value: DateLike) -> date:
    """Truncate a datetime to its calendar day; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(today: DateLike, target: DateLike) -> int:
    return (start_of_day(target) - start_of_day(today)).days


def format_short_date(d: date) -> str:
    return f"{d:%b} {d.day}"


# ---------- Clamping ----------
def clamp_day_to_month(year: int, month: int, day: int) -> date:
    """
    Return `day` of the given month, clamped into [1, last day of month].
    `month` is 1-based; values outside 1..12 roll into neighbouring years
    (0 is the previous December, 13 the next January). Rolling past year 1
    or year 9999 raises, as `date` itself does.
    """
    anchor = date(year, 1, 1) + relativedelta(months=month - 1)
    last = calendar.monthrange(anchor.year, anchor.month)[1]
    return date(anchor.year, anchor.month, max(1, min(int(day), last)))


def _period(billing_period_days: Optional[int]) -> int:
    if not billing_period_days or billing_period_days < 0:
        return DEFAULT_BILLING_PERIOD_DAYS
    return int(billing_period_days)


# ---------- Statements ----------
def next_statement_date(bill_day: int, today: DateLike) -> date:
    """First statement date on or after today."""
    today = start_of_day(today)
    current = clamp_day_to_month(today.year, today.month, bill_day)
    if current >= today:
        return current
    return clamp_day_to_month(today.year, today.month + 1, bill_day)


def previous_statement_date(bill_day: int, today: DateLike) -> date:
    """Most recent statement date strictly before today."""
    today = start_of_day(today)
    current = clamp_day_to_month(today.year, today.month, bill_day)
    if current < today:
        return current
    return clamp_day_to_month(today.year, today.month - 1, bill_day)


def last_statement_on_or_before(bill_day: int, today: DateLike) -> date:
    today = start_of_day(today)
    current = clamp_day_to_month(today.year, today.month, bill_day)
    if current <= today:
        return current
    return clamp_day_to_month(today.year, today.month - 1, bill_day)


# ---------- Due dates ----------
def due_date(bill_day: int, today: DateLike, billing_period_days: Optional[int] = None) -> date:
    """
    Due date of the last statement issued on or before today. When that has
    already passed, the due date of the following statement.
    """
    today = start_of_day(today)
    period = timedelta(days=_period(billing_period_days))
    last = last_statement_on_or_before(bill_day, today)
    due = last + period
    if due >= today:
        return due
    following = clamp_day_to_month(last.year, last.month + 1, bill_day)
    return following + period


def previous_due_date(bill_day: int, today: DateLike, billing_period_days: Optional[int] = None) -> date:
    """Most recent due date strictly before today."""
    today = start_of_day(today)
    period = timedelta(days=_period(billing_period_days))
    statement = last_statement_on_or_before(bill_day, today)
    due = statement + period
    while due >= today:
        statement = clamp_day_to_month(statement.year, statement.month - 1, bill_day)
        due = statement + period
    return due


# ---------- Renewal ----------
def extract_expiry_month(expiry) -> Optional[int]:
    """Parse 'MM/YY' (slash optional) into a month 1..12, or None."""
    if not isinstance(expiry, str):
        return None
    match = _EXPIRY_RE.match(expiry)
    if not match:
        return None
    month = int(match.group(1))
    if not 1 <= month <= 12:
        return None
    return month


def next_renewal_date(bill_day: int, expiry_month: int, today: DateLike) -> date:
    today = start_of_day(today)
    this_year = clamp_day_to_month(today.year, expiry_month, bill_day)
    if this_year >= today:
        return this_year
    return clamp_day_to_month(today.year + 1, expiry_month, bill_day)


def previous_renewal_date(bill_day: int, expiry_month: int, today: DateLike) -> date:
    today = start_of_day(today)
    this_year = clamp_day_to_month(today.year, expiry_month, bill_day)
    if this_year < today:
        return this_year
    return clamp_day_to_month(today.year - 1, expiry_month, bill_day)


# ---------- Status ----------
def get_bill_status_message(bill_day: int, today: DateLike,
                            billing_period_days: Optional[int] = None) -> str:
    today = start_of_day(today)
    statement = next_statement_date(bill_day, today)
    days_to_statement = days_between(today, statement)
    if days_to_statement == 0:
        return "Next bill today"

    due = due_date(bill_day, today, billing_period_days)
    days_to_due = days_between(today, due)
    if 0 <= days_to_due <= DEFAULT_BILLING_PERIOD_DAYS:
        return f"Bill may be due by {format_short_date(due)}"

    return f"Next bill in {days_to_statement} days"
