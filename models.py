import calendar
import logging
import math
from datetime import date
from typing import Any, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from config import DEFAULT_REMINDER_WINDOW_DAYS, MAX_BILLING_PERIOD_DAYS

logger = logging.getLogger(__name__)

CardType = Literal["Credit", "Debit"]
ReminderReason = Literal["statement", "due", "renewal", "custom"]
ReminderTarget = Literal["card", "global"]


class CustomReminder(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    day_of_month: int
    label: str


def _whole_number_between(value: Any, low: int, high: int) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if not math.isfinite(value) or value != int(value):
        return False
    return low <= value <= high


def _usable_custom_reminders(items: Any, card_id: Any) -> List[Any]:
    if not isinstance(items, list):
        return []
    out = []
    for item in items:
        if isinstance(item, CustomReminder):
            out.append(item)
            continue
        try:
            out.append(CustomReminder.model_validate(item))
        except ValidationError:
            logger.warning(f"Dropping malformed custom reminder on card {card_id}: {item!r}")
    return out


class Card(BaseModel):
    # Attributes the scheduler does not know about are kept as-is.
    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: str(uuid4()))
    card_number: str = ""
    cvv: str = ""
    expiry_date: str = ""
    bank_name: str = ""
    card_variant: Optional[str] = None
    cardholder_name: str = ""
    card_type: CardType = "Credit"
    bill_generation_day: Optional[int] = None
    billing_period_days: Optional[int] = Field(default=None, gt=0, le=MAX_BILLING_PERIOD_DAYS)
    skip_reminders: bool = False
    custom_reminders: List[CustomReminder] = Field(default_factory=list)
    usage_count: int = 0
    is_pinned: bool = False
    created_at: int = 0
    last_used_at: int = 0
    color: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_fields(cls, data: Any) -> Any:
        # Older records stored the period as `bill_due_day` and could carry a
        # null reminder list. Bad sub-fields are reset so the card survives.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        legacy = data.pop("bill_due_day", None)
        if data.get("billing_period_days") is None and isinstance(legacy, int):
            data["billing_period_days"] = legacy

        period = data.get("billing_period_days")
        if period is not None and not _whole_number_between(period, 1, MAX_BILLING_PERIOD_DAYS):
            logger.warning(f"Ignoring billing period {period!r} on card {data.get('id')}")
            data["billing_period_days"] = None

        if not isinstance(data.get("expiry_date", ""), str):
            data["expiry_date"] = ""

        data["custom_reminders"] = _usable_custom_reminders(data.get("custom_reminders"), data.get("id"))
        return data


class GlobalCustomReminder(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    day_of_month: int
    label: str
    title: str

    @field_validator("label", "title")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class ReminderTypesEnabled(BaseModel):
    statement: bool = True
    due: bool = True
    renewal: bool = True
    custom: bool = True

    def is_enabled(self, reason: str) -> bool:
        return bool(getattr(self, reason, False))


class AppPreferences(BaseModel):
    reminder_window_days: int = Field(default=DEFAULT_REMINDER_WINDOW_DAYS, ge=0)
    reminder_types_enabled: ReminderTypesEnabled = Field(default_factory=ReminderTypesEnabled)


class CardReminder(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    target: ReminderTarget
    card: Optional[Card] = None
    reason: ReminderReason
    target_date: date
    days_until: int
    label: str
    sublabel: str
    custom_id: Optional[str] = None
    note: Optional[str] = None

    @property
    def target_timestamp(self) -> int:
        """Epoch milliseconds of the target day (UTC midnight)."""
        return calendar.timegm(self.target_date.timetuple()) * 1000

    @property
    def is_overdue(self) -> bool:
        return self.days_until < 0
