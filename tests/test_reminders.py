from datetime import date, datetime

from models import Card, CustomReminder, GlobalCustomReminder
from reminders import build_reminder_key, get_active_reminders, is_within_window


def _card(**kwargs):
    base = {"id": "c1", "bank_name": "HDFC", "card_type": "Credit", "bill_generation_day": 15}
    base.update(kwargs)
    return Card(**base)


def test_statement_outside_window_yields_nothing():
    assert get_active_reminders([_card()], 5, date(2024, 7, 1)) == []


def test_upcoming_statement_inside_window():
    out = get_active_reminders([_card()], 5, date(2024, 7, 12))
    assert len(out) == 1
    r = out[0]
    assert r.reason == "statement"
    assert r.label == "Statement coming up"
    assert r.sublabel == "Statement on Jul 15"
    assert r.target == "card"
    assert r.card.id == "c1"
    assert r.target_date == date(2024, 7, 15)
    assert r.days_until == 3
    assert not r.is_overdue


def test_recently_missed_due_date_is_reported_overdue():
    card = _card(bill_generation_day=1, billing_period_days=20)
    out = get_active_reminders([card], 5, date(2024, 2, 25))
    # Due Feb 21 (overdue) sorts before the Mar 1 statement
    assert [r.reason for r in out] == ["due", "statement"]
    due = out[0]
    assert due.target_date == date(2024, 2, 21)
    assert due.days_until == -4
    assert due.label == "Payment overdue"
    assert due.is_overdue
    assert out[1].days_until == 5


def test_no_due_reminder_without_billing_period():
    out = get_active_reminders([_card()], 5, date(2024, 7, 1))
    assert all(r.reason != "due" for r in out)


def test_window_boundary():
    today = date(2024, 7, 10)
    assert len(get_active_reminders([_card()], 5, today)) == 1
    assert get_active_reminders([_card()], 4, today) == []
    assert is_within_window(5, 5)
    assert not is_within_window(6, 5)


def test_overdue_grace_boundary():
    seven_late = get_active_reminders([_card()], 5, date(2024, 7, 22))
    assert [r.days_until for r in seven_late] == [-7]
    assert seven_late[0].label == "Statement generated"
    assert get_active_reminders([_card()], 5, date(2024, 7, 23)) == []
    assert is_within_window(-7, 0)
    assert not is_within_window(-8, 30)


def test_excluded_cards():
    today = date(2024, 7, 12)
    assert get_active_reminders([_card(skip_reminders=True)], 5, today) == []
    assert get_active_reminders([_card(card_type="Debit")], 5, today) == []
    assert get_active_reminders([_card(bill_generation_day=None)], 5, today) == []


def test_renewal_in_expiry_month():
    out = get_active_reminders([_card(expiry_date="07/27")], 5, date(2024, 7, 12))
    # Same target date: insertion order is kept
    assert [r.reason for r in out] == ["statement", "renewal"]
    assert out[1].label == "Card renewal coming up"
    assert out[1].sublabel == "Renew by Jul 15"
    assert out[0].key != out[1].key


def test_unparseable_expiry_only_drops_renewal():
    out = get_active_reminders([_card(expiry_date="bad")], 5, date(2024, 7, 12))
    assert [r.reason for r in out] == ["statement"]


def test_per_card_custom_reminder():
    card = _card(custom_reminders=[CustomReminder(id="rent", day_of_month=13, label="Pay rent")])
    out = get_active_reminders([card], 5, date(2024, 7, 12))
    assert [r.reason for r in out] == ["custom", "statement"]
    custom = out[0]
    assert custom.custom_id == "rent"
    assert custom.label == "Pay rent"
    assert custom.sublabel == "Reminder on Jul 13"
    assert custom.key.endswith("_rent")
    assert custom.card.id == "c1"


def test_disabled_reasons_are_skipped():
    today = date(2024, 7, 12)
    assert get_active_reminders([_card()], 5, today, enabled_reasons={"statement": False}) == []
    out = get_active_reminders([_card()], 5, today, enabled_reasons={"due": False})
    assert len(out) == 1


def test_dismissed_occurrence_is_hidden():
    today = date(2024, 7, 12)
    [reminder] = get_active_reminders([_card()], 5, today)
    assert reminder.key == build_reminder_key("c1", "statement", date(2024, 7, 15))
    assert get_active_reminders([_card()], 5, today, dismissals={reminder.key: 1}) == []


def test_reminder_key_format():
    assert build_reminder_key("c1", "statement", date(2024, 7, 15)) == "c1_statement_1721001600000"
    assert build_reminder_key("global", "custom", date(2024, 7, 15), "g1") == "global_custom_1721001600000_g1"


def test_global_reminders_check_this_and_next_month():
    rent = GlobalCustomReminder(id="g1", day_of_month=10, label="Transfer to landlord", title="Rent")
    out = get_active_reminders([], 5, date(2024, 7, 12), global_reminders=[rent])
    assert len(out) == 1
    r = out[0]
    assert r.target == "global"
    assert r.card is None
    assert r.days_until == -2
    assert r.label == "Rent"
    assert r.note == "Transfer to landlord"
    assert r.key.startswith("global_custom_")

    wide = get_active_reminders([], 30, date(2024, 7, 12), global_reminders=[rent])
    assert [r.target_date for r in wide] == [date(2024, 7, 10), date(2024, 8, 10)]


def test_globals_follow_cards_on_same_day():
    rent = GlobalCustomReminder(id="g1", day_of_month=15, label="Rent", title="Rent")
    out = get_active_reminders([_card()], 5, date(2024, 7, 12), global_reminders=[rent])
    assert [r.target for r in out] == ["card", "global"]


def test_malformed_records_are_skipped():
    cards = [{"id": "x", "card_type": "Gold", "bill_generation_day": 12}, _card()]
    globals_ = [{"label": "", "title": "Gym", "day_of_month": 13}]
    out = get_active_reminders(cards, 5, date(2024, 7, 12), global_reminders=globals_)
    assert [r.card.id for r in out] == ["c1"]


def test_null_expiry_keeps_other_reminders():
    card = {"id": "c1", "card_type": "Credit", "bill_generation_day": 15, "expiry_date": None}
    out = get_active_reminders([card], 5, date(2024, 7, 12))
    assert [r.reason for r in out] == ["statement"]


def test_bad_custom_entry_only_drops_that_entry():
    card = {
        "id": "c1", "card_type": "Credit", "bill_generation_day": 15,
        "custom_reminders": [
            {"id": "x", "day_of_month": 3},
            {"id": "rent", "day_of_month": 13, "label": "Pay rent"},
        ],
    }
    out = get_active_reminders([card], 5, date(2024, 7, 12))
    assert [(r.reason, r.custom_id) for r in out] == [("custom", "rent"), ("statement", None)]


def test_out_of_range_billing_period_is_ignored():
    cards = [
        {"id": "c1", "card_type": "Credit", "bill_generation_day": 15, "billing_period_days": 10**7},
        {"id": "c2", "card_type": "Credit", "bill_generation_day": 15},
    ]
    out = get_active_reminders(cards, 5, date(2024, 7, 12))
    assert [(r.card.id, r.reason) for r in out] == [("c1", "statement"), ("c2", "statement")]


def test_card_that_overflows_dates_is_skipped_alone():
    broken = _card(billing_period_days=20)
    # Assignment bypasses validation
    broken.billing_period_days = 10**7
    out = get_active_reminders([broken, _card(id="c2")], 5, date(2024, 7, 12))
    assert [(r.card.id, r.reason) for r in out] == [("c2", "statement")]


def test_non_positive_billing_period_means_no_due_reminder():
    assert _card(billing_period_days=0).billing_period_days is None
    assert _card(billing_period_days=-5).billing_period_days is None
    out = get_active_reminders([_card(bill_generation_day=1, billing_period_days=0)], 5, date(2024, 2, 25))
    assert [r.reason for r in out] == ["statement"]


def test_duplicate_cards_do_not_duplicate_reminders():
    out = get_active_reminders([_card(), _card()], 5, date(2024, 7, 12))
    assert len(out) == 1


def test_short_month_clamping():
    out = get_active_reminders([_card(bill_generation_day=31)], 5, date(2024, 2, 27))
    assert out[0].target_date == date(2024, 2, 29)
    assert out[0].sublabel == "Statement on Feb 29"


def test_repeated_calls_are_identical():
    cards = [_card(expiry_date="07/27", billing_period_days=3), _card(id="c2", bill_generation_day=14)]
    first = get_active_reminders(cards, 10, datetime(2024, 7, 12, 8, 0))
    second = get_active_reminders(cards, 10, date(2024, 7, 12))
    assert first == second
    assert [r.target_date for r in first] == sorted(r.target_date for r in first)
