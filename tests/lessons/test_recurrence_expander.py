from datetime import date, datetime, timedelta

import pytest

from src.lesson_scheduler.lesson_scheduler.core.enums import RecurrenceFrequency
from src.lesson_scheduler.lesson_scheduler.core.exceptions import ValidationError
from src.lesson_scheduler.lesson_scheduler.lessons.model import RecurrenceRule, TimeWindow
from src.lesson_scheduler.lesson_scheduler.lessons.recurrence import RecurrenceExpander

WEEKLY = RecurrenceFrequency.WEEKLY
MONTHLY = RecurrenceFrequency.MONTHLY


def _window(start: datetime, minutes: int = 60) -> TimeWindow:
    return TimeWindow(start, start + timedelta(minutes=minutes))


def test_max_occurrences_without_end_date_gives_exactly_n_windows():
    window = _window(datetime(2024, 1, 3, 9, 0), minutes=90)
    out = RecurrenceExpander().expand(window, RecurrenceRule(frequency=WEEKLY, max_occurrences=5))

    assert len(out) == 5
    assert all(w.duration == timedelta(minutes=90) for w in out)
    assert [w.start.date() for w in out] == [date(2024, 1, 3) + timedelta(weeks=i) for i in range(5)]


def test_weekly_interval_two_skips_a_week():
    out = RecurrenceExpander().expand(
        _window(datetime(2024, 1, 1, 9, 0)), RecurrenceRule(frequency=WEEKLY, interval=2, max_occurrences=3)
    )

    assert [w.start for w in out] == [
        datetime(2024, 1, 1, 9, 0),
        datetime(2024, 1, 15, 9, 0),
        datetime(2024, 1, 29, 9, 0),
    ]


def test_mondays_only_until_end_date():
    rule = RecurrenceRule(frequency=WEEKLY, weekdays=frozenset({0}), end_date=date(2024, 1, 28))
    out = RecurrenceExpander().expand(_window(datetime(2024, 1, 1, 9, 0)), rule)

    assert [(w.start, w.end) for w in out] == [
        (datetime(2024, 1, d, 9, 0), datetime(2024, 1, d, 10, 0)) for d in (1, 8, 15, 22)
    ]


def test_weekdays_restrict_start_days():
    rule = RecurrenceRule(frequency=WEEKLY, weekdays=frozenset({1, 3}), max_occurrences=6)
    out = RecurrenceExpander().expand(_window(datetime(2024, 1, 1, 17, 0)), rule)

    assert len(out) == 6
    assert {w.start.weekday() for w in out} == {1, 3}
    assert out[0].start == datetime(2024, 1, 2, 17, 0)


def test_weekdays_with_interval_emit_only_in_every_nth_week():
    rule = RecurrenceRule(frequency=WEEKLY, interval=2, weekdays=frozenset({0, 2}), max_occurrences=4)
    out = RecurrenceExpander().expand(_window(datetime(2024, 1, 1, 9, 0)), rule)

    assert [w.start.date() for w in out] == [
        date(2024, 1, 1),
        date(2024, 1, 3),
        date(2024, 1, 15),
        date(2024, 1, 17),
    ]


def test_end_date_is_inclusive():
    rule = RecurrenceRule(frequency=WEEKLY, end_date=date(2024, 1, 15))
    out = RecurrenceExpander().expand(_window(datetime(2024, 1, 1, 9, 0)), rule)

    assert out[-1].start.date() == date(2024, 1, 15)
    assert len(out) == 3


def test_end_date_before_start_gives_no_windows():
    rule = RecurrenceRule(frequency=WEEKLY, end_date=date(2023, 12, 31))

    assert RecurrenceExpander().expand(_window(datetime(2024, 1, 1, 9, 0)), rule) == []


def test_hard_cap_applies_when_rule_asks_for_more():
    out = RecurrenceExpander(cap=52).expand(
        _window(datetime(2024, 1, 1, 9, 0)), RecurrenceRule(frequency=WEEKLY, max_occurrences=500)
    )

    assert len(out) == 52


def test_default_cap_without_any_termination():
    out = RecurrenceExpander().expand(_window(datetime(2024, 1, 1, 9, 0)), RecurrenceRule(frequency=WEEKLY))

    assert len(out) == 52


def test_monthly_clamps_to_month_end_without_drifting():
    rule = RecurrenceRule(frequency=MONTHLY, max_occurrences=4)
    out = RecurrenceExpander().expand(_window(datetime(2024, 1, 31, 18, 0)), rule)

    assert [w.start.date() for w in out] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
    ]


def test_monthly_interval_crosses_year_boundary():
    rule = RecurrenceRule(frequency=MONTHLY, interval=5, max_occurrences=3)
    out = RecurrenceExpander().expand(_window(datetime(2024, 10, 15, 9, 0)), rule)

    assert [w.start.date() for w in out] == [date(2024, 10, 15), date(2025, 3, 15), date(2025, 8, 15)]


@pytest.mark.parametrize(
    "rule",
    [
        RecurrenceRule(frequency=WEEKLY, interval=0),
        RecurrenceRule(frequency=WEEKLY, weekdays=frozenset()),
        RecurrenceRule(frequency=WEEKLY, weekdays=frozenset({7})),
        RecurrenceRule(frequency=MONTHLY, weekdays=frozenset({0})),
        RecurrenceRule(frequency=WEEKLY, max_occurrences=0),
        RecurrenceRule(frequency="daily"),
    ],
)
def test_malformed_rules_are_rejected(rule):
    with pytest.raises(ValidationError):
        RecurrenceExpander().expand(_window(datetime(2024, 1, 1, 9, 0)), rule)


def test_time_window_requires_end_after_start():
    start = datetime(2024, 1, 1, 9, 0)
    with pytest.raises(ValidationError):
        TimeWindow(start, start)


def test_rule_json_round_trip_keeps_weekdays_and_end_date():
    rule = RecurrenceRule(frequency=WEEKLY, interval=2, weekdays=frozenset({0, 4}), end_date=date(2024, 6, 30))

    assert RecurrenceRule.from_json(rule.to_json()) == rule
    assert RecurrenceRule.from_json(None) is None
