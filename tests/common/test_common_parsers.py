from datetime import date, datetime
from decimal import Decimal

import pytest

from src.lesson_scheduler.lesson_scheduler.common.datetime_utils import (
    add_months,
    hours_between,
    parse_iso_date,
    parse_iso_datetime,
)
from src.lesson_scheduler.lesson_scheduler.common.validators import (
    parse_bool,
    parse_decimal,
    parse_weekdays,
    require_positive_int,
)
from src.lesson_scheduler.lesson_scheduler.core.exceptions import ValidationError


def test_parse_iso_datetime_naive_and_invalid():
    assert parse_iso_datetime("2024-01-01T09:00:00") == datetime(2024, 1, 1, 9, 0)
    assert parse_iso_datetime("2024-01-01T09:00:00Z").tzinfo is None
    with pytest.raises(ValidationError):
        parse_iso_datetime("next monday")


def test_parse_iso_date():
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        parse_iso_date("2024-02-30")


def test_add_months_anchor_restores_day():
    feb = add_months(datetime(2024, 1, 31, 9, 0), 1)

    assert feb == datetime(2024, 2, 29, 9, 0)
    assert add_months(feb, 1, anchor_day=31) == datetime(2024, 3, 31, 9, 0)


def test_hours_between_is_quantized():
    assert hours_between(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 9, 20)) == Decimal("0.33")


def test_parse_weekdays_accepts_numbers_and_names():
    assert parse_weekdays([0, "WED", "friday"]) == frozenset({0, 2, 4})
    assert parse_weekdays(None) is None
    for bad in (["XYZ"], [7], "MON", [True]):
        with pytest.raises(ValidationError):
            parse_weekdays(bad)


def test_require_positive_int():
    assert require_positive_int("5", "id") == 5
    for bad in (0, -1, "abc", None, True):
        with pytest.raises(ValidationError):
            require_positive_int(bad, "id")


def test_parse_decimal_and_bool():
    assert parse_decimal("1.25", "hours") == Decimal("1.25")
    assert parse_decimal(None, "hours", allow_none=True) is None
    with pytest.raises(ValidationError):
        parse_decimal("NaN", "hours")
    assert parse_bool("1") is True
    assert parse_bool("false") is False
    assert parse_bool(None) is None
