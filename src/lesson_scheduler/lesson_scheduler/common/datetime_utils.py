from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from ..core.constants import HOURS_QUANTUM, SECONDS_PER_HOUR
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing 'Z' is accepted.

    Aware values are converted to naive local time, the form DATETIME
    columns store.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid datetime: {value!r}")
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Invalid datetime: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def add_months(value: datetime, months: int, *, anchor_day: int | None = None) -> datetime:
    """Shift by whole calendar months, clamping to the last day of short months.

    ``anchor_day`` keeps a series on its original day of month (31 -> 30 -> 31)
    instead of drifting down after the first clamp.
    """

    day = anchor_day or value.day
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(day, last_day))


def hours_between(start: datetime, end: datetime) -> Decimal:
    seconds = Decimal(int((end - start).total_seconds()))
    return quantize_hours(seconds / SECONDS_PER_HOUR)


def quantize_hours(value: Decimal) -> Decimal:
    return Decimal(value).quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)
