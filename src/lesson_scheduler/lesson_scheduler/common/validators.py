from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from ..core.constants import HOURS_QUANTUM
from ..core.exceptions import ValidationError

_WEEKDAY_NAMES = {"MON": 0, "TUE": 1, "WED": 2, "THU": 3, "FRI": 4, "SAT": 5, "SUN": 6}


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, bool) or number <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def parse_decimal(value: Any, field_name: str, *, allow_none: bool = False) -> Optional[Decimal]:
    if value is None or value == "":
        if allow_none:
            return None
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def parse_amount(value: Any, field_name: str, *, maximum: Decimal, positive: bool = False) -> Decimal:
    """Finite decimal rounded to cents, within ``[0, maximum]`` (or ``(0, maximum]``)."""

    number = parse_decimal(value, field_name)
    # Bound before quantizing; quantize() overflows on very large exponents.
    if number < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    if number > maximum:
        raise ValidationError(f"{field_name} must be at most {maximum}")
    number = number.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)
    if positive and number == 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


def parse_weekdays(values: Optional[Iterable[Any]]) -> Optional[frozenset[int]]:
    """Weekdays as ``date.weekday()`` numbers (Monday = 0) or names like "MON"."""

    if values is None:
        return None
    if isinstance(values, (str, bytes)):
        raise ValidationError("weekdays must be a list")

    out: set[int] = set()
    for v in values:
        if isinstance(v, str) and v.strip()[:3].upper() in _WEEKDAY_NAMES:
            out.add(_WEEKDAY_NAMES[v.strip()[:3].upper()])
            continue
        try:
            day = int(v)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid weekday: {v!r}")
        if isinstance(v, bool) or not 0 <= day <= 6:
            raise ValidationError(f"Invalid weekday: {v!r}")
        out.add(day)
    return frozenset(out)


def parse_bool(value: Any) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
