from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .constants import (
    DEFAULT_DB_RETRY_ATTEMPTS,
    DEFAULT_DB_RETRY_BACKOFF_SECONDS,
    DEFAULT_LATE_HOURS_FRACTION,
    DEFAULT_LOW_BALANCE_THRESHOLD,
    DEFAULT_MAX_OCCURRENCES,
)


@dataclass(frozen=True)
class SchedulingPolicy:
    """Tunable business rules, read once from the settings module."""

    max_occurrences: int = DEFAULT_MAX_OCCURRENCES
    late_hours_fraction: Decimal = DEFAULT_LATE_HOURS_FRACTION
    low_balance_threshold: Decimal = DEFAULT_LOW_BALANCE_THRESHOLD
    enforce_room_conflicts: bool = False
    retry_attempts: int = DEFAULT_DB_RETRY_ATTEMPTS
    retry_backoff_seconds: float = DEFAULT_DB_RETRY_BACKOFF_SECONDS

    @classmethod
    def from_settings(cls, settings: Any) -> "SchedulingPolicy":
        return cls(
            max_occurrences=int(getattr(settings, "MAX_OCCURRENCES", DEFAULT_MAX_OCCURRENCES)),
            late_hours_fraction=Decimal(str(getattr(settings, "LATE_HOURS_FRACTION", DEFAULT_LATE_HOURS_FRACTION))),
            low_balance_threshold=Decimal(
                str(getattr(settings, "LOW_BALANCE_THRESHOLD", DEFAULT_LOW_BALANCE_THRESHOLD))
            ),
            enforce_room_conflicts=bool(getattr(settings, "ENFORCE_ROOM_CONFLICTS", False)),
            retry_attempts=int(getattr(settings, "DB_RETRY_ATTEMPTS", DEFAULT_DB_RETRY_ATTEMPTS)),
            retry_backoff_seconds=float(
                getattr(settings, "DB_RETRY_BACKOFF_SECONDS", DEFAULT_DB_RETRY_BACKOFF_SECONDS)
            ),
        )
