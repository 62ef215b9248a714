from __future__ import annotations

from decimal import Decimal

from .base import HoursStrategy


class NoHoursStrategy(HoursStrategy):
    """Absent or excused: nothing is consumed."""

    def hours_for(self, *, duration_hours: Decimal) -> Decimal:
        return Decimal("0")
