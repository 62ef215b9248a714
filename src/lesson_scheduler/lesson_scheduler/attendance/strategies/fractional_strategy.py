from __future__ import annotations

from decimal import Decimal

from ...common.datetime_utils import quantize_hours
from .base import HoursStrategy


class FractionalStrategy(HoursStrategy):
    """Late arrival: a fixed fraction of the lesson counts."""

    def __init__(self, fraction: Decimal):
        self._fraction = Decimal(fraction)

    def hours_for(self, *, duration_hours: Decimal) -> Decimal:
        return quantize_hours(duration_hours * self._fraction)
