from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..core.constants import DEFAULT_LATE_HOURS_FRACTION
from ..core.enums import AttendanceStatus
from .strategies.base import HoursStrategy
from .strategies.fractional_strategy import FractionalStrategy
from .strategies.full_duration_strategy import FullDurationStrategy
from .strategies.no_hours_strategy import NoHoursStrategy


@dataclass
class HoursStrategyFactory:
    """Factory Pattern: choose the hours rule for an attendance status."""

    late_fraction: Decimal = DEFAULT_LATE_HOURS_FRACTION

    def for_status(self, status: AttendanceStatus) -> HoursStrategy:
        if status == AttendanceStatus.PRESENT:
            return FullDurationStrategy()
        if status == AttendanceStatus.LATE:
            return FractionalStrategy(self.late_fraction)
        return NoHoursStrategy()
