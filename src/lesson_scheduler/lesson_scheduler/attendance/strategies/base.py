from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class HoursStrategy(ABC):
    """Strategy Pattern: decide how many hours an attendance status consumes."""

    @abstractmethod
    def hours_for(self, *, duration_hours: Decimal) -> Decimal:
        raise NotImplementedError
