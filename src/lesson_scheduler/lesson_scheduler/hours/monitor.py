from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from ..core.constants import DEFAULT_LOW_BALANCE_THRESHOLD

Number = Union[Decimal, int, float]


@dataclass(frozen=True)
class LowBalanceMonitor:
    """Level-triggered threshold check.

    Every qualifying deduction reports low again while the balance stays
    under the threshold. A balance of exactly zero is exhausted, not low.
    """

    threshold: Decimal = DEFAULT_LOW_BALANCE_THRESHOLD

    def is_low(self, remaining: Number, total: Number) -> bool:
        remaining = Decimal(str(remaining))
        total = Decimal(str(total))
        if total <= 0 or remaining <= 0:
            return False
        return remaining / total <= self.threshold


def is_low(remaining: Number, total: Number) -> bool:
    return LowBalanceMonitor().is_low(remaining, total)
