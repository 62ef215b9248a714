from decimal import Decimal

import pytest

from src.lesson_scheduler.lesson_scheduler.hours.monitor import LowBalanceMonitor, is_low


@pytest.mark.parametrize(
    "remaining,total,expected",
    [
        (1, 10, True),
        (2, 10, True),
        (3, 10, False),
        (0, 10, False),
        (5, 0, False),
        (Decimal("0.01"), Decimal("10"), True),
    ],
)
def test_is_low(remaining, total, expected):
    assert is_low(remaining, total) is expected


def test_threshold_is_configurable():
    monitor = LowBalanceMonitor(threshold=Decimal("0.5"))

    assert monitor.is_low(5, 10) is True
    assert monitor.is_low(6, 10) is False
