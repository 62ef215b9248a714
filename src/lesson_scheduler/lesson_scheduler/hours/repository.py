from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import HoursPackage


class HoursPackageRepository(Protocol):
    def create(
        self,
        *,
        student_id: int,
        course_id: int,
        total_hours: Decimal,
        purchase_date: datetime,
        expiry_date: Optional[datetime] = None,
        price: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, package_id: int) -> Optional[HoursPackage]:
        raise NotImplementedError

    def list_packages(
        self,
        *,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[HoursPackage]:
        """Newest purchase first."""

        raise NotImplementedError

    def lock_oldest_usable(self, *, student_id: int, course_id: int, now: datetime) -> Optional[HoursPackage]:
        """FIFO pick: oldest active, unexpired package, row-locked until commit."""

        raise NotImplementedError

    def update_balance(self, *, package_id: int, remaining_hours: Decimal, is_active: bool) -> bool:
        raise NotImplementedError

    def delete(self, package_id: int) -> bool:
        raise NotImplementedError
