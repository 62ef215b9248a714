from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, parse_amount, require_positive_int
from ..core.constants import MAX_PACKAGE_HOURS, MAX_PRICE
from ..core.exceptions import NotFoundError, ValidationError
from ..database.store import Store
from .model import HoursPackage
from .monitor import LowBalanceMonitor

logger = logging.getLogger(__name__)


class HoursPackageService:
    def __init__(
        self,
        store: Store,
        *,
        monitor: Optional[LowBalanceMonitor] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._monitor = monitor or LowBalanceMonitor()
        self._clock = clock

    def create_package(
        self,
        *,
        student_id: int,
        course_id: int,
        total_hours: Decimal,
        expiry_date: Optional[datetime] = None,
        price: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> HoursPackage:
        student_id = require_positive_int(student_id, "studentId")
        course_id = require_positive_int(course_id, "courseId")
        total_hours = parse_amount(total_hours, "totalHours", maximum=MAX_PACKAGE_HOURS, positive=True)
        if price is not None:
            price = parse_amount(price, "price", maximum=MAX_PRICE)

        now = self._clock()
        if expiry_date is not None and expiry_date <= now:
            raise ValidationError("expiryDate must be in the future")

        with self._store.session() as s:
            package_id = s.packages.create(
                student_id=student_id,
                course_id=course_id,
                total_hours=total_hours,
                purchase_date=now,
                expiry_date=expiry_date,
                price=price,
                notes=optional_text(notes),
            )
            package = s.packages.get_by_id(package_id)

        logger.info("Created hours package %s (%s h) for student %s", package_id, total_hours, student_id)
        return package

    def get_package(self, package_id: int) -> HoursPackage:
        with self._store.session() as s:
            package = s.packages.get_by_id(int(package_id))
        if package is None:
            raise NotFoundError(f"Hours package {package_id} not found")
        return package

    def list_packages(
        self,
        *,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> list[HoursPackage]:
        with self._store.session() as s:
            return list(s.packages.list_packages(student_id=student_id, course_id=course_id, is_active=is_active))

    def delete_package(self, package_id: int) -> None:
        with self._store.session() as s:
            if not s.packages.delete(int(package_id)):
                raise NotFoundError(f"Hours package {package_id} not found")
        logger.info("Deleted hours package %s", package_id)

    def list_low_balance(self) -> list[HoursPackage]:
        """Active packages currently under the low-balance threshold."""

        return [
            p
            for p in self.list_packages(is_active=True)
            if self._monitor.is_low(p.remaining_hours, p.total_hours)
        ]
