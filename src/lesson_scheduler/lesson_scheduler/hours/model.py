from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional


@dataclass(frozen=True)
class HoursPackage:
    """Prepaid lesson-hours for one (student, course).

    ``0 <= remaining_hours <= total_hours``; only the attendance ledger
    changes the balance.
    """

    package_id: int
    student_id: int
    course_id: int
    total_hours: Decimal
    remaining_hours: Decimal
    purchase_date: datetime
    expiry_date: Optional[datetime] = None
    is_active: bool = True
    price: Optional[Decimal] = None
    notes: Optional[str] = None

    def is_usable(self, now: datetime) -> bool:
        return self.is_active and (self.expiry_date is None or self.expiry_date > now)

    @property
    def percentage_remaining(self) -> float:
        if self.total_hours <= 0:
            return 0.0
        return float(self.remaining_hours / self.total_hours * 100)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.package_id,
            "studentId": self.student_id,
            "courseId": self.course_id,
            "totalHours": float(self.total_hours),
            "remainingHours": float(self.remaining_hours),
            "percentageRemaining": round(self.percentage_remaining, 1),
            "purchaseDate": self.purchase_date.isoformat(),
            "expiryDate": self.expiry_date.isoformat() if self.expiry_date else None,
            "isActive": self.is_active,
            "price": float(self.price) if self.price is not None else None,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class LowBalanceEvent:
    """Outbound signal; delivery (email, push, ...) happens elsewhere."""

    student_id: int
    course_id: int
    remaining_hours: Decimal
    total_hours: Decimal
    package_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "studentId": self.student_id,
            "courseId": self.course_id,
            "remainingHours": float(self.remaining_hours),
            "totalHours": float(self.total_hours),
            "packageId": self.package_id,
        }
