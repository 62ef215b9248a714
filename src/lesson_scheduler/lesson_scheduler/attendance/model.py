from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance at one lesson occurrence."""

    attendance_id: int
    lesson_id: int
    student_id: int
    status: AttendanceStatus
    hours_attended: Optional[Decimal] = None
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.attendance_id,
            "lessonId": self.lesson_id,
            "studentId": self.student_id,
            "status": self.status.value,
            "hoursAttended": float(self.hours_attended) if self.hours_attended is not None else None,
            "notes": self.notes,
            "recordedAt": self.recorded_at.isoformat() if self.recorded_at else None,
        }
