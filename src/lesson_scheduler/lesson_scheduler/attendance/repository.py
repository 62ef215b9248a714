from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert(
        self,
        *,
        lesson_id: int,
        student_id: int,
        status: AttendanceStatus,
        hours_attended: Optional[Decimal],
        notes: Optional[str],
        recorded_at: datetime,
    ) -> AttendanceRecord:
        """Create or update the record keyed by (lesson_id, student_id)."""

        raise NotImplementedError

    def get(self, *, lesson_id: int, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_lesson(self, lesson_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def delete_for_lesson(self, lesson_id: int) -> int:
        raise NotImplementedError
