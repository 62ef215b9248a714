from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.mysql_base import as_decimal, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        lesson_id=int(r["lesson_id"]),
        student_id=int(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        hours_attended=as_decimal(r.get("hours_attended")),
        notes=r.get("notes"),
        recorded_at=r.get("recorded_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, cur):
        self._cur = cur

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
        # The unique key (lesson_id, student_id) serializes concurrent writers;
        # the second one updates the row the first one created.
        self._cur.execute(
            """
            INSERT INTO attendance_records(lesson_id, student_id, status, hours_attended, notes, recorded_at)
            VALUES(%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                status=VALUES(status),
                hours_attended=VALUES(hours_attended),
                notes=VALUES(notes),
                recorded_at=VALUES(recorded_at)
            """,
            (int(lesson_id), int(student_id), status.value, hours_attended, notes, recorded_at),
        )

        rec = self.get(lesson_id=lesson_id, student_id=student_id)
        if rec is None:
            raise RuntimeError(f"Attendance upsert for lesson={lesson_id} student={student_id} not visible")
        return rec

    def get(self, *, lesson_id: int, student_id: int) -> Optional[AttendanceRecord]:
        self._cur.execute(
            """
            SELECT attendance_id, lesson_id, student_id, status, hours_attended, notes, recorded_at
            FROM attendance_records
            WHERE lesson_id=%s AND student_id=%s
            """,
            (int(lesson_id), int(student_id)),
        )
        r = fetchone(self._cur)
        return _row_to_record(r) if r else None

    def list_for_lesson(self, lesson_id: int) -> Sequence[AttendanceRecord]:
        self._cur.execute(
            """
            SELECT attendance_id, lesson_id, student_id, status, hours_attended, notes, recorded_at
            FROM attendance_records
            WHERE lesson_id=%s
            ORDER BY student_id ASC
            """,
            (int(lesson_id),),
        )
        return [_row_to_record(r) for r in fetchall(self._cur)]

    def delete_for_lesson(self, lesson_id: int) -> int:
        self._cur.execute("DELETE FROM attendance_records WHERE lesson_id=%s", (int(lesson_id),))
        return int(self._cur.rowcount)
