from __future__ import annotations

from typing import Optional

from ..database.mysql_base import fetchone
from .model import SchoolClass
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        self._cur.execute(
            "SELECT class_id, name, course_id FROM classes WHERE class_id=%s",
            (int(class_id),),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return SchoolClass(
            class_id=int(r["class_id"]),
            name=r["name"],
            course_id=int(r["course_id"]) if r.get("course_id") is not None else None,
        )

    def is_enrolled(self, *, student_id: int, class_id: int) -> bool:
        self._cur.execute(
            """
            SELECT 1 AS enrolled
            FROM class_enrollments
            WHERE student_id=%s AND class_id=%s AND is_active=1
            """,
            (int(student_id), int(class_id)),
        )
        return fetchone(self._cur) is not None
