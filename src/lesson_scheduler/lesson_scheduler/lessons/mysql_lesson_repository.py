from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import LessonStatus
from ..database.mysql_base import fetchall, fetchone
from .model import Lesson, NewLesson, RecurrenceRule
from .repository import LessonRepository

_COLUMNS = """
    lesson_id, title, description, start_time, end_time, room,
    teacher_id, class_id, status, is_template, parent_lesson_id, recurrence_rule
"""


def _row_to_lesson(r: dict) -> Lesson:
    return Lesson(
        lesson_id=int(r["lesson_id"]),
        title=r["title"],
        description=r.get("description"),
        start_time=r["start_time"],
        end_time=r["end_time"],
        room=r.get("room"),
        teacher_id=int(r["teacher_id"]),
        class_id=int(r["class_id"]),
        status=LessonStatus(r["status"]),
        is_template=bool(r["is_template"]),
        parent_lesson_id=int(r["parent_lesson_id"]) if r.get("parent_lesson_id") is not None else None,
        recurrence=RecurrenceRule.from_json(r.get("recurrence_rule")),
    )


class MySQLLessonRepository(LessonRepository):
    """Lesson rows bound to the cursor of one open transaction."""

    def __init__(self, cur):
        self._cur = cur

    def lock_teacher(self, teacher_id: int) -> bool:
        self._cur.execute("SELECT teacher_id FROM teachers WHERE teacher_id=%s FOR UPDATE", (int(teacher_id),))
        return fetchone(self._cur) is not None

    def get_by_id(self, lesson_id: int) -> Optional[Lesson]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM lessons WHERE lesson_id=%s", (int(lesson_id),))
        r = fetchone(self._cur)
        return _row_to_lesson(r) if r else None

    def get_many(self, lesson_ids: Sequence[int]) -> Sequence[Lesson]:
        ids = [int(i) for i in lesson_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM lessons WHERE lesson_id IN ({placeholders}) ORDER BY start_time ASC",
            tuple(ids),
        )
        return [_row_to_lesson(r) for r in fetchall(self._cur)]

    def list_bookings(
        self,
        *,
        teacher_id: int,
        start: datetime,
        end: datetime,
        room: Optional[str] = None,
    ) -> Sequence[Lesson]:
        clauses = [
            "is_template=0",
            "status<>%s",
            "start_time < %s",
            "end_time > %s",
        ]
        params: list[object] = [LessonStatus.CANCELLED.value, end, start]

        if room:
            clauses.append("(teacher_id=%s OR room=%s)")
            params.extend([int(teacher_id), room])
        else:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))

        where = " AND ".join(clauses)
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM lessons WHERE {where} ORDER BY start_time ASC",
            tuple(params),
        )
        return [_row_to_lesson(r) for r in fetchall(self._cur)]

    def list_by_parent(self, parent_lesson_id: int) -> Sequence[Lesson]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM lessons WHERE parent_lesson_id=%s ORDER BY start_time ASC",
            (int(parent_lesson_id),),
        )
        return [_row_to_lesson(r) for r in fetchall(self._cur)]

    def create(
        self,
        lesson: NewLesson,
        *,
        is_template: bool = False,
        parent_lesson_id: Optional[int] = None,
        recurrence: Optional[RecurrenceRule] = None,
        status: LessonStatus = LessonStatus.SCHEDULED,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO lessons(
                title, description, start_time, end_time, room,
                teacher_id, class_id, status, is_template, parent_lesson_id, recurrence_rule
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                lesson.title,
                lesson.description,
                lesson.start_time,
                lesson.end_time,
                lesson.room,
                int(lesson.teacher_id),
                int(lesson.class_id),
                status.value,
                1 if is_template else 0,
                parent_lesson_id,
                recurrence.to_json() if recurrence else None,
            ),
        )
        return int(self._cur.lastrowid)

    def update(self, lesson: Lesson) -> None:
        self._cur.execute(
            """
            UPDATE lessons
            SET title=%s, description=%s, start_time=%s, end_time=%s, room=%s, status=%s
            WHERE lesson_id=%s
            """,
            (
                lesson.title,
                lesson.description,
                lesson.start_time,
                lesson.end_time,
                lesson.room,
                lesson.status.value,
                int(lesson.lesson_id),
            ),
        )

    def detach_children(self, parent_lesson_id: int) -> int:
        self._cur.execute(
            "UPDATE lessons SET parent_lesson_id=NULL WHERE parent_lesson_id=%s",
            (int(parent_lesson_id),),
        )
        return int(self._cur.rowcount)

    def delete(self, lesson_id: int) -> bool:
        self._cur.execute("DELETE FROM lessons WHERE lesson_id=%s", (int(lesson_id),))
        return self._cur.rowcount > 0
