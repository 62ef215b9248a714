from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.enums import ConflictType
from ..core.exceptions import ConflictError
from .model import Conflict, Lesson, TimeWindow


@dataclass(frozen=True)
class ConflictDetector:
    """Pure overlap check of a candidate window against existing bookings.

    Every booking of the teacher is considered, on any day. Templates and
    cancelled lessons are not bookings. With a ``room``, lessons in the same
    room collide as well.
    """

    def find_conflicts(
        self,
        candidate: TimeWindow,
        bookings: Iterable[Lesson],
        *,
        teacher_id: int,
        room: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> list[Conflict]:
        out: list[Conflict] = []
        seen: set[int] = set()

        for b in bookings:
            if not b.is_booking or b.lesson_id == exclude_id or b.lesson_id in seen:
                continue
            if not candidate.overlaps(b.window):
                continue

            same_teacher = b.teacher_id == teacher_id
            same_room = bool(room) and b.room == room
            if not same_teacher and not same_room:
                continue

            if same_teacher and same_room:
                kind = ConflictType.BOTH
            elif same_teacher:
                kind = ConflictType.TEACHER
            else:
                kind = ConflictType.ROOM

            seen.add(b.lesson_id)
            out.append(
                Conflict(
                    lesson_id=b.lesson_id,
                    title=b.title,
                    start_time=b.start_time,
                    end_time=b.end_time,
                    teacher_id=b.teacher_id,
                    room=b.room,
                    conflict_type=kind,
                )
            )

        out.sort(key=lambda c: (c.start_time, c.lesson_id))
        return out

    def ensure_no_conflicts(
        self,
        candidate: TimeWindow,
        bookings: Iterable[Lesson],
        *,
        teacher_id: int,
        room: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> None:
        conflicts = self.find_conflicts(
            candidate, bookings, teacher_id=teacher_id, room=room, exclude_id=exclude_id
        )
        if conflicts:
            raise ConflictError(describe_conflicts(conflicts), conflicts)


def describe_conflicts(conflicts: list[Conflict]) -> str:
    ids = ", ".join(str(c.lesson_id) for c in conflicts)
    return f"Time slot overlaps existing lesson(s): {ids}"
