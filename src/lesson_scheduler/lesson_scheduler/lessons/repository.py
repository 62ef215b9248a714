from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LessonStatus
from .model import Lesson, NewLesson, RecurrenceRule


class LessonRepository(Protocol):
    def lock_teacher(self, teacher_id: int) -> bool:
        """Take the per-teacher booking lock for the current transaction.

        Returns False when the teacher does not exist.
        """

        raise NotImplementedError

    def get_by_id(self, lesson_id: int) -> Optional[Lesson]:
        raise NotImplementedError

    def get_many(self, lesson_ids: Sequence[int]) -> Sequence[Lesson]:
        raise NotImplementedError

    def list_bookings(
        self,
        *,
        teacher_id: int,
        start: datetime,
        end: datetime,
        room: Optional[str] = None,
    ) -> Sequence[Lesson]:
        """Non-cancelled occurrences of the teacher (or room) touching ``[start, end)``."""

        raise NotImplementedError

    def list_by_parent(self, parent_lesson_id: int) -> Sequence[Lesson]:
        raise NotImplementedError

    def create(
        self,
        lesson: NewLesson,
        *,
        is_template: bool = False,
        parent_lesson_id: Optional[int] = None,
        recurrence: Optional[RecurrenceRule] = None,
        status: LessonStatus = LessonStatus.SCHEDULED,
    ) -> int:
        raise NotImplementedError

    def update(self, lesson: Lesson) -> None:
        raise NotImplementedError

    def detach_children(self, parent_lesson_id: int) -> int:
        """Clear the back-reference on every occurrence of a template."""

        raise NotImplementedError

    def delete(self, lesson_id: int) -> bool:
        raise NotImplementedError
