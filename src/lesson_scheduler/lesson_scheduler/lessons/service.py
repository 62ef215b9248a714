from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.validators import optional_text, require_non_empty, require_positive_int
from ..core.enums import LessonStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.store import Store, StoreSession
from .conflicts import ConflictDetector, describe_conflicts
from .model import Conflict, Lesson, LessonPatch, NewLesson, RecurrenceRule, SeriesResult, TimeWindow
from .recurrence import RecurrenceExpander

logger = logging.getLogger(__name__)


class LessonService:
    """Scheduling use cases: series creation, single lessons and edits.

    Every write that can create an overlap runs inside one store session that
    first locks the teacher row, so the conflict scan and the insert/update
    see the same state.
    """

    def __init__(
        self,
        store: Store,
        *,
        expander: Optional[RecurrenceExpander] = None,
        detector: Optional[ConflictDetector] = None,
        enforce_room_conflicts: bool = False,
    ):
        self._store = store
        self._expander = expander or RecurrenceExpander()
        self._detector = detector or ConflictDetector()
        self._enforce_room_conflicts = bool(enforce_room_conflicts)

    # -------- Creation --------
    def create_series(self, lesson: NewLesson, rule: RecurrenceRule) -> SeriesResult:
        lesson = self._validated(lesson)
        windows = self._expander.expand(lesson.window, rule)
        if not windows:
            raise ValidationError("Recurrence rule produced no lessons")

        # Windows are sorted and share one duration, so neighbours are enough.
        for a, b in zip(windows, windows[1:]):
            if a.overlaps(b):
                raise ValidationError("Generated lessons overlap each other; shorten the lesson or change the rule")

        with self._store.session() as s:
            self._require_class(s, lesson.class_id)
            self._lock_teacher(s, lesson.teacher_id)

            room = self._room_for_check(lesson.room)
            bookings = s.lessons.list_bookings(
                teacher_id=lesson.teacher_id,
                start=windows[0].start,
                end=windows[-1].end,
                room=room,
            )

            conflicts: dict[int, Conflict] = {}
            for w in windows:
                for c in self._detector.find_conflicts(w, bookings, teacher_id=lesson.teacher_id, room=room):
                    conflicts.setdefault(c.lesson_id, c)
            if conflicts:
                found = sorted(conflicts.values(), key=lambda c: (c.start_time, c.lesson_id))
                raise ConflictError(describe_conflicts(found), found)

            template_id = s.lessons.create(lesson, is_template=True, recurrence=rule)
            for w in windows:
                s.lessons.create(
                    replace(lesson, start_time=w.start, end_time=w.end),
                    parent_lesson_id=template_id,
                    recurrence=rule,
                )

            template = s.lessons.get_by_id(template_id)
            occurrences = list(s.lessons.list_by_parent(template_id))

        logger.info(
            "Created lesson series %s with %d occurrences for teacher %s",
            template_id,
            len(occurrences),
            lesson.teacher_id,
        )
        return SeriesResult(template=template, occurrences=occurrences)

    def create_lesson(self, lesson: NewLesson) -> Lesson:
        lesson = self._validated(lesson)
        window = lesson.window

        with self._store.session() as s:
            self._require_class(s, lesson.class_id)
            self._lock_teacher(s, lesson.teacher_id)
            self._ensure_free(s, window, teacher_id=lesson.teacher_id, room=lesson.room)

            lesson_id = s.lessons.create(lesson)
            created = s.lessons.get_by_id(lesson_id)

        logger.info("Created lesson %s for teacher %s", lesson_id, lesson.teacher_id)
        return created

    # -------- Reads --------
    def get_lesson(self, lesson_id: int) -> Lesson:
        with self._store.session() as s:
            lesson = s.lessons.get_by_id(int(lesson_id))
        if lesson is None:
            raise NotFoundError(f"Lesson {lesson_id} not found")
        return lesson

    def list_series(self, template_id: int) -> SeriesResult:
        with self._store.session() as s:
            template = self._require_template(s, template_id)
            occurrences = list(s.lessons.list_by_parent(template.lesson_id))
        return SeriesResult(template=template, occurrences=occurrences)

    def check_conflicts(
        self,
        window: TimeWindow,
        *,
        teacher_id: int,
        room: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> list[Conflict]:
        """Read-only report; room collisions are always reported here."""

        with self._store.session() as s:
            bookings = s.lessons.list_bookings(teacher_id=teacher_id, start=window.start, end=window.end, room=room)
        return self._detector.find_conflicts(
            window, bookings, teacher_id=teacher_id, room=room, exclude_id=exclude_id
        )

    # -------- Edits --------
    def update_occurrence(self, lesson_id: int, patch: LessonPatch) -> Lesson:
        with self._store.session() as s:
            current = self._require_occurrence(s, lesson_id)
            if patch.is_empty():
                return current

            self._apply_patch(s, current, patch)
            updated = s.lessons.get_by_id(current.lesson_id)

        logger.info("Updated lesson %s", lesson_id)
        return updated

    def cancel_occurrence(self, lesson_id: int) -> Lesson:
        return self.update_occurrence(lesson_id, LessonPatch(status=LessonStatus.CANCELLED))

    def bulk_update(self, lesson_ids: Sequence[int], patch: LessonPatch) -> list[Lesson]:
        ids = self._normalize_ids(lesson_ids)
        if patch.is_empty():
            raise ValidationError("Nothing to update")

        with self._store.session() as s:
            lessons = self._require_all(s, ids)
            for current in lessons:
                if current.is_template:
                    raise ValidationError(f"Lesson {current.lesson_id} is a series template")
                # Earlier writes in this session are visible to later conflict scans.
                self._apply_patch(s, current, patch)
            updated = list(s.lessons.get_many(ids))

        logger.info("Bulk updated %d lessons", len(updated))
        return updated

    # -------- Deletion --------
    def delete_occurrence(self, lesson_id: int) -> None:
        with self._store.session() as s:
            current = self._require_occurrence(s, lesson_id)
            s.attendance.delete_for_lesson(current.lesson_id)
            s.lessons.delete(current.lesson_id)

        logger.info("Deleted lesson %s", lesson_id)

    def delete_template(self, template_id: int, *, cascade: bool = False) -> int:
        """Delete a series template.

        Default policy orphans the materialized occurrences (their
        ``parent_lesson_id`` becomes NULL). With ``cascade`` they are deleted
        together with their attendance. Returns the number of occurrences
        affected.
        """

        with self._store.session() as s:
            template = self._require_template(s, template_id)
            children = list(s.lessons.list_by_parent(template.lesson_id))

            if cascade:
                for child in children:
                    s.attendance.delete_for_lesson(child.lesson_id)
                    s.lessons.delete(child.lesson_id)
            else:
                s.lessons.detach_children(template.lesson_id)

            s.lessons.delete(template.lesson_id)

        logger.info(
            "Deleted series template %s (%s %d occurrences)",
            template_id,
            "deleted" if cascade else "orphaned",
            len(children),
        )
        return len(children)

    def bulk_delete(self, lesson_ids: Sequence[int]) -> int:
        ids = self._normalize_ids(lesson_ids)

        with self._store.session() as s:
            lessons = self._require_all(s, ids)
            for lesson in lessons:
                if lesson.is_template:
                    s.lessons.detach_children(lesson.lesson_id)
                s.attendance.delete_for_lesson(lesson.lesson_id)
                s.lessons.delete(lesson.lesson_id)

        logger.info("Bulk deleted %d lessons", len(lessons))
        return len(lessons)

    # -------- Helpers --------
    def _apply_patch(self, s: StoreSession, current: Lesson, patch: LessonPatch) -> None:
        description = patch.description if patch.description is not None else current.description
        room = patch.room if patch.room is not None else current.room
        updated = replace(
            current,
            title=require_non_empty(patch.title, "title") if patch.title is not None else current.title,
            description=None if patch.clear_description else optional_text(description),
            start_time=patch.start_time or current.start_time,
            end_time=patch.end_time or current.end_time,
            room=None if patch.clear_room else optional_text(room),
            status=patch.status or current.status,
        )
        window = updated.window

        reactivated = current.status == LessonStatus.CANCELLED and updated.status != LessonStatus.CANCELLED
        room_moved = self._enforce_room_conflicts and updated.room != current.room
        if updated.is_booking and (patch.moves_window or reactivated or room_moved):
            self._lock_teacher(s, updated.teacher_id)
            self._ensure_free(
                s, window, teacher_id=updated.teacher_id, room=updated.room, exclude_id=updated.lesson_id
            )

        s.lessons.update(updated)

    def _ensure_free(
        self,
        s: StoreSession,
        window: TimeWindow,
        *,
        teacher_id: int,
        room: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        room = self._room_for_check(room)
        bookings = s.lessons.list_bookings(teacher_id=teacher_id, start=window.start, end=window.end, room=room)
        self._detector.ensure_no_conflicts(window, bookings, teacher_id=teacher_id, room=room, exclude_id=exclude_id)

    def _room_for_check(self, room: Optional[str]) -> Optional[str]:
        return room if self._enforce_room_conflicts else None

    @staticmethod
    def _validated(lesson: NewLesson) -> NewLesson:
        return replace(
            lesson,
            title=require_non_empty(lesson.title, "title"),
            teacher_id=require_positive_int(lesson.teacher_id, "teacherId"),
            class_id=require_positive_int(lesson.class_id, "classId"),
        )

    @staticmethod
    def _normalize_ids(lesson_ids: Sequence[int]) -> list[int]:
        if not lesson_ids:
            raise ValidationError("lessonIds must be a non-empty list")
        ids: list[int] = []
        for i in lesson_ids:
            lesson_id = require_positive_int(i, "lessonIds")
            if lesson_id not in ids:
                ids.append(lesson_id)
        return ids

    @staticmethod
    def _require_class(s: StoreSession, class_id: int) -> None:
        if s.classes.get_by_id(class_id) is None:
            raise NotFoundError(f"Class {class_id} not found")

    @staticmethod
    def _lock_teacher(s: StoreSession, teacher_id: int) -> None:
        if not s.lessons.lock_teacher(teacher_id):
            raise NotFoundError(f"Teacher {teacher_id} not found")

    @staticmethod
    def _require_occurrence(s: StoreSession, lesson_id: int) -> Lesson:
        lesson = s.lessons.get_by_id(int(lesson_id))
        if lesson is None or lesson.is_template:
            raise NotFoundError(f"Lesson {lesson_id} not found")
        return lesson

    @staticmethod
    def _require_template(s: StoreSession, template_id: int) -> Lesson:
        lesson = s.lessons.get_by_id(int(template_id))
        if lesson is None or not lesson.is_template:
            raise NotFoundError(f"Series template {template_id} not found")
        return lesson

    @staticmethod
    def _require_all(s: StoreSession, ids: list[int]) -> list[Lesson]:
        lessons = list(s.lessons.get_many(ids))
        missing = sorted(set(ids) - {lesson.lesson_id for lesson in lessons})
        if missing:
            raise NotFoundError(f"Lessons not found: {', '.join(str(i) for i in missing)}")
        return lessons
