"""Boundary facade: every operation returns an ``OperationResult``.

Domain errors come back as typed failures; lock contention is retried with
backoff and, once retries run out, reported as a generic internal error.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional, Sequence, TypeVar

from .attendance.model import AttendanceRecord
from .attendance.service import AttendanceLedger
from .common.retry import run_operation
from .core.enums import AttendanceStatus
from .core.policy import SchedulingPolicy
from .core.result import OperationResult
from .hours.model import HoursPackage
from .hours.service import HoursPackageService
from .lessons.model import Conflict, Lesson, LessonPatch, NewLesson, RecurrenceRule, SeriesResult, TimeWindow
from .lessons.service import LessonService

T = TypeVar("T")


class SchedulingApi:
    def __init__(
        self,
        lessons: LessonService,
        ledger: AttendanceLedger,
        packages: HoursPackageService,
        *,
        policy: Optional[SchedulingPolicy] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self._lessons = lessons
        self._ledger = ledger
        self._packages = packages
        self._policy = policy or SchedulingPolicy()
        self._sleep = sleep

    def _run(self, op_name: str, func: Callable[[], T]) -> OperationResult[T]:
        kwargs = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return run_operation(
            op_name,
            func,
            max_attempts=self._policy.retry_attempts,
            backoff_seconds=self._policy.retry_backoff_seconds,
            **kwargs,
        )

    # Lessons
    def create_series(self, template: NewLesson, rule: RecurrenceRule) -> OperationResult[SeriesResult]:
        return self._run("create_series", lambda: self._lessons.create_series(template, rule))

    def create_lesson(self, lesson: NewLesson) -> OperationResult[Lesson]:
        return self._run("create_lesson", lambda: self._lessons.create_lesson(lesson))

    def get_lesson(self, lesson_id: int) -> OperationResult[Lesson]:
        return self._run("get_lesson", lambda: self._lessons.get_lesson(lesson_id))

    def list_series(self, template_id: int) -> OperationResult[SeriesResult]:
        return self._run("list_series", lambda: self._lessons.list_series(template_id))

    def update_occurrence(self, lesson_id: int, patch: LessonPatch) -> OperationResult[Lesson]:
        return self._run("update_occurrence", lambda: self._lessons.update_occurrence(lesson_id, patch))

    def cancel_occurrence(self, lesson_id: int) -> OperationResult[Lesson]:
        return self._run("cancel_occurrence", lambda: self._lessons.cancel_occurrence(lesson_id))

    def delete_occurrence(self, lesson_id: int) -> OperationResult[None]:
        return self._run("delete_occurrence", lambda: self._lessons.delete_occurrence(lesson_id))

    def delete_template(self, template_id: int, *, cascade: bool = False) -> OperationResult[int]:
        return self._run("delete_template", lambda: self._lessons.delete_template(template_id, cascade=cascade))

    def check_conflicts(
        self,
        window: TimeWindow,
        *,
        teacher_id: int,
        room: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> OperationResult[list[Conflict]]:
        return self._run(
            "check_conflicts",
            lambda: self._lessons.check_conflicts(window, teacher_id=teacher_id, room=room, exclude_id=exclude_id),
        )

    def bulk_update(self, lesson_ids: Sequence[int], patch: LessonPatch) -> OperationResult[list[Lesson]]:
        return self._run("bulk_update", lambda: self._lessons.bulk_update(lesson_ids, patch))

    def bulk_delete(self, lesson_ids: Sequence[int]) -> OperationResult[int]:
        return self._run("bulk_delete", lambda: self._lessons.bulk_delete(lesson_ids))

    # Attendance
    def record_attendance(
        self,
        lesson_id: int,
        student_id: int,
        status: AttendanceStatus,
        explicit_hours: Optional[Decimal] = None,
        *,
        notes: Optional[str] = None,
    ) -> OperationResult[AttendanceRecord]:
        return self._run(
            "record_attendance",
            lambda: self._ledger.record_attendance(lesson_id, student_id, status, explicit_hours, notes=notes),
        )

    def list_attendance(self, lesson_id: int) -> OperationResult[list[AttendanceRecord]]:
        return self._run("list_attendance", lambda: self._ledger.list_attendance(lesson_id))

    # Hours packages
    def create_package(self, **fields) -> OperationResult[HoursPackage]:
        return self._run("create_package", lambda: self._packages.create_package(**fields))

    def get_package(self, package_id: int) -> OperationResult[HoursPackage]:
        return self._run("get_package", lambda: self._packages.get_package(package_id))

    def list_packages(self, **filters) -> OperationResult[list[HoursPackage]]:
        return self._run("list_packages", lambda: self._packages.list_packages(**filters))

    def delete_package(self, package_id: int) -> OperationResult[None]:
        return self._run("delete_package", lambda: self._packages.delete_package(package_id))

    def list_low_balance(self) -> OperationResult[list[HoursPackage]]:
        return self._run("list_low_balance", self._packages.list_low_balance)
