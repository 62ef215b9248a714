from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from ..common.datetime_utils import hours_between, now_local
from ..common.validators import optional_text, parse_amount, require_positive_int
from ..core.constants import MAX_ATTENDED_HOURS
from ..core.enums import AttendanceStatus
from ..core.exceptions import EnrollmentError, NotFoundError, ValidationError
from ..database.store import Store, StoreSession
from ..hours.model import HoursPackage, LowBalanceEvent
from ..hours.monitor import LowBalanceMonitor
from ..notifications.sink import NotificationSink
from .factory import HoursStrategyFactory
from .model import AttendanceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deduction:
    package: HoursPackage
    hours: Decimal
    previous_remaining: Decimal

    @property
    def exhausted(self) -> bool:
        return self.previous_remaining > 0 and self.package.remaining_hours == 0


class AttendanceLedger:
    """Record attendance and consume prepaid hours.

    Upserting the record, picking the FIFO package and decrementing it happen
    in one store session; the package row stays locked until commit.

    Recording the same attendance twice keeps one record but deducts twice:
    the upsert is idempotent, the ledger side effect is not.
    """

    def __init__(
        self,
        store: Store,
        sink: NotificationSink,
        *,
        monitor: Optional[LowBalanceMonitor] = None,
        strategy_factory: Optional[HoursStrategyFactory] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._sink = sink
        self._monitor = monitor or LowBalanceMonitor()
        self._factory = strategy_factory or HoursStrategyFactory()
        self._clock = clock

    def record_attendance(
        self,
        lesson_id: int,
        student_id: int,
        status: AttendanceStatus,
        explicit_hours: Optional[Decimal] = None,
        *,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        student_id = require_positive_int(student_id, "studentId")
        if not isinstance(status, AttendanceStatus):
            raise ValidationError(f"Invalid attendance status: {status!r}")
        if explicit_hours is not None:
            explicit_hours = parse_amount(explicit_hours, "hoursAttended", maximum=MAX_ATTENDED_HOURS)

        now = self._clock()
        deduction: Optional[Deduction] = None

        with self._store.session() as s:
            lesson = s.lessons.get_by_id(int(lesson_id))
            if lesson is None or lesson.is_template:
                raise NotFoundError(f"Lesson {lesson_id} not found")

            if not s.classes.is_enrolled(student_id=student_id, class_id=lesson.class_id):
                raise EnrollmentError(
                    f"Student {student_id} is not enrolled in class {lesson.class_id}",
                    student_id=student_id,
                    class_id=lesson.class_id,
                )

            if explicit_hours is not None:
                hours = explicit_hours
            else:
                duration = hours_between(lesson.start_time, lesson.end_time)
                hours = self._factory.for_status(status).hours_for(duration_hours=duration)

            record = s.attendance.upsert(
                lesson_id=lesson.lesson_id,
                student_id=student_id,
                status=status,
                hours_attended=hours if hours > 0 else None,
                notes=optional_text(notes),
                recorded_at=now,
            )

            if hours > 0:
                school_class = s.classes.get_by_id(lesson.class_id)
                if school_class is not None and school_class.course_id is not None:
                    deduction = self._deduct(
                        s, student_id=student_id, course_id=school_class.course_id, hours=hours, now=now
                    )

        if deduction is not None:
            self._signal_low_balance(deduction)
        return record

    def list_attendance(self, lesson_id: int) -> list[AttendanceRecord]:
        with self._store.session() as s:
            lesson = s.lessons.get_by_id(int(lesson_id))
            if lesson is None or lesson.is_template:
                raise NotFoundError(f"Lesson {lesson_id} not found")
            return list(s.attendance.list_for_lesson(lesson.lesson_id))

    def _deduct(
        self, s: StoreSession, *, student_id: int, course_id: int, hours: Decimal, now: datetime
    ) -> Optional[Deduction]:
        package = s.packages.lock_oldest_usable(student_id=student_id, course_id=course_id, now=now)
        if package is None:
            logger.debug("No usable hours package for student %s course %s", student_id, course_id)
            return None

        # Single package only; any shortfall is dropped, never carried to the next package.
        remaining = max(Decimal("0"), package.remaining_hours - hours)
        is_active = remaining > 0
        s.packages.update_balance(package_id=package.package_id, remaining_hours=remaining, is_active=is_active)

        logger.info(
            "Deducted %s h from package %s (%s -> %s)",
            hours,
            package.package_id,
            package.remaining_hours,
            remaining,
        )
        return Deduction(
            package=replace(package, remaining_hours=remaining, is_active=is_active),
            hours=hours,
            previous_remaining=package.remaining_hours,
        )

    def _signal_low_balance(self, deduction: Deduction) -> None:
        pkg = deduction.package
        if not (self._monitor.is_low(pkg.remaining_hours, pkg.total_hours) or deduction.exhausted):
            return

        event = LowBalanceEvent(
            student_id=pkg.student_id,
            course_id=pkg.course_id,
            remaining_hours=pkg.remaining_hours,
            total_hours=pkg.total_hours,
            package_id=pkg.package_id,
        )
        try:
            self._sink.emit(event)
        except Exception:
            # Deduction is already committed; never propagate to the caller.
            logger.exception("Failed to emit low balance event for package %s", pkg.package_id)
