from datetime import date, datetime
from decimal import Decimal

import mysql.connector

from src.lesson_scheduler.lesson_scheduler.core.enums import AttendanceStatus, RecurrenceFrequency
from src.lesson_scheduler.lesson_scheduler.core.exceptions import (
    ConflictError,
    EnrollmentError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from src.lesson_scheduler.lesson_scheduler.lessons.model import LessonPatch, NewLesson, RecurrenceRule, TimeWindow


def _template(start=datetime(2024, 1, 1, 9, 0), end=datetime(2024, 1, 1, 10, 0)):
    return NewLesson(title="English B1", start_time=start, end_time=end, teacher_id=1, class_id=1)


def test_create_series_success_is_a_value(container):
    rule = RecurrenceRule(frequency=RecurrenceFrequency.WEEKLY, weekdays=frozenset({0}), end_date=date(2024, 1, 28))

    result = container.api.create_series(_template(), rule)

    assert result.ok
    assert len(result.value.occurrences) == 4


def test_errors_come_back_typed_instead_of_raised(container):
    container.api.create_lesson(_template(datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 11, 0)))

    conflict = container.api.create_lesson(_template(datetime(2024, 1, 1, 10, 30), datetime(2024, 1, 1, 11, 30)))
    invalid = container.api.create_series(_template(), RecurrenceRule(frequency=RecurrenceFrequency.WEEKLY, interval=0))
    missing = container.api.update_occurrence(999, LessonPatch(title="x"))

    assert isinstance(conflict.error, ConflictError)
    assert isinstance(invalid.error, ValidationError)
    assert isinstance(missing.error, NotFoundError)


def test_record_attendance_enrollment_error(container):
    lesson = container.api.create_lesson(_template()).unwrap()

    result = container.api.record_attendance(lesson.lesson_id, 999, AttendanceStatus.PRESENT)

    assert isinstance(result.error, EnrollmentError)
    assert result.error.to_dict()["student_id"] == 999


def test_transient_storage_errors_are_retried(container, store):
    store.transient_failures = 2

    result = container.api.check_conflicts(
        TimeWindow(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 10, 0)), teacher_id=1
    )

    assert result.ok
    assert result.value == []
    assert store.sessions_opened == 3


def test_persistent_contention_becomes_internal_error(container, store):
    store.transient_failures = 10

    result = container.api.create_lesson(_template())

    assert isinstance(result.error, InternalError)
    assert store.sessions_opened == container.policy.retry_attempts
    assert store.state.lessons == {}


def test_bad_explicit_hours_come_back_as_validation_error(container):
    lesson = container.api.create_lesson(_template()).unwrap()

    result = container.api.record_attendance(lesson.lesson_id, 100, AttendanceStatus.PRESENT, Decimal("NaN"))

    assert isinstance(result.error, ValidationError)


def test_unreachable_database_comes_back_as_internal_error(container, store, monkeypatch):
    def refuse():
        raise mysql.connector.errors.DatabaseError(msg="Can't connect to MySQL server", errno=2003)

    monkeypatch.setattr(store, "session", refuse)

    result = container.api.get_lesson(1)

    assert isinstance(result.error, InternalError)
