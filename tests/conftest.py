from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest

from src.lesson_scheduler.lesson_scheduler.attendance.model import AttendanceRecord
from src.lesson_scheduler.lesson_scheduler.classes.model import SchoolClass
from src.lesson_scheduler.lesson_scheduler.container import wire
from src.lesson_scheduler.lesson_scheduler.core.enums import LessonStatus
from src.lesson_scheduler.lesson_scheduler.core.exceptions import TransientStorageError
from src.lesson_scheduler.lesson_scheduler.core.policy import SchedulingPolicy
from src.lesson_scheduler.lesson_scheduler.hours.model import HoursPackage
from src.lesson_scheduler.lesson_scheduler.lessons.model import Lesson


NOW = datetime(2024, 1, 1, 8, 0)


@dataclass
class _State:
    teachers: set[int] = field(default_factory=set)
    classes: dict[int, SchoolClass] = field(default_factory=dict)
    enrollments: set[tuple[int, int]] = field(default_factory=set)
    lessons: dict[int, Lesson] = field(default_factory=dict)
    attendance: dict[tuple[int, int], AttendanceRecord] = field(default_factory=dict)
    packages: dict[int, HoursPackage] = field(default_factory=dict)
    next_id: dict[str, int] = field(default_factory=lambda: {"lesson": 0, "attendance": 0, "package": 0})

    def new_id(self, kind: str) -> int:
        self.next_id[kind] += 1
        return self.next_id[kind]


class InMemoryLessons:
    def __init__(self, state: _State):
        self._s = state

    def lock_teacher(self, teacher_id: int) -> bool:
        return teacher_id in self._s.teachers

    def get_by_id(self, lesson_id: int) -> Optional[Lesson]:
        return self._s.lessons.get(lesson_id)

    def get_many(self, lesson_ids):
        found = [self._s.lessons[i] for i in lesson_ids if i in self._s.lessons]
        return sorted(found, key=lambda l: l.start_time)

    def list_bookings(self, *, teacher_id: int, start: datetime, end: datetime, room: Optional[str] = None):
        out = []
        for l in self._s.lessons.values():
            if l.is_template or l.status == LessonStatus.CANCELLED:
                continue
            if not (l.start_time < end and l.end_time > start):
                continue
            if l.teacher_id == teacher_id or (room and l.room == room):
                out.append(l)
        return sorted(out, key=lambda l: l.start_time)

    def list_by_parent(self, parent_lesson_id: int):
        out = [l for l in self._s.lessons.values() if l.parent_lesson_id == parent_lesson_id]
        return sorted(out, key=lambda l: l.start_time)

    def create(self, lesson, *, is_template=False, parent_lesson_id=None, recurrence=None, status=LessonStatus.SCHEDULED):
        lesson_id = self._s.new_id("lesson")
        self._s.lessons[lesson_id] = Lesson(
            lesson_id=lesson_id,
            title=lesson.title,
            start_time=lesson.start_time,
            end_time=lesson.end_time,
            teacher_id=lesson.teacher_id,
            class_id=lesson.class_id,
            status=status,
            description=lesson.description,
            room=lesson.room,
            is_template=is_template,
            parent_lesson_id=parent_lesson_id,
            recurrence=recurrence,
        )
        return lesson_id

    def update(self, lesson: Lesson) -> None:
        current = self._s.lessons[lesson.lesson_id]
        self._s.lessons[lesson.lesson_id] = replace(
            current,
            title=lesson.title,
            description=lesson.description,
            start_time=lesson.start_time,
            end_time=lesson.end_time,
            room=lesson.room,
            status=lesson.status,
        )

    def detach_children(self, parent_lesson_id: int) -> int:
        children = [l for l in self._s.lessons.values() if l.parent_lesson_id == parent_lesson_id]
        for child in children:
            self._s.lessons[child.lesson_id] = replace(child, parent_lesson_id=None)
        return len(children)

    def delete(self, lesson_id: int) -> bool:
        if any(l.parent_lesson_id == lesson_id for l in self._s.lessons.values()):
            raise AssertionError(f"foreign key violation: lesson {lesson_id} still has children")
        if any(key[0] == lesson_id for key in self._s.attendance):
            raise AssertionError(f"foreign key violation: lesson {lesson_id} still has attendance")
        return self._s.lessons.pop(lesson_id, None) is not None


class InMemoryAttendance:
    def __init__(self, state: _State):
        self._s = state

    def upsert(self, *, lesson_id, student_id, status, hours_attended, notes, recorded_at):
        key = (lesson_id, student_id)
        existing = self._s.attendance.get(key)
        attendance_id = existing.attendance_id if existing else self._s.new_id("attendance")
        record = AttendanceRecord(
            attendance_id=attendance_id,
            lesson_id=lesson_id,
            student_id=student_id,
            status=status,
            hours_attended=hours_attended,
            notes=notes,
            recorded_at=recorded_at,
        )
        self._s.attendance[key] = record
        return record

    def get(self, *, lesson_id: int, student_id: int):
        return self._s.attendance.get((lesson_id, student_id))

    def list_for_lesson(self, lesson_id: int):
        items = [r for (l, _), r in self._s.attendance.items() if l == lesson_id]
        return sorted(items, key=lambda r: r.student_id)

    def delete_for_lesson(self, lesson_id: int) -> int:
        keys = [k for k in self._s.attendance if k[0] == lesson_id]
        for k in keys:
            del self._s.attendance[k]
        return len(keys)


class InMemoryPackages:
    def __init__(self, state: _State):
        self._s = state

    def create(self, *, student_id, course_id, total_hours, purchase_date, expiry_date=None, price=None, notes=None):
        package_id = self._s.new_id("package")
        self._s.packages[package_id] = HoursPackage(
            package_id=package_id,
            student_id=student_id,
            course_id=course_id,
            total_hours=Decimal(total_hours),
            remaining_hours=Decimal(total_hours),
            purchase_date=purchase_date,
            expiry_date=expiry_date,
            is_active=True,
            price=price,
            notes=notes,
        )
        return package_id

    def get_by_id(self, package_id: int):
        return self._s.packages.get(package_id)

    def list_packages(self, *, student_id=None, course_id=None, is_active=None):
        items = [
            p
            for p in self._s.packages.values()
            if (student_id is None or p.student_id == student_id)
            and (course_id is None or p.course_id == course_id)
            and (is_active is None or p.is_active == is_active)
        ]
        return sorted(items, key=lambda p: (p.purchase_date, p.package_id), reverse=True)

    def lock_oldest_usable(self, *, student_id: int, course_id: int, now: datetime):
        usable = [
            p
            for p in self._s.packages.values()
            if p.student_id == student_id and p.course_id == course_id and p.is_usable(now)
        ]
        usable.sort(key=lambda p: (p.purchase_date, p.package_id))
        return usable[0] if usable else None

    def update_balance(self, *, package_id: int, remaining_hours: Decimal, is_active: bool) -> bool:
        current = self._s.packages.get(package_id)
        if current is None:
            return False
        self._s.packages[package_id] = replace(current, remaining_hours=remaining_hours, is_active=is_active)
        return True

    def delete(self, package_id: int) -> bool:
        return self._s.packages.pop(package_id, None) is not None


class InMemoryClasses:
    def __init__(self, state: _State):
        self._s = state

    def get_by_id(self, class_id: int):
        return self._s.classes.get(class_id)

    def is_enrolled(self, *, student_id: int, class_id: int) -> bool:
        return (class_id, student_id) in self._s.enrollments


class InMemorySession:
    def __init__(self, state: _State):
        self.lessons = InMemoryLessons(state)
        self.attendance = InMemoryAttendance(state)
        self.packages = InMemoryPackages(state)
        self.classes = InMemoryClasses(state)


class InMemoryStore:
    """Serializable transactions over dicts.

    One re-entrant lock stands in for row locks; an error inside a session
    restores the snapshot taken when it opened.
    """

    def __init__(self):
        self.state = _State()
        self.sessions_opened = 0
        self.transient_failures = 0
        self._lock = threading.RLock()

    @contextmanager
    def session(self):
        with self._lock:
            self.sessions_opened += 1
            if self.transient_failures > 0:
                self.transient_failures -= 1
                raise TransientStorageError("Deadlock found when trying to get lock")

            snapshot = copy.deepcopy(self.state)
            try:
                yield InMemorySession(self.state)
            except BaseException:
                self.state = snapshot
                raise

    # Seeding helpers
    def add_teacher(self, teacher_id: int) -> None:
        self.state.teachers.add(teacher_id)

    def add_class(self, class_id: int, *, course_id: Optional[int], name: str = "Class") -> None:
        self.state.classes[class_id] = SchoolClass(class_id=class_id, name=name, course_id=course_id)

    def enroll(self, student_id: int, class_id: int) -> None:
        self.state.enrollments.add((class_id, student_id))

    def add_package(
        self,
        *,
        student_id: int,
        course_id: int,
        total: str,
        remaining: Optional[str] = None,
        purchase_date: datetime = datetime(2023, 12, 1),
        expiry_date: Optional[datetime] = None,
        is_active: bool = True,
    ) -> int:
        package_id = self.state.new_id("package")
        self.state.packages[package_id] = HoursPackage(
            package_id=package_id,
            student_id=student_id,
            course_id=course_id,
            total_hours=Decimal(total),
            remaining_hours=Decimal(remaining if remaining is not None else total),
            purchase_date=purchase_date,
            expiry_date=expiry_date,
            is_active=is_active,
        )
        return package_id

    def package(self, package_id: int) -> HoursPackage:
        return self.state.packages[package_id]


class RecordingSink:
    def __init__(self):
        self.events = []

    def emit(self, event) -> None:
        self.events.append(event)


class FailingSink:
    def emit(self, event) -> None:
        raise RuntimeError("mail server down")


TEACHER = 1
OTHER_TEACHER = 2
ENGLISH_CLASS = 1
ENGLISH_COURSE = 10
STUDENT = 100
OUTSIDER = 999


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.add_teacher(TEACHER)
    s.add_teacher(OTHER_TEACHER)
    s.add_class(ENGLISH_CLASS, course_id=ENGLISH_COURSE, name="English B1")
    s.enroll(STUDENT, ENGLISH_CLASS)
    return s


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


@pytest.fixture
def policy() -> SchedulingPolicy:
    return SchedulingPolicy(retry_backoff_seconds=0.0)


@pytest.fixture
def container(store, sink, policy):
    return wire(store, sink, policy, clock=lambda: NOW, sleep=lambda _: None)


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.lesson_scheduler.lesson_scheduler.main import create_app

    app = create_app(container)
    return app.test_client()
