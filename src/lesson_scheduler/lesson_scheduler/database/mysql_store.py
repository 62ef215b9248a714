from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
from ..classes.mysql_class_repository import MySQLClassRepository
from ..hours.mysql_hours_package_repository import MySQLHoursPackageRepository
from ..lessons.mysql_lesson_repository import MySQLLessonRepository
from .connection import DatabaseConnection
from .mysql_base import transaction
from .store import Store, StoreSession


class MySQLStoreSession(StoreSession):
    def __init__(self, cur):
        self.lessons = MySQLLessonRepository(cur)
        self.attendance = MySQLAttendanceRepository(cur)
        self.packages = MySQLHoursPackageRepository(cur)
        self.classes = MySQLClassRepository(cur)


class MySQLStore(Store):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def session(self) -> Iterator[MySQLStoreSession]:
        with transaction(self._conn_factory) as cur:
            yield MySQLStoreSession(cur)
