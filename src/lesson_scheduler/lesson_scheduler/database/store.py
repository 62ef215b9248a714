from __future__ import annotations

from typing import ContextManager, Protocol

from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..hours.repository import HoursPackageRepository
from ..lessons.repository import LessonRepository


class StoreSession(Protocol):
    """Repositories bound to one transaction."""

    lessons: LessonRepository
    attendance: AttendanceRepository
    packages: HoursPackageRepository
    classes: ClassRepository


class Store(Protocol):
    def session(self) -> ContextManager[StoreSession]:
        """Open a transaction: commit on normal exit, roll back on error.

        Row locks taken through the session's repositories are held until the
        block exits.
        """

        raise NotImplementedError
