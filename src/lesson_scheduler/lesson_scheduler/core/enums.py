from __future__ import annotations

from enum import Enum


class LessonStatus(str, Enum):
    """Lifecycle of a single lesson occurrence."""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AttendanceStatus(str, Enum):
    """Attendance status stored per (lesson, student)."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class RecurrenceFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ConflictType(str, Enum):
    """Which resource a colliding booking shares with the candidate."""

    TEACHER = "teacher"
    ROOM = "room"
    BOTH = "both"


class NotificationType(str, Enum):
    LOW_HOURS = "LOW_HOURS"
