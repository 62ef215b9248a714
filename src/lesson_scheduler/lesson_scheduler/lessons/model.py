from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..core.enums import ConflictType, LessonStatus, RecurrenceFrequency
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start is None or self.end is None:
            raise ValidationError("Both start and end are required")
        if self.end <= self.start:
            raise ValidationError("End time must be after start time")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeWindow") -> bool:
        # Touching boundaries (end == other.start) do not overlap.
        return self.start < other.end and self.end > other.start

    def shifted_to(self, start: datetime) -> "TimeWindow":
        return TimeWindow(start=start, end=start + self.duration)


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: RecurrenceFrequency
    interval: int = 1
    weekdays: Optional[frozenset[int]] = None
    end_date: Optional[date] = None
    max_occurrences: Optional[int] = None

    def validate(self) -> None:
        if not isinstance(self.frequency, RecurrenceFrequency):
            raise ValidationError(f"Unsupported frequency: {self.frequency!r}")
        if isinstance(self.interval, bool) or not isinstance(self.interval, int) or self.interval < 1:
            raise ValidationError("interval must be an integer >= 1")
        if self.weekdays is not None:
            if self.frequency != RecurrenceFrequency.WEEKLY:
                raise ValidationError("weekdays are only supported for weekly rules")
            if not self.weekdays:
                raise ValidationError("weekdays must not be empty")
            if any(not 0 <= d <= 6 for d in self.weekdays):
                raise ValidationError("weekdays must be between 0 (Monday) and 6 (Sunday)")
        if self.max_occurrences is not None and self.max_occurrences < 1:
            raise ValidationError("maxOccurrences must be >= 1")

    def to_dict(self) -> dict[str, Any]:
        return {
            "frequency": self.frequency.value,
            "interval": self.interval,
            "weekdays": sorted(self.weekdays) if self.weekdays is not None else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "maxOccurrences": self.max_occurrences,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecurrenceRule":
        weekdays = data.get("weekdays")
        end_date = data.get("endDate")
        return cls(
            frequency=RecurrenceFrequency(data["frequency"]),
            interval=int(data.get("interval") or 1),
            weekdays=frozenset(int(d) for d in weekdays) if weekdays is not None else None,
            end_date=date.fromisoformat(end_date) if end_date else None,
            max_occurrences=data.get("maxOccurrences"),
        )

    @classmethod
    def from_json(cls, raw: Optional[str]) -> Optional["RecurrenceRule"]:
        if not raw:
            return None
        return cls.from_dict(json.loads(raw))


@dataclass(frozen=True)
class NewLesson:
    """Input for a single lesson or a series template."""

    title: str
    start_time: datetime
    end_time: datetime
    teacher_id: int
    class_id: int
    description: Optional[str] = None
    room: Optional[str] = None

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)


@dataclass(frozen=True)
class Lesson:
    """Template or occurrence row.

    Occurrences keep a nullable back-reference to the template that
    generated them; templates are never bookings.
    """

    lesson_id: int
    title: str
    start_time: datetime
    end_time: datetime
    teacher_id: int
    class_id: int
    status: LessonStatus = LessonStatus.SCHEDULED
    description: Optional[str] = None
    room: Optional[str] = None
    is_template: bool = False
    parent_lesson_id: Optional[int] = None
    recurrence: Optional[RecurrenceRule] = None

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)

    @property
    def is_booking(self) -> bool:
        return not self.is_template and self.status != LessonStatus.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.lesson_id,
            "title": self.title,
            "description": self.description,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "room": self.room,
            "teacherId": self.teacher_id,
            "classId": self.class_id,
            "status": self.status.value,
            "isTemplate": self.is_template,
            "parentLessonId": self.parent_lesson_id,
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
        }


@dataclass(frozen=True)
class LessonPatch:
    """Partial update; ``None`` means "leave unchanged".

    Optional text fields are emptied only through the ``clear_*`` flags.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    room: Optional[str] = None
    status: Optional[LessonStatus] = None
    clear_description: bool = False
    clear_room: bool = False

    @property
    def moves_window(self) -> bool:
        return self.start_time is not None or self.end_time is not None

    def is_empty(self) -> bool:
        return not (self.clear_description or self.clear_room) and all(
            v is None for v in (self.title, self.description, self.start_time, self.end_time, self.room, self.status)
        )


@dataclass(frozen=True)
class Conflict:
    lesson_id: int
    title: str
    start_time: datetime
    end_time: datetime
    teacher_id: int
    room: Optional[str]
    conflict_type: ConflictType

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.lesson_id,
            "title": self.title,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "teacherId": self.teacher_id,
            "room": self.room,
            "conflictType": self.conflict_type.value,
        }


@dataclass(frozen=True)
class SeriesResult:
    template: Lesson
    occurrences: list[Lesson] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template.to_dict(),
            "occurrences": [o.to_dict() for o in self.occurrences],
        }
