from __future__ import annotations

from typing import Any, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = "domain"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation"


class NotFoundError(DomainError):
    """Raised when a lesson, template, package or class does not exist."""

    kind = "not_found"


class EnrollmentError(DomainError):
    """Raised when a student is not enrolled in the lesson's class."""

    kind = "enrollment"

    def __init__(self, message: str, *, student_id: int, class_id: int):
        super().__init__(message)
        self.student_id = student_id
        self.class_id = class_id

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(student_id=self.student_id, class_id=self.class_id)
        return data


class ConflictError(DomainError):
    """Raised when a window overlaps existing bookings.

    Carries every colliding booking, not only the first one found.
    """

    kind = "conflict"

    def __init__(self, message: str, conflicts: Sequence[Any]):
        super().__init__(message)
        self.conflicts = list(conflicts)

    @property
    def lesson_ids(self) -> list[int]:
        return [c.lesson_id for c in self.conflicts]

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["conflicts"] = [c.to_dict() for c in self.conflicts]
        return data


class TransientStorageError(DomainError):
    """Lock wait timeout or deadlock; safe to retry the whole operation."""

    kind = "transient"


class InternalError(DomainError):
    """Generic failure surfaced after retries are exhausted."""

    kind = "internal"
