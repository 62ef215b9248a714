from __future__ import annotations

from typing import Optional, Protocol

from .model import SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def is_enrolled(self, *, student_id: int, class_id: int) -> bool:
        """True only for an active enrollment."""

        raise NotImplementedError
