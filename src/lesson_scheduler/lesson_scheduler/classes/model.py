from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """A class group; lessons are scheduled for it and students enroll in it."""

    class_id: int
    name: str
    course_id: Optional[int] = None
