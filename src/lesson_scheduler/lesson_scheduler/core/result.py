from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .exceptions import DomainError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Typed outcome returned across the service boundary instead of raising."""

    value: Optional[T] = None
    error: Optional[DomainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: DomainError) -> "OperationResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
