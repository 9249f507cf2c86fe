"""
Operation results.

Service operations report their outcome as a value rather than by raising:
an OperationResult holds either the value or a MediaHostError from the
library's taxonomy.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from mediahost.core.exceptions import MediaHostError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a single media operation."""

    operation: str
    value: Optional[T] = None
    error: Optional[MediaHostError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, operation: str, value: T) -> "OperationResult[T]":
        return cls(operation=operation, value=value)

    @classmethod
    def failure(cls, operation: str, error: MediaHostError) -> "OperationResult[T]":
        return cls(operation=operation, error=error)
