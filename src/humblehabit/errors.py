"""Domain error taxonomy.

Every error derives from ``ValueError`` so callers that only know about the
generic "bad input" signal keep working, while the presentation layer can
branch on the concrete subclass (and on ``ValidationError.kind``) to render a
specific message.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class HabitError(ValueError):
    """Base class for recoverable habit admission/validation failures."""

    default_message = "Habit request rejected"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationErrorKind(str, Enum):
    EMPTY = "empty"
    TOO_LONG = "too_long"
    INVALID_VALUE = "invalid_value"


class ValidationError(HabitError):
    """Input failed a local validation rule."""

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: Optional[str] = None,
        *,
        field: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.field = field
        super().__init__(message or f"Invalid {field or 'value'}: {kind.value}")


class LimitReached(HabitError):
    default_message = "Habit limit reached"


class AlreadyExists(HabitError):
    default_message = "A weekly habit already exists"


class DuplicateName(HabitError):
    default_message = "A habit with this name already exists"


class NotFound(HabitError):
    """Entity is absent or owned by someone else; the two are indistinguishable."""

    default_message = "Habit not found"


__all__ = [
    "AlreadyExists",
    "DuplicateName",
    "HabitError",
    "LimitReached",
    "NotFound",
    "ValidationError",
    "ValidationErrorKind",
]
