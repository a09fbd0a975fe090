"""Structured error taxonomy for classification requests.

Error Code Convention:
    DNA1xx - Grid validation errors (surfaced to the caller, never cached)
    DNA8xx - Detection errors
    DNA9xx - Persistence errors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Validation errors (DNA1xx)
    DNA100 = "DNA100"  # Empty or missing row sequence
    DNA101 = "DNA101"  # Row length differs from row count
    DNA102 = "DNA102"  # Symbol outside the A/T/C/G alphabet

    # Detection errors (DNA8xx)
    DNA800 = "DNA800"  # Run detector raised on a validated grid

    # Persistence errors (DNA9xx)
    DNA900 = "DNA900"  # Store unreachable or write failed
    DNA901 = "DNA901"  # Duplicate fingerprint on insert


@dataclass
class ClassificationError(Exception):
    """Base exception with structured context for logging and transport.

    Attributes:
        message: Human-readable error description
        code: Structured error code for categorization
        context: Additional context (row index, fingerprint, etc.)
        recoverable: Whether the caller may retry the request
        recovery_hint: Suggested fix for the caller
    """

    message: str
    code: ErrorCode
    context: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True
    recovery_hint: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
            "recovery_hint": self.recovery_hint,
        }


class ValidationError(ClassificationError):
    """The candidate grid is malformed (DNA1xx)."""

    pass


class EmptyInputError(ValidationError):
    """No rows were supplied (DNA100)."""

    pass


class NotSquareError(ValidationError):
    """A row's length differs from the row count (DNA101)."""

    pass


class InvalidAlphabetError(ValidationError):
    """A symbol outside A/T/C/G was found (DNA102)."""

    pass


class DetectionError(ClassificationError):
    """The run detector failed on a validated grid (DNA8xx)."""

    pass


class PersistenceError(ClassificationError):
    """The backing store could not be read or written (DNA9xx)."""

    pass


class DuplicateRecordError(PersistenceError):
    """An insert lost the race for a fingerprint that already exists (DNA901)."""

    pass
