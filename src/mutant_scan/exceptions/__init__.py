"""Exception hierarchy for Mutant Scan."""

from .base import MutantScanError
from .config import ConfigurationError, InvalidConfigError
from .taxonomy import (
    ClassificationError,
    DetectionError,
    DuplicateRecordError,
    EmptyInputError,
    ErrorCode,
    InvalidAlphabetError,
    NotSquareError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "MutantScanError",
    "ConfigurationError",
    "InvalidConfigError",
    "ClassificationError",
    "ErrorCode",
    "ValidationError",
    "EmptyInputError",
    "NotSquareError",
    "InvalidAlphabetError",
    "DetectionError",
    "PersistenceError",
    "DuplicateRecordError",
]
