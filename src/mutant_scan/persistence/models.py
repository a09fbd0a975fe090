"""Data models for classification records and the derived stats view."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ClassificationRecord:
    """One stored classification, keyed by grid fingerprint.

    Created once per distinct fingerprint and never mutated afterwards.
    """

    fingerprint: str  # SHA-256 hex, unique key
    is_mutant: bool
    created_at: str  # ISO-8601, UTC

    @classmethod
    def new(cls, fingerprint: str, is_mutant: bool) -> "ClassificationRecord":
        return cls(fingerprint=fingerprint, is_mutant=is_mutant, created_at=utc_now_iso())


@dataclass(frozen=True)
class StatsSnapshot:
    """Mutant/human counts and their ratio, computed on demand."""

    mutant_count: int
    human_count: int
    ratio: float

    def to_dict(self) -> dict[str, Any]:
        """Wire format used by the HTTP and JSON CLI output."""
        return {
            "count_mutant_dna": self.mutant_count,
            "count_human_dna": self.human_count,
            "ratio": self.ratio,
        }
