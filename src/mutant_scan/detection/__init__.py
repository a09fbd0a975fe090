"""Grid validation, fingerprinting and run detection."""

from .detector import MUTANT_THRESHOLD, RUN_LENGTH, Direction, Run, RunDetector, count_runs, is_mutant, iter_runs
from .grid import ALPHABET, Grid, fingerprint_rows, validate_grid

__all__ = [
    "ALPHABET",
    "Grid",
    "fingerprint_rows",
    "validate_grid",
    "RUN_LENGTH",
    "MUTANT_THRESHOLD",
    "Direction",
    "Run",
    "RunDetector",
    "iter_runs",
    "count_runs",
    "is_mutant",
]
