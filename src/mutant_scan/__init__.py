"""
Mutant Scan - DNA grid classification service

Classifies square grids of A/T/C/G bases as mutant or human by counting
runs of four identical bases, memoizes every classification by content
fingerprint, and reports aggregate mutant/human statistics.
"""

__version__ = "0.1.0"

from .cache import ClassificationCache
from .detection import Grid, is_mutant, validate_grid
from .service import ClassifierService
from .stats import StatsAggregator

__all__ = [
    "ClassifierService",  # Main entry point
    "ClassificationCache",
    "StatsAggregator",
    "Grid",
    "validate_grid",
    "is_mutant",
]
