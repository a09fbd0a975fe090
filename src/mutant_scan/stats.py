"""Aggregate mutant/human counts over the classification store."""

from .cache import ClassificationCache
from .persistence.models import StatsSnapshot


def compute_ratio(mutant_count: int, human_count: int) -> float:
    """Mutant-to-human ratio.

    0.0 with no data, 1.0 when only mutants exist, otherwise the plain
    quotient (which may exceed 1).
    """
    if mutant_count == 0 and human_count == 0:
        return 0.0
    if human_count == 0:
        return 1.0
    return mutant_count / human_count


class StatsAggregator:
    """Computes :class:`StatsSnapshot` views from the cache's counts."""

    def __init__(self, cache: ClassificationCache) -> None:
        self.cache = cache

    def snapshot(self) -> StatsSnapshot:
        """Read both counts and derive the ratio.

        Raises:
            PersistenceError: If the store is unreachable
        """
        mutant_count = self.cache.count_by_class(True)
        human_count = self.cache.count_by_class(False)
        return StatsSnapshot(
            mutant_count=mutant_count,
            human_count=human_count,
            ratio=compute_ratio(mutant_count, human_count),
        )
