"""Wire settings into a repository, cache, service and stats aggregator."""

from __future__ import annotations

from pathlib import Path

from .cache import ClassificationCache
from .config import ServiceSettings
from .detection.detector import RunDetector
from .logging_config import get_logger
from .persistence.repository import (
    DiskCacheRecordRepository,
    InMemoryRecordRepository,
    RecordRepository,
    SQLiteRecordRepository,
)
from .service import ClassifierService
from .stats import StatsAggregator

logger = get_logger(__name__)


def open_repository(settings: ServiceSettings) -> RecordRepository:
    """Open the record store selected by ``settings.store_backend``."""
    backend = settings.store_backend
    if backend == "memory":
        logger.warning("Using in-memory record store; classifications are not durable")
        return InMemoryRecordRepository()
    if backend == "diskcache":
        return DiskCacheRecordRepository(
            Path(settings.data_dir) / "diskcache", timeout=settings.sqlite_timeout_seconds
        )
    return SQLiteRecordRepository.open(settings.db_path, timeout=settings.sqlite_timeout_seconds)


class ClassifierRuntime:
    """Everything one process needs to classify grids and report stats.

    Usage::

        with ClassifierRuntime(load_settings()) as rt:
            rt.service.classify(["ATGC", "CAGT", "TTAT", "AGAA"])
            rt.stats.snapshot()
    """

    def __init__(self, settings: ServiceSettings) -> None:
        self.settings = settings
        self.repository = open_repository(settings)
        self.cache = ClassificationCache(self.repository)
        self.detector = RunDetector()
        self.service = ClassifierService(
            self.cache, detector=self.detector, fail_fatal=settings.fail_fatal
        )
        self.stats = StatsAggregator(self.cache)
        logger.debug(
            "Runtime ready: backend=%s policy=%s",
            settings.store_backend,
            settings.detector_failure_policy,
        )

    def close(self) -> None:
        self.cache.close()

    def __enter__(self) -> "ClassifierRuntime":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
