"""
Content-addressed classification cache.

Maps a grid fingerprint to its stored ClassificationRecord on top of a
RecordRepository. For any fingerprint at most one record is ever created,
even when identical requests race past a cache miss.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from .exceptions import DuplicateRecordError, ErrorCode, PersistenceError
from .logging_config import get_logger
from .persistence.models import ClassificationRecord
from .persistence.repository import RecordRepository

logger = get_logger(__name__)


class KeyedLock:
    """One mutex per key, dropped once no thread holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class ClassificationCache:
    """
    Fingerprint-keyed store of classification results.

    Features:
    - Idempotent upsert-or-fetch via :meth:`store_if_absent`
    - Per-fingerprint serialization when the backing store does not
      enforce key uniqueness itself
    - Best-effort lookups: an unreachable store reads as a miss
    """

    def __init__(self, repository: RecordRepository):
        """
        Initialize cache.

        Args:
            repository: Backing keyed store
        """
        self.repository = repository
        self._keyed_lock: Optional[KeyedLock] = (
            None if repository.enforces_uniqueness else KeyedLock()
        )

    def lookup(self, fingerprint: str) -> Optional[ClassificationRecord]:
        """
        Get the stored record for a fingerprint.

        Args:
            fingerprint: Grid fingerprint

        Returns:
            The record, or None if not found or the store is unreachable
        """
        try:
            record = self.repository.find_by_key(fingerprint)
        except PersistenceError as e:
            logger.warning("Cache lookup failed, treating as miss: %s", e)
            return None

        if record is not None:
            logger.debug("Cache hit: %s...", fingerprint[:16])
        else:
            logger.debug("Cache miss: %s...", fingerprint[:16])
        return record

    def store_if_absent(self, fingerprint: str, is_mutant: bool) -> ClassificationRecord:
        """
        Insert a record unless one already exists, returning the stored one.

        A lost duplicate race is not an error: the existing record is
        re-fetched and returned as authoritative.

        Args:
            fingerprint: Grid fingerprint
            is_mutant: Computed classification

        Returns:
            The record now stored for ``fingerprint``

        Raises:
            PersistenceError: If the store could not be written or the
                winning record could not be re-fetched
        """
        if self._keyed_lock is None:
            return self._insert_or_fetch(fingerprint, is_mutant)

        with self._keyed_lock.hold(fingerprint):
            existing = self.repository.find_by_key(fingerprint)
            if existing is not None:
                return existing
            return self._insert_or_fetch(fingerprint, is_mutant)

    def _insert_or_fetch(self, fingerprint: str, is_mutant: bool) -> ClassificationRecord:
        record = ClassificationRecord.new(fingerprint, is_mutant)
        try:
            stored = self.repository.insert_unique(record)
            logger.debug("Cache set: %s... is_mutant=%s", fingerprint[:16], is_mutant)
            return stored
        except DuplicateRecordError:
            logger.warning(
                "Record for %s... already stored by a concurrent request", fingerprint[:16]
            )

        existing = self.repository.find_by_key(fingerprint)
        if existing is None:
            raise PersistenceError(
                message="Duplicate record reported but not found on re-fetch",
                code=ErrorCode.DNA900,
                context={"fingerprint": fingerprint},
            )
        return existing

    def count_by_class(self, is_mutant: bool) -> int:
        """
        Count stored records with the given classification.

        Raises:
            PersistenceError: If the store is unreachable
        """
        return self.repository.count_where(is_mutant)

    def close(self) -> None:
        """Close the backing store."""
        self.repository.close()
