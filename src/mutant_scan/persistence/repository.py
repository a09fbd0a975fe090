"""Keyed record stores behind the classification cache.

Every backend implements :class:`RecordRepository`:

- ``find_by_key(fingerprint)`` returns the record or ``None``.
- ``insert_unique(record)`` stores a new record, raising
  :class:`DuplicateRecordError` when the fingerprint already exists.
- ``count_where(is_mutant)`` counts records with that classification.

Backend failures other than duplicates surface as :class:`PersistenceError`.
"""

from __future__ import annotations

import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from diskcache import Cache

from ..exceptions import DuplicateRecordError, ErrorCode, PersistenceError
from ..logging_config import get_logger
from .database import RecordDB
from .models import ClassificationRecord

logger = get_logger(__name__)


def _duplicate(fingerprint: str) -> DuplicateRecordError:
    return DuplicateRecordError(
        message="Record already exists for fingerprint",
        code=ErrorCode.DNA901,
        context={"fingerprint": fingerprint},
    )


def _unavailable(operation: str, exc: Exception, **context) -> PersistenceError:
    return PersistenceError(
        message=f"Record store {operation} failed: {exc}",
        code=ErrorCode.DNA900,
        context={"operation": operation, **context},
        recovery_hint="Retry the request once the store is reachable",
    )


class RecordRepository(ABC):
    """Abstract keyed store of classification records."""

    #: True when ``insert_unique`` is atomic with respect to the key. When
    #: False the cache serializes inserts per fingerprint itself.
    enforces_uniqueness: bool = True

    @abstractmethod
    def find_by_key(self, fingerprint: str) -> Optional[ClassificationRecord]:
        ...

    @abstractmethod
    def insert_unique(self, record: ClassificationRecord) -> ClassificationRecord:
        ...

    @abstractmethod
    def count_where(self, is_mutant: bool) -> int:
        ...

    def close(self) -> None:
        """Release backend resources."""


class InMemoryRecordRepository(RecordRepository):
    """Dict-backed store for tests and ephemeral runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, ClassificationRecord] = {}

    def find_by_key(self, fingerprint: str) -> Optional[ClassificationRecord]:
        with self._lock:
            return self._records.get(fingerprint)

    def insert_unique(self, record: ClassificationRecord) -> ClassificationRecord:
        with self._lock:
            if record.fingerprint in self._records:
                raise _duplicate(record.fingerprint)
            self._records[record.fingerprint] = record
        return record

    def count_where(self, is_mutant: bool) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if r.is_mutant == is_mutant)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class SQLiteRecordRepository(RecordRepository):
    """Durable store on top of :class:`RecordDB`.

    Uniqueness comes from the ``UNIQUE`` constraint on ``fingerprint``, so a
    losing concurrent insert fails with ``IntegrityError`` and nothing is
    duplicated.
    """

    def __init__(self, db: RecordDB) -> None:
        self.db = db

    @classmethod
    def open(cls, db_path: Union[str, Path], timeout: float = 5.0) -> "SQLiteRecordRepository":
        db = RecordDB(db_path, timeout=timeout)
        try:
            db.connect()
        except sqlite3.Error as e:
            raise _unavailable("connect", e, db_path=str(db_path))
        return cls(db)

    def find_by_key(self, fingerprint: str) -> Optional[ClassificationRecord]:
        try:
            with self.db.lock:
                row = self.db.conn.execute(
                    """
                    SELECT fingerprint, is_mutant, created_at
                    FROM classification_records
                    WHERE fingerprint = ?
                    """,
                    (fingerprint,),
                ).fetchone()
        except (sqlite3.Error, RuntimeError) as e:
            raise _unavailable("lookup", e, fingerprint=fingerprint)
        if row is None:
            return None
        return ClassificationRecord(
            fingerprint=row["fingerprint"],
            is_mutant=bool(row["is_mutant"]),
            created_at=row["created_at"],
        )

    def insert_unique(self, record: ClassificationRecord) -> ClassificationRecord:
        try:
            with self.db.lock:
                self.db.conn.execute(
                    """
                    INSERT INTO classification_records (fingerprint, is_mutant, created_at)
                    VALUES (?, ?, ?)
                    """,
                    (record.fingerprint, int(record.is_mutant), record.created_at),
                )
        except sqlite3.IntegrityError:
            raise _duplicate(record.fingerprint)
        except (sqlite3.Error, RuntimeError) as e:
            raise _unavailable("insert", e, fingerprint=record.fingerprint)
        return record

    def count_where(self, is_mutant: bool) -> int:
        try:
            with self.db.lock:
                row = self.db.conn.execute(
                    "SELECT COUNT(*) AS n FROM classification_records WHERE is_mutant = ?",
                    (int(is_mutant),),
                ).fetchone()
        except (sqlite3.Error, RuntimeError) as e:
            raise _unavailable("count", e, is_mutant=str(is_mutant))
        return int(row["n"])

    def close(self) -> None:
        self.db.close()


class DiskCacheRecordRepository(RecordRepository):
    """Store on a ``diskcache.Cache`` directory.

    ``Cache.add`` only writes when the key is absent, which gives atomic
    insert-if-absent across threads and processes. Per-class counters are
    bumped in the same transaction so counting never scans the cache.

    Eviction is disabled: records are never removed, and an evicted key
    would let ``add`` succeed twice for one fingerprint.
    """

    _RECORD_PREFIX = "record:"
    _COUNT_KEYS = {True: "count:mutant", False: "count:human"}

    def __init__(self, directory: Union[str, Path], timeout: float = 5.0) -> None:
        self.directory = str(directory)
        self.cache = Cache(self.directory, timeout=timeout, eviction_policy="none")
        logger.debug("diskcache record store at %s", self.directory)

    def find_by_key(self, fingerprint: str) -> Optional[ClassificationRecord]:
        try:
            value = self.cache.get(self._RECORD_PREFIX + fingerprint)
        except Exception as e:
            raise _unavailable("lookup", e, fingerprint=fingerprint)
        if value is None:
            return None
        return ClassificationRecord(
            fingerprint=fingerprint,
            is_mutant=bool(value["is_mutant"]),
            created_at=value["created_at"],
        )

    def insert_unique(self, record: ClassificationRecord) -> ClassificationRecord:
        key = self._RECORD_PREFIX + record.fingerprint
        value = {"is_mutant": record.is_mutant, "created_at": record.created_at}
        try:
            with self.cache.transact():
                added = self.cache.add(key, value)
                if added:
                    self.cache.incr(self._COUNT_KEYS[record.is_mutant], default=0)
        except Exception as e:
            raise _unavailable("insert", e, fingerprint=record.fingerprint)
        if not added:
            raise _duplicate(record.fingerprint)
        return record

    def count_where(self, is_mutant: bool) -> int:
        try:
            return int(self.cache.get(self._COUNT_KEYS[bool(is_mutant)], default=0))
        except Exception as e:
            raise _unavailable("count", e, is_mutant=str(is_mutant))

    def close(self) -> None:
        self.cache.close()
