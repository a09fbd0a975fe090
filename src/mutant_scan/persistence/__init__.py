"""Classification record persistence: models, SQLite schema and keyed stores."""

from .database import RecordDB
from .models import ClassificationRecord, StatsSnapshot
from .repository import (
    DiskCacheRecordRepository,
    InMemoryRecordRepository,
    RecordRepository,
    SQLiteRecordRepository,
)

__all__ = [
    "RecordDB",
    "ClassificationRecord",
    "StatsSnapshot",
    "RecordRepository",
    "InMemoryRecordRepository",
    "SQLiteRecordRepository",
    "DiskCacheRecordRepository",
]
