"""Tests for runtime wiring."""

from mutant_scan.config import ServiceSettings
from mutant_scan.persistence.repository import (
    DiskCacheRecordRepository,
    InMemoryRecordRepository,
    SQLiteRecordRepository,
)
from mutant_scan.runtime import ClassifierRuntime, open_repository


class TestOpenRepository:
    def test_memory(self):
        repo = open_repository(ServiceSettings(store_backend="memory"))
        assert isinstance(repo, InMemoryRecordRepository)

    def test_sqlite(self, tmp_path):
        settings = ServiceSettings(data_dir=str(tmp_path / "data"))
        repo = open_repository(settings)
        try:
            assert isinstance(repo, SQLiteRecordRepository)
            assert (tmp_path / "data" / "records.db").exists()
        finally:
            repo.close()

    def test_diskcache(self, tmp_path):
        settings = ServiceSettings(store_backend="diskcache", data_dir=str(tmp_path / "data"))
        repo = open_repository(settings)
        try:
            assert isinstance(repo, DiskCacheRecordRepository)
        finally:
            repo.close()


class TestClassifierRuntime:
    def test_classify_and_stats(self, tmp_path, mutant_rows, human_rows):
        settings = ServiceSettings(data_dir=str(tmp_path / "data"))
        with ClassifierRuntime(settings) as runtime:
            assert runtime.service.classify(mutant_rows) is True
            assert runtime.service.classify(mutant_rows) is True
            assert runtime.service.classify(human_rows) is False
            assert runtime.detector.calls == 2
            snapshot = runtime.stats.snapshot()

        assert (snapshot.mutant_count, snapshot.human_count, snapshot.ratio) == (1, 1, 1.0)

    def test_records_persist_across_runtimes(self, tmp_path, mutant_rows):
        settings = ServiceSettings(data_dir=str(tmp_path / "data"))
        with ClassifierRuntime(settings) as runtime:
            runtime.service.classify(mutant_rows)
        with ClassifierRuntime(settings) as runtime:
            assert runtime.service.classify(mutant_rows) is True
            assert runtime.detector.calls == 0

    def test_fail_fatal_policy_wired(self):
        settings = ServiceSettings(store_backend="memory", detector_failure_policy="fail_fatal")
        with ClassifierRuntime(settings) as runtime:
            assert runtime.service.fail_fatal is True
