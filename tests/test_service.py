"""Tests for the classification service."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from mutant_scan.cache import ClassificationCache
from mutant_scan.detection.grid import validate_grid
from mutant_scan.exceptions import DetectionError, ErrorCode, PersistenceError, ValidationError
from mutant_scan.persistence.models import ClassificationRecord
from mutant_scan.persistence.repository import (
    DiskCacheRecordRepository,
    InMemoryRecordRepository,
    SQLiteRecordRepository,
)
from mutant_scan.service import ClassifierService


class FailingInsertRepository(InMemoryRecordRepository):
    def insert_unique(self, record):
        raise PersistenceError(message="disk full", code=ErrorCode.DNA900)


class FailingLookupRepository(InMemoryRecordRepository):
    def find_by_key(self, fingerprint):
        raise PersistenceError(message="store down", code=ErrorCode.DNA900)


class TestClassify:
    def test_end_to_end_mutant(self, service, mutant_rows):
        assert service.classify(mutant_rows) is True

    def test_end_to_end_human(self, service, human_rows):
        assert service.classify(human_rows) is False

    def test_result_is_recorded(self, service, memory_repo, mutant_rows):
        service.classify(mutant_rows)
        record = memory_repo.find_by_key(validate_grid(mutant_rows).fingerprint)
        assert record is not None
        assert record.is_mutant is True

    def test_lowercase_shares_record(self, service, memory_repo, mutant_rows):
        service.classify(mutant_rows)
        service.classify([row.lower() for row in mutant_rows])
        assert len(memory_repo) == 1


class TestCaching:
    def test_detector_runs_once_per_fingerprint(self, cache, counting_detector, mutant_rows):
        detector = counting_detector(result=True)
        service = ClassifierService(cache, detector=detector)

        for _ in range(5):
            assert service.classify(mutant_rows) is True

        assert detector.calls == 1

    def test_cached_value_is_authoritative(self, memory_repo, cache, counting_detector, mutant_rows):
        fingerprint = validate_grid(mutant_rows).fingerprint
        memory_repo.insert_unique(ClassificationRecord.new(fingerprint, False))
        detector = counting_detector(result=True)
        service = ClassifierService(cache, detector=detector)

        assert service.classify(mutant_rows) is False
        assert detector.calls == 0

    def test_store_failure_still_returns_computed_value(self, mutant_rows):
        service = ClassifierService(ClassificationCache(FailingInsertRepository()))
        assert service.classify(mutant_rows) is True

    def test_lookup_failure_falls_back_to_detection(self, mutant_rows, human_rows):
        service = ClassifierService(ClassificationCache(FailingLookupRepository()))
        assert service.classify(mutant_rows) is True
        assert service.classify(human_rows) is False


class TestValidationFailures:
    @pytest.mark.parametrize(
        "rows",
        [None, [], ["ATG", "CAG"], ["ATGX", "CAGT", "TTAT", "AGAA"]],
    )
    def test_rejected_without_cache_mutation(self, cache, memory_repo, counting_detector, rows):
        detector = counting_detector()
        service = ClassifierService(cache, detector=detector)

        with pytest.raises(ValidationError):
            service.classify(rows)

        assert len(memory_repo) == 0
        assert detector.calls == 0


class TestDetectorFailure:
    def test_fail_safe_classifies_human_and_caches(self, cache, memory_repo, counting_detector, mutant_rows):
        detector = counting_detector(error=RuntimeError("boom"))
        service = ClassifierService(cache, detector=detector)

        assert service.classify(mutant_rows) is False
        record = memory_repo.find_by_key(validate_grid(mutant_rows).fingerprint)
        assert record is not None
        assert record.is_mutant is False

        # cached: the detector is not retried
        assert service.classify(mutant_rows) is False
        assert detector.calls == 1

    def test_fail_fatal_raises_and_caches_nothing(self, cache, memory_repo, counting_detector, mutant_rows):
        detector = counting_detector(error=RuntimeError("boom"))
        service = ClassifierService(cache, detector=detector, fail_fatal=True)

        with pytest.raises(DetectionError) as info:
            service.classify(mutant_rows)

        assert info.value.code == ErrorCode.DNA800
        assert info.value.recoverable is False
        assert isinstance(info.value.__cause__, RuntimeError)
        assert len(memory_repo) == 0


class TestConcurrentIdenticalRequests:
    K = 16

    def _classify_concurrently(self, service, rows):
        with ThreadPoolExecutor(max_workers=8) as pool:
            return list(pool.map(lambda _: service.classify(list(rows)), range(self.K)))

    def test_memory_store_single_record(self, service, memory_repo, mutant_rows):
        results = self._classify_concurrently(service, mutant_rows)
        assert results == [True] * self.K
        assert len(memory_repo) == 1

    def test_sqlite_store_single_record(self, tmp_path, mutant_rows):
        repo = SQLiteRecordRepository.open(tmp_path / "records.db")
        try:
            service = ClassifierService(ClassificationCache(repo))
            results = self._classify_concurrently(service, mutant_rows)

            fingerprint = validate_grid(mutant_rows).fingerprint
            rows = repo.db.conn.execute(
                "SELECT is_mutant FROM classification_records WHERE fingerprint = ?",
                (fingerprint,),
            ).fetchall()
            assert len(rows) == 1
            assert results == [bool(rows[0]["is_mutant"])] * self.K
        finally:
            repo.close()

    def test_diskcache_store_single_record(self, tmp_path, mutant_rows):
        repo = DiskCacheRecordRepository(tmp_path / "diskcache")
        try:
            service = ClassifierService(ClassificationCache(repo))
            results = self._classify_concurrently(service, mutant_rows)

            record = repo.find_by_key(validate_grid(mutant_rows).fingerprint)
            assert record is not None
            assert sum(1 for key in repo.cache if key.startswith("record:")) == 1
            assert results == [record.is_mutant] * self.K
            assert repo.count_where(True) + repo.count_where(False) == 1
        finally:
            repo.close()
