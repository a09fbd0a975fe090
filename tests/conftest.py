"""Shared test fixtures for Mutant Scan tests."""

import os

import pytest

from mutant_scan.cache import ClassificationCache
from mutant_scan.persistence.repository import InMemoryRecordRepository, SQLiteRecordRepository
from mutant_scan.service import ClassifierService
from mutant_scan.stats import StatsAggregator


@pytest.fixture
def mutant_rows():
    """Grid with a horizontal, a vertical and a diagonal run."""
    return ["ATGCGA", "CAGTGC", "TTATGT", "AGAAGG", "CCCCTA", "TCACTG"]


@pytest.fixture
def human_rows():
    """Grid with no run of four."""
    return ["ATGCGA", "CAGTGC", "TTATTT", "AGACGG", "GCGTCA", "TCACTG"]


@pytest.fixture
def memory_repo():
    return InMemoryRecordRepository()


@pytest.fixture
def sqlite_repo(tmp_path):
    repo = SQLiteRecordRepository.open(tmp_path / "data" / "records.db")
    yield repo
    repo.close()


@pytest.fixture
def cache(memory_repo):
    return ClassificationCache(memory_repo)


@pytest.fixture
def service(cache):
    return ClassifierService(cache)


@pytest.fixture
def aggregator(cache):
    return StatsAggregator(cache)


class CountingDetector:
    """Detector test double that records how often it ran."""

    def __init__(self, result=True, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def __call__(self, grid):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def counting_detector():
    return CountingDetector


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    """Keep user and project config files and MUTANT_SCAN_* vars out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr("pathlib.Path.home", lambda: home)
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("MUTANT_SCAN_"):
            monkeypatch.delenv(key)
