"""Tests for settings loading and validation."""

from pathlib import Path

import pytest

from mutant_scan.config import ServiceSettings, load_settings
from mutant_scan.exceptions import InvalidConfigError, MutantScanError


class TestServiceSettings:
    def test_defaults(self):
        settings = ServiceSettings()
        assert settings.store_backend == "sqlite"
        assert settings.detector_failure_policy == "fail_safe"
        assert settings.fail_fatal is False
        assert settings.db_path == Path(".mutant-scan") / "records.db"

    def test_frozen(self):
        settings = ServiceSettings()
        with pytest.raises(Exception):
            settings.port = 1

    @pytest.mark.parametrize(
        "field,value",
        [
            ("store_backend", "postgres"),
            ("detector_failure_policy", "ignore"),
            ("verbosity", "loud"),
            ("port", 0),
            ("sqlite_timeout_seconds", 0),
            ("data_dir", ""),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(InvalidConfigError) as info:
            ServiceSettings(**{field: value})
        assert info.value.key == field


class TestLoadSettings:
    def test_defaults_without_sources(self):
        assert load_settings() == ServiceSettings()

    def test_overrides(self):
        settings = load_settings(store_backend="memory", port=9000)
        assert settings.store_backend == "memory"
        assert settings.port == 9000

    def test_none_overrides_ignored(self):
        assert load_settings(port=None).port == 8080

    def test_verbose_flag(self):
        assert load_settings(verbose=True).verbosity == "verbose"
        assert load_settings(quiet=True).verbosity == "quiet"

    def test_project_config(self, tmp_path):
        (tmp_path / "mutant-scan.toml").write_text('store_backend = "diskcache"\nport = 7000\n')
        settings = load_settings()
        assert settings.store_backend == "diskcache"
        assert settings.port == 7000

    def test_section_table(self, tmp_path):
        config = tmp_path / "custom.toml"
        config.write_text('[mutant-scan]\ndetector_failure_policy = "fail_fatal"\n')
        assert load_settings(config_file=config).fail_fatal is True

    def test_global_config_lower_priority(self, tmp_path):
        (Path.home() / ".mutant-scan.toml").write_text("port = 7001\n")
        (tmp_path / "mutant-scan.toml").write_text("port = 7002\n")
        assert load_settings().port == 7002

    def test_env_beats_files(self, tmp_path, monkeypatch):
        (tmp_path / "mutant-scan.toml").write_text("port = 7002\n")
        monkeypatch.setenv("MUTANT_SCAN_PORT", "7003")
        monkeypatch.setenv("MUTANT_SCAN_SQLITE_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("MUTANT_SCAN_LOG_FILE", "scan.log")
        settings = load_settings()
        assert settings.port == 7003
        assert settings.sqlite_timeout_seconds == 2.5
        assert settings.log_file == "scan.log"

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("MUTANT_SCAN_STORE_BACKEND", "diskcache")
        assert load_settings(store_backend="memory").store_backend == "memory"

    def test_env_bool(self, monkeypatch):
        monkeypatch.setenv("MUTANT_SCAN_TRACE_CACHE", "yes")
        assert load_settings().trace_cache is True

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("MUTANT_SCAN_PORT", "eighty")
        with pytest.raises(MutantScanError):
            load_settings()

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(MutantScanError):
            load_settings(config_file=tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path):
        config = tmp_path / "bad.toml"
        config.write_text("port = = 1\n")
        with pytest.raises(MutantScanError):
            load_settings(config_file=config)

    def test_unknown_key(self, tmp_path):
        config = tmp_path / "extra.toml"
        config.write_text("colour = 'blue'\n")
        with pytest.raises(MutantScanError):
            load_settings(config_file=config)
