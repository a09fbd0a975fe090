"""Configuration loading and management for Mutant Scan.

Configuration sources are merged in priority order:
    1. Defaults (defined in ServiceSettings)
    2. Global config (~/.mutant-scan.toml)
    3. Project config (./mutant-scan.toml)
    4. Explicit config file
    5. Environment variables (MUTANT_SCAN_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> settings = load_settings(store_backend="memory", verbose=True)
    >>> settings.verbosity
    'verbose'
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError, MutantScanError

Verbosity = Literal["quiet", "normal", "verbose"]
StoreBackend = Literal["sqlite", "diskcache", "memory"]
FailurePolicy = Literal["fail_safe", "fail_fatal"]

_ENV_PREFIX = "MUTANT_SCAN_"
_STORE_BACKENDS = ("sqlite", "diskcache", "memory")
_FAILURE_POLICIES = ("fail_safe", "fail_fatal")
_VERBOSITIES = ("quiet", "normal", "verbose")


@dataclass(frozen=True)
class ServiceSettings:
    """Settings for the classification service.

    Attributes:
        Storage:
            store_backend: Backing store for classification records
            data_dir: Directory holding the SQLite database or diskcache files
            db_filename: SQLite database file name inside data_dir
            sqlite_timeout_seconds: How long a writer waits on a locked database

        Classification:
            detector_failure_policy: ``fail_safe`` classifies a crashing
                detector run as human and caches it; ``fail_fatal`` raises
                DetectionError and caches nothing

        HTTP server:
            host: Interface to bind
            port: Port to listen on

        Output control:
            verbosity: Logging verbosity level
            log_file: Optional file receiving a copy of the log
            trace_cache: Log every cache hit, miss and store at DEBUG
    """

    # Storage
    store_backend: StoreBackend = "sqlite"
    data_dir: str = ".mutant-scan"
    db_filename: str = "records.db"
    sqlite_timeout_seconds: float = 5.0

    # Classification
    detector_failure_policy: FailurePolicy = "fail_safe"

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 8080

    # Output control
    verbosity: Verbosity = "normal"
    log_file: Optional[str] = None
    trace_cache: bool = False

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.store_backend not in _STORE_BACKENDS:
            raise InvalidConfigError(
                "store_backend", self.store_backend, f"expected one of {', '.join(_STORE_BACKENDS)}"
            )
        if self.detector_failure_policy not in _FAILURE_POLICIES:
            raise InvalidConfigError(
                "detector_failure_policy",
                self.detector_failure_policy,
                f"expected one of {', '.join(_FAILURE_POLICIES)}",
            )
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError(
                "verbosity", self.verbosity, f"expected one of {', '.join(_VERBOSITIES)}"
            )
        if not self.data_dir:
            raise InvalidConfigError("data_dir", self.data_dir, "must not be empty")
        if not self.db_filename:
            raise InvalidConfigError("db_filename", self.db_filename, "must not be empty")
        if self.sqlite_timeout_seconds <= 0:
            raise InvalidConfigError(
                "sqlite_timeout_seconds", self.sqlite_timeout_seconds, "must be positive"
            )
        if not 0 < self.port < 65536:
            raise InvalidConfigError("port", self.port, "must be between 1 and 65535")

    @property
    def db_path(self) -> Path:
        """Full path of the SQLite database file."""
        return Path(self.data_dir) / self.db_filename

    @property
    def fail_fatal(self) -> bool:
        return self.detector_failure_policy == "fail_fatal"


def load_settings(config_file: Optional[Path] = None, **overrides) -> ServiceSettings:
    """Load settings with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options do not mask file values.

    Returns:
        Validated ServiceSettings instance

    Raises:
        MutantScanError: If a config file is invalid or missing
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".mutant-scan.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except MutantScanError:
            raise
        except Exception as e:
            raise MutantScanError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "mutant-scan.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except MutantScanError:
            raise
        except Exception as e:
            raise MutantScanError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise MutantScanError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except MutantScanError:
            raise
        except Exception as e:
            raise MutantScanError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ServiceSettings(**merged)
    except TypeError as e:
        # Unknown field in config
        raise MutantScanError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load settings from MUTANT_SCAN_* environment variables.

    Every ServiceSettings field maps to ``MUTANT_SCAN_<FIELD_NAME>``, e.g.
    ``MUTANT_SCAN_STORE_BACKEND=memory`` or ``MUTANT_SCAN_PORT=9000``.
    """
    type_hints = get_type_hints(ServiceSettings)

    result: dict[str, Any] = {}

    for field_name in ServiceSettings.__dataclass_fields__:
        env_key = f"{_ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise MutantScanError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Settings may live at the top level or under a ``[mutant-scan]`` table.
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise MutantScanError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.pop("mutant-scan", None)
    if isinstance(section, dict):
        data.update(section)
    return data

