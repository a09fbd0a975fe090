"""SQLite-backed record database stored in the configured data directory."""

import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1


class RecordDB:
    """Manages the classification record SQLite database.

    One connection is shared across threads; callers serialize access with
    :attr:`lock`. Key uniqueness is enforced by the ``UNIQUE`` constraint on
    ``fingerprint``, not by the lock.

    Usage::

        with RecordDB(".mutant-scan/records.db") as db:
            db.conn.execute("SELECT COUNT(*) FROM classification_records")
    """

    def __init__(self, db_path: Union[str, Path], timeout: float = 5.0) -> None:
        self.db_path: Path = Path(db_path)
        self.db_dir: Path = self.db_path.parent
        self.timeout = timeout
        self.lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("RecordDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def _ensure_dir(self) -> None:
        """Create the data directory and write a .gitignore so it stays untracked."""
        self.db_dir.mkdir(parents=True, exist_ok=True)
        gitignore = self.db_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text("*\n")

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self._ensure_dir()
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.timeout,
            check_same_thread=False,
            isolation_level=None,
        )
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("Record DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        with self.lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "RecordDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )

        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )

        # ── classification_records ───────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS classification_records (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                fingerprint TEXT    NOT NULL UNIQUE,
                is_mutant   INTEGER NOT NULL,
                created_at  TEXT    NOT NULL
            )
            """
        )

        # ── indexes ──────────────────────────────────────────────
        c.execute(
            "CREATE INDEX IF NOT EXISTS idx_records_is_mutant ON classification_records(is_mutant)"
        )

    def schema_version(self) -> int:
        row = self.conn.execute("SELECT version FROM schema_version").fetchone()
        return int(row["version"])
