"""SQLite-backed scan history."""

import json
import logging
import os
import sqlite3
from pathlib import Path

from models import ScanRecord

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DB = "scan_history.db"

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1


def history_db_path() -> str:
    """Location of the history database (SCAN_HISTORY_DB or the default)."""
    return os.getenv("SCAN_HISTORY_DB", DEFAULT_HISTORY_DB)


class ScanHistoryDB:
    """Manages the scan history SQLite database.

    Usage::

        with ScanHistoryDB("scan_history.db") as db:
            save_scan(db.conn, record)
    """

    def __init__(self, db_path: str) -> None:
        self.db_path: Path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError(
                "ScanHistoryDB is not connected. Use as context manager or call connect()."
            )
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("History DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "ScanHistoryDB":
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

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS scan_history (
                id              TEXT    PRIMARY KEY,
                repo_name       TEXT    NOT NULL,
                repo_url        TEXT,
                total_issues    INTEGER NOT NULL DEFAULT 0,
                critical_count  INTEGER NOT NULL DEFAULT 0,
                high_count      INTEGER NOT NULL DEFAULT 0,
                low_count       INTEGER NOT NULL DEFAULT 0,
                findings        TEXT    NOT NULL DEFAULT '[]',
                status          TEXT    NOT NULL,
                scan_date       TEXT    NOT NULL
            )
            """
        )
        c.execute(
            "CREATE INDEX IF NOT EXISTS idx_scan_history_date "
            "ON scan_history(scan_date)"
        )
        c.commit()


# ── reads & writes ────────────────────────────────────────────────


def save_scan(conn: sqlite3.Connection, record: ScanRecord) -> None:
    """Insert one scan row."""
    conn.execute(
        """
        INSERT INTO scan_history (
            id, repo_name, repo_url, total_issues, critical_count,
            high_count, low_count, findings, status, scan_date
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            record.id,
            record.repo_name,
            record.repo_url,
            record.total_issues,
            record.critical_count,
            record.high_count,
            record.low_count,
            json.dumps([f.model_dump() for f in record.findings]),
            record.status,
            record.scan_date,
        ),
    )
    conn.commit()


def _row_to_record(row: sqlite3.Row) -> ScanRecord:
    data = dict(row)
    data["findings"] = json.loads(data["findings"] or "[]")
    return ScanRecord.model_validate(data)


def load_scans(conn: sqlite3.Connection, limit: int = 20) -> list[ScanRecord]:
    """Most recent scans first."""
    rows = conn.execute(
        "SELECT * FROM scan_history ORDER BY scan_date DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [_row_to_record(row) for row in rows]


def load_scan(conn: sqlite3.Connection, scan_id: str) -> ScanRecord | None:
    row = conn.execute(
        "SELECT * FROM scan_history WHERE id = ?", (scan_id,)
    ).fetchone()
    return _row_to_record(row) if row else None


def record_scan(record: ScanRecord, db_path: str | None = None) -> bool:
    """
    Persist *record*, best-effort.

    Storage failures are logged and swallowed: the report has already
    been returned to the caller.

    Returns:
        True if the row was written
    """
    try:
        with ScanHistoryDB(db_path or history_db_path()) as db:
            save_scan(db.conn, record)
    except (sqlite3.Error, OSError) as e:
        logger.error("Failed to save scan history for %s: %s", record.id, e)
        return False

    logger.info("Saved scan %s to history", record.id)
    return True
