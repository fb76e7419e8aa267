"""Tests for the SQLite scan history."""

import sqlite3
from unittest.mock import patch

import pytest

from history import ScanHistoryDB, load_scan, load_scans, record_scan, save_scan
from models import Finding, ScanRecord


def make_record(scan_id: str, scan_date: str, findings=None) -> ScanRecord:
    findings = findings or []
    return ScanRecord(
        id=scan_id,
        repo_name="acme/shop",
        repo_url="https://github.com/acme/shop",
        total_issues=len(findings),
        low_count=len(findings),
        findings=findings,
        scan_date=scan_date,
    )


class TestScanHistoryDB:
    def test_conn_requires_connect(self, tmp_path):
        db = ScanHistoryDB(str(tmp_path / "h.db"))
        with pytest.raises(RuntimeError):
            db.conn

    def test_migration_is_idempotent(self, tmp_path):
        path = str(tmp_path / "h.db")
        with ScanHistoryDB(path):
            pass
        with ScanHistoryDB(path) as db:
            versions = db.conn.execute("SELECT version FROM schema_version").fetchall()
        assert len(versions) == 1

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "h.db"
        with ScanHistoryDB(str(path)):
            pass
        assert path.exists()


class TestReadWrite:
    def test_round_trip_with_findings(self, tmp_path):
        finding = Finding(
            file="auth.js", line=4, severity="Low", issue="weak hash", fix_suggestion="use bcrypt"
        )
        record = make_record("scan-1", "2026-01-01T00:00:00+00:00", [finding])

        with ScanHistoryDB(str(tmp_path / "h.db")) as db:
            save_scan(db.conn, record)
            loaded = load_scan(db.conn, "scan-1")

        assert loaded == record

    def test_newest_first_and_limit(self, tmp_path):
        with ScanHistoryDB(str(tmp_path / "h.db")) as db:
            save_scan(db.conn, make_record("old", "2026-01-01T00:00:00+00:00"))
            save_scan(db.conn, make_record("new", "2026-03-01T00:00:00+00:00"))
            save_scan(db.conn, make_record("mid", "2026-02-01T00:00:00+00:00"))

            assert [r.id for r in load_scans(db.conn)] == ["new", "mid", "old"]
            assert [r.id for r in load_scans(db.conn, limit=1)] == ["new"]

    def test_missing_scan(self, tmp_path):
        with ScanHistoryDB(str(tmp_path / "h.db")) as db:
            assert load_scan(db.conn, "nope") is None


class TestRecordScan:
    def test_writes_to_configured_db(self, tmp_path, monkeypatch):
        path = tmp_path / "configured.db"
        monkeypatch.setenv("SCAN_HISTORY_DB", str(path))

        assert record_scan(make_record("scan-1", "2026-01-01T00:00:00+00:00")) is True

        with ScanHistoryDB(str(path)) as db:
            assert load_scan(db.conn, "scan-1") is not None

    def test_storage_failure_is_swallowed(self, tmp_path):
        # A directory cannot be opened as a database file
        assert record_scan(make_record("scan-1", "x"), db_path=str(tmp_path)) is False

    def test_write_error_is_swallowed(self, tmp_path):
        with patch("history.save_scan", side_effect=sqlite3.OperationalError("disk I/O error")):
            assert record_scan(make_record("scan-1", "x"), db_path=str(tmp_path / "h.db")) is False
