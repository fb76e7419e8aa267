"""Tests for severity aggregation and report/record composition."""

import pytest

from models import Finding, ScanReport, ScanRequest, SeveritySummary
from report import SNIPPET_REPO_NAME, build_scan_record, compose_report


def finding(severity: str) -> Finding:
    return Finding(file="a.js", line=1, severity=severity, issue="x", fix_suggestion="y")


class TestSeveritySummary:
    def test_empty(self):
        assert SeveritySummary.from_findings([]).model_dump() == {
            "total": 0,
            "critical": 0,
            "high": 0,
            "low": 0,
        }

    @pytest.mark.parametrize(
        "severities",
        [
            ["Critical"],
            ["High", "High", "Low"],
            ["Low"] * 5 + ["Critical"] * 2 + ["High"],
        ],
    )
    def test_counts_sum_to_total(self, severities):
        summary = SeveritySummary.from_findings([finding(s) for s in severities])
        assert summary.total == len(severities)
        assert summary.critical + summary.high + summary.low == summary.total
        assert summary.critical == severities.count("Critical")
        assert summary.high == severities.count("High")


class TestComposeReport:
    def test_envelope(self):
        report = compose_report([finding("Critical"), finding("Low")])
        data = report.model_dump()
        assert data["success"] is True
        assert data["report_id"].startswith("scan-")
        assert data["summary"] == {"total": 2, "critical": 1, "high": 0, "low": 1}
        assert len(data["findings"]) == 2

    def test_fresh_ids(self):
        assert compose_report([]).report_id != compose_report([]).report_id

    def test_summary_follows_findings(self):
        report = ScanReport(report_id="scan-1", findings=[finding("High")])
        assert report.summary.high == 1
        assert report.summary.total == 1


class TestBuildScanRecord:
    def test_repo_record(self):
        report = compose_report([finding("Critical"), finding("High")])
        request = ScanRequest(kind="repo", content="https://github.com/acme/shop")
        record = build_scan_record(report, request, "acme/shop")

        assert record.id == report.report_id
        assert record.repo_name == "acme/shop"
        assert record.repo_url == "https://github.com/acme/shop"
        assert (record.total_issues, record.critical_count, record.high_count, record.low_count) == (2, 1, 1, 0)
        assert record.status == "completed"
        assert record.scan_date

    def test_snippet_record(self):
        report = compose_report([])
        request = ScanRequest(kind="snippet", content="eval(req.body.code)")
        record = build_scan_record(report, request)
        assert record.repo_name == SNIPPET_REPO_NAME
        assert record.repo_url is None
        assert record.total_issues == 0
