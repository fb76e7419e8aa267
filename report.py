"""Assembly of the response envelope and the persisted scan record."""

import uuid
from datetime import datetime, timezone

from models import Finding, ScanRecord, ScanReport, ScanRequest

SNIPPET_REPO_NAME = "code-snippet"


def new_report_id() -> str:
    return f"scan-{uuid.uuid4().hex}"


def compose_report(findings: list[Finding]) -> ScanReport:
    """Wrap *findings* in a report with a fresh id; the summary is derived."""
    return ScanReport(report_id=new_report_id(), findings=list(findings))


def build_scan_record(
    report: ScanReport,
    request: ScanRequest,
    repo_name: str = SNIPPET_REPO_NAME,
) -> ScanRecord:
    """Describe a finished scan for the history store."""
    summary = report.summary
    return ScanRecord(
        id=report.report_id,
        repo_name=repo_name,
        repo_url=request.content if request.kind == "repo" else None,
        total_issues=summary.total,
        critical_count=summary.critical,
        high_count=summary.high,
        low_count=summary.low,
        findings=report.findings,
        status="completed",
        scan_date=datetime.now(timezone.utc).isoformat(),
    )
