"""Data models for scan requests, findings and reports."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

Severity = Literal["Critical", "High", "Low"]
ScanKind = Literal["repo", "snippet"]

SEVERITIES: tuple[str, ...] = ("Critical", "High", "Low")

MAX_ISSUE_LENGTH = 250
MAX_FIX_LENGTH = 400


class ScanRequest(BaseModel):
    """A validated scan submission."""

    model_config = ConfigDict(frozen=True)

    kind: ScanKind = Field(description="repo or snippet")
    content: str = Field(description="GitHub repository URL or raw code")


class Finding(BaseModel):
    """A single reported vulnerability."""

    file: str = Field(default="unknown", description="File path or snippet label")
    line: int = Field(default=1, ge=1, description="1-based line number")
    severity: Severity = Field(default="Low", description="Critical, High, Low")
    issue: str = Field(max_length=MAX_ISSUE_LENGTH, description="What the issue is")
    fix_suggestion: str = Field(
        max_length=MAX_FIX_LENGTH, description="Suggested remediation"
    )


class SeveritySummary(BaseModel):
    """Per-severity counts for a list of findings."""

    total: int = 0
    critical: int = 0
    high: int = 0
    low: int = 0

    @classmethod
    def from_findings(cls, findings: list[Finding]) -> "SeveritySummary":
        summary = cls(total=len(findings))
        for finding in findings:
            if finding.severity == "Critical":
                summary.critical += 1
            elif finding.severity == "High":
                summary.high += 1
            else:
                summary.low += 1
        return summary


class ScanReport(BaseModel):
    """Response envelope returned to the client."""

    success: bool = True
    report_id: str
    findings: list[Finding] = Field(default_factory=list)

    @computed_field
    @property
    def summary(self) -> SeveritySummary:
        return SeveritySummary.from_findings(self.findings)


class ScanRecord(BaseModel):
    """A scan as persisted in the history store."""

    id: str
    repo_name: str
    repo_url: str | None = None
    total_issues: int = 0
    critical_count: int = 0
    high_count: int = 0
    low_count: int = 0
    findings: list[Finding] = Field(default_factory=list)
    status: str = "completed"
    scan_date: str = Field(description="UTC ISO-8601 timestamp")
