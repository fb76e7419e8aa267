"""Parsing and normalization of untrusted model output into Findings.

Every field bound a Finding carries is enforced here, whatever the model
returned: unknown severities become ``Low``, line numbers are clamped to
at least 1, and free-text fields are truncated.
"""

import json
import logging
import re

from models import MAX_FIX_LENGTH, MAX_ISSUE_LENGTH, SEVERITIES, Finding

logger = logging.getLogger(__name__)

DEFAULT_FILE = "unknown"
DEFAULT_ISSUE = "Unspecified security issue"
DEFAULT_FIX = "Review and address this vulnerability"

_CODE_FENCE = re.compile(r"```[\w-]*")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_LEADING_INT = re.compile(r"^\s*[-+]?\d+")


def synthetic_finding(file: str, issue: str, fix_suggestion: str) -> Finding:
    """Build a Low-severity placeholder finding that reports a degradation."""
    return Finding(
        file=file,
        line=1,
        severity="Low",
        issue=issue[:MAX_ISSUE_LENGTH],
        fix_suggestion=fix_suggestion[:MAX_FIX_LENGTH],
    )


# ---------------------------------------------------------------------------
# Locating the JSON payload
# ---------------------------------------------------------------------------
def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json, ```javascript, ```)."""
    return _CODE_FENCE.sub("", text).strip()


def extract_json_array(text: str) -> str | None:
    """
    Return the first balanced ``[...]`` substring of *text*.

    Brackets inside quoted strings are ignored. If an array opens but
    never closes, everything from the opening bracket on is returned so
    the caller can still attempt a repair. Returns None when there is no
    ``[`` at all.
    """
    start = text.find("[")
    if start == -1:
        return None

    depth = 0
    quote: str | None = None
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch in ('"', "'"):
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return text[start:]


def repair_json(text: str) -> str:
    """Fix the usual LLM JSON mistakes: trailing commas, single quotes, raw newlines."""
    repaired = _TRAILING_COMMA.sub(r"\1", text)
    repaired = repaired.replace("'", '"')
    return repaired.replace("\r", " ").replace("\n", " ")


# ---------------------------------------------------------------------------
# Per-field coercion
# ---------------------------------------------------------------------------
def coerce_line(value) -> int:
    """Parse a line number, defaulting to 1 and never going below 1."""
    if isinstance(value, bool):
        line = 1
    elif isinstance(value, int):
        line = value
    elif isinstance(value, float):
        line = int(value) if value == value and abs(value) != float("inf") else 1
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        try:
            line = int(match.group()) if match else 1
        except ValueError:
            # digit run past the interpreter's int conversion limit
            line = 1
    else:
        line = 1
    return max(1, line or 1)


def coerce_severity(value) -> str:
    return value if value in SEVERITIES else "Low"


def normalize_finding(item) -> Finding | None:
    """
    Turn one element of the model's array into a bounded Finding.

    Returns None for elements that are not objects or that carry neither
    an ``issue`` nor a ``severity``.
    """
    if not isinstance(item, dict):
        return None

    issue = item.get("issue")
    severity = item.get("severity")
    if not issue and not severity:
        return None

    return Finding(
        file=str(item.get("file") or DEFAULT_FILE),
        line=coerce_line(item.get("line")),
        severity=coerce_severity(severity),
        issue=str(issue or DEFAULT_ISSUE)[:MAX_ISSUE_LENGTH],
        fix_suggestion=str(item.get("fix_suggestion") or DEFAULT_FIX)[
            :MAX_FIX_LENGTH
        ],
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def parse_findings(text: str) -> list[Finding]:
    """
    Parse raw completion text into validated findings.

    Never raises. Output that cannot be parsed even after one repair pass
    yields a single synthetic "Failed to parse AI response" finding; a
    payload that parses to something other than an array yields no
    findings.
    """
    cleaned = strip_code_fences(text)
    candidate = extract_json_array(cleaned) or cleaned
    logger.debug("Cleaned content: %s", candidate[:300])

    try:
        data = json.loads(candidate)
    except ValueError as e:
        logger.warning("⚠️  JSON parse failed (%s), attempting repair...", e)
        try:
            data = json.loads(repair_json(candidate))
        except ValueError as retry_error:
            logger.error("❌ JSON parse failed after repair: %s", retry_error)
            logger.debug("Raw response: %s", text)
            return [
                synthetic_finding(
                    "parser",
                    "Failed to parse AI response",
                    "Check server logs for the raw model output",
                )
            ]

    if not isinstance(data, list):
        logger.warning("Response is not an array: %s", type(data).__name__)
        return []

    findings = [f for f in (normalize_finding(item) for item in data) if f]
    dropped = len(data) - len(findings)
    if dropped:
        logger.info("Dropped %d malformed finding(s)", dropped)
    return findings
