"""Security analysis: sends code to Gemini and normalizes what comes back."""

import logging
from collections import Counter

from config import DEFAULT_MODEL, USE_MOCK, call_gemini, get_gemini_api_key
from errors import AnalysisError
from findings_parser import parse_findings, synthetic_finding
from github_client import RepoFile
from mock_data import MOCK_RESPONSE
from models import Finding

logger = logging.getLogger(__name__)

# Context budget for one audit call (characters, not tokens)
MAX_CODE_LENGTH = 100_000

FILE_DELIMITER = "--- FILE: {path} ---"


def build_code_bundle(files: list[RepoFile]) -> str:
    """Join repository files into one text, each under a FILE delimiter line."""
    return "\n\n".join(
        f"{FILE_DELIMITER.format(path=f.path)}\n{f.content}" for f in files
    )


def analyze_code(code: str, model: str = DEFAULT_MODEL) -> list[Finding]:
    """
    Audit *code* for security vulnerabilities.

    Never fails the caller: a missing API key, an API error or unparseable
    output each come back as a single synthetic Low-severity finding.

    Args:
        code: Snippet text or a bundle from :func:`build_code_bundle`
        model: Gemini model to use

    Returns:
        Validated findings, possibly empty
    """
    if not USE_MOCK and not get_gemini_api_key():
        logger.error("GEMINI_API_KEY not set")
        return [
            synthetic_finding(
                "configuration",
                "AI API key not configured",
                "Set GEMINI_API_KEY in the server environment",
            )
        ]

    if len(code) > MAX_CODE_LENGTH:
        logger.info(
            "⚠️  Code truncated: %d → %d chars", len(code), MAX_CODE_LENGTH
        )
        code = code[:MAX_CODE_LENGTH]

    if USE_MOCK:
        logger.info("[MOCK MODE - No API call made]")
        text = MOCK_RESPONSE
    else:
        logger.info("🚀 Starting security analysis (%s)...", model)
        try:
            text = call_gemini(code, model)
        except AnalysisError as e:
            logger.error("❌ Security analysis error: %s", e)
            return [
                synthetic_finding(
                    "error",
                    "Security analysis failed",
                    f"Error: {e}. Check server logs.",
                )
            ]

    logger.debug("Raw response preview: %s", text[:200])
    findings = parse_findings(text)

    breakdown = Counter(f.severity for f in findings)
    logger.info(
        "🎯 Analysis complete: %d finding(s) %s", len(findings), dict(breakdown)
    )
    return findings
