"""Validation of incoming scan payloads."""

import re

from models import ScanRequest

MIN_SNIPPET_LENGTH = 10
MAX_SNIPPET_LENGTH = 50_000

# Anywhere in the string: "github.com/<owner>/<name>"
REPO_URL_PATTERN = re.compile(r"github\.com/[\w.-]+/[\w.-]+")

SCAN_TYPES = ("repo", "snippet")


def validate_payload(payload) -> str | None:
    """Check a raw ``{type, content}`` payload.

    Returns None when the payload is acceptable, otherwise the reason it
    was rejected. Never raises: anything that is not a dict is treated as
    an empty payload.
    """
    if not isinstance(payload, dict):
        payload = {}

    scan_type = payload.get("type")
    if not isinstance(scan_type, str) or scan_type not in SCAN_TYPES:
        return 'Invalid type. Must be "repo" or "snippet"'

    content = payload.get("content")
    if not isinstance(content, str) or not content:
        return "Missing or invalid content"

    if scan_type == "repo":
        if not REPO_URL_PATTERN.search(content):
            return "Invalid GitHub repository URL format"
    else:
        if len(content.strip()) < MIN_SNIPPET_LENGTH:
            return (
                f"Code snippet too short (minimum {MIN_SNIPPET_LENGTH} characters)"
            )
        if len(content) > MAX_SNIPPET_LENGTH:
            return "Code snippet too large (maximum 50KB)"

    return None


def build_scan_request(payload: dict) -> ScanRequest:
    """Turn a payload that passed :func:`validate_payload` into a ScanRequest."""
    return ScanRequest(kind=payload["type"], content=payload["content"])
