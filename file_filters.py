"""Path filters and priority selection for repository files."""

import logging
import re
from typing import Protocol, TypeVar

logger = logging.getLogger(__name__)


class HasPath(Protocol):
    path: str


T = TypeVar("T", bound=HasPath)


# Paths to skip entirely: dependencies, VCS, build output, tests, lockfiles
EXCLUDE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"(^|/)(node_modules|vendor)/"),
    re.compile(r"(^|/)\.git/"),
    re.compile(r"(^|/)(dist|build|out|\.next)/"),
    re.compile(r"(^|/)coverage/"),
    re.compile(r"(^|/)(\.vscode|\.idea)/"),
    re.compile(r"(^|/)(__pycache__|\.pytest_cache|venv|\.venv|env)/"),
    re.compile(r"(^|/)(__tests__|tests?)/", re.IGNORECASE),
    re.compile(r"\.(test|spec)\.[^/]+$"),
    re.compile(r"(^|/)(package-lock\.json|yarn\.lock|pnpm-lock\.yaml)$"),
    re.compile(r"\.lock$"),
    re.compile(r"\.min\."),
    re.compile(r"\.bundle\."),
    re.compile(r"\.map$"),
)

SUPPORTED_EXTENSIONS: tuple[str, ...] = (
    ".js", ".ts", ".py", ".jsx", ".tsx", ".go", ".java", ".php", ".rb",
)


def _patterns(*keywords: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(k, re.IGNORECASE) for k in keywords)


# Ordered tiers, first match wins. Anything unmatched is "regular".
PRIORITY_TIERS: tuple[tuple[str, tuple[re.Pattern, ...]], ...] = (
    (
        "high",
        _patterns(
            r"auth", r"login", r"signin", r"signup", r"jwt", r"token",
            r"password", r"session", r"credential", r"oauth",
            r"api/.*key", r"api[_-]?key",
        ),
    ),
    (
        "medium",
        _patterns(
            r"middleware", r"route", r"api", r"security", r"config",
            r"\.env", r"database", r"db",
        ),
    ),
)
REGULAR_TIER = "regular"

# Max files taken from each tier (20 in total)
TIER_LIMITS: dict[str, int] = {"high": 12, "medium": 6, REGULAR_TIER: 2}
MAX_FILES: int = sum(TIER_LIMITS.values())


def is_excluded(path: str) -> bool:
    """True when *path* is a dependency, build artifact, test or lockfile."""
    return any(pattern.search(path) for pattern in EXCLUDE_PATTERNS)


def is_supported(path: str) -> bool:
    """True when *path* has a source extension the auditor handles."""
    return path.endswith(SUPPORTED_EXTENSIONS)


def should_scan_file(path: str) -> bool:
    """Check if file should be scanned based on path and extension."""
    return not is_excluded(path) and is_supported(path)


def classify_priority(path: str) -> str:
    """Return the priority tier name for *path*."""
    for tier, patterns in PRIORITY_TIERS:
        if any(pattern.search(path) for pattern in patterns):
            return tier
    return REGULAR_TIER


def select_files(entries: list[T]) -> list[T]:
    """
    Pick the files worth sending to the auditor.

    Filters out excluded and unsupported paths, buckets the rest by
    priority tier, and takes at most ``TIER_LIMITS[tier]`` from each.
    Tree order is kept within a tier.

    Args:
        entries: Tree entries exposing a ``path`` attribute

    Returns:
        High-priority files first, then medium, then regular
    """
    buckets: dict[str, list[T]] = {tier: [] for tier in TIER_LIMITS}

    for entry in entries:
        if not should_scan_file(entry.path):
            continue
        buckets[classify_priority(entry.path)].append(entry)

    logger.info(
        "📊 File analysis: %d critical, %d medium, %d regular",
        len(buckets["high"]),
        len(buckets["medium"]),
        len(buckets[REGULAR_TIER]),
    )

    selected: list[T] = []
    for tier, limit in TIER_LIMITS.items():
        selected.extend(buckets[tier][:limit])

    logger.info("🎯 Selected %d file(s) for scanning", len(selected))
    return selected
