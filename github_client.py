"""GitHub API client for fetching repository source files."""

import base64
import functools
import logging
import os
import re
from dataclasses import dataclass

import requests.exceptions
from github import Auth, Github
from github.GithubException import GithubException
from github.Repository import Repository

from errors import MaterializationError
from file_filters import select_files

logger = logging.getLogger(__name__)

# Every GitHub request gives up after this many seconds
GITHUB_TIMEOUT = 10

# Files larger than this are skipped, never truncated
MAX_FILE_CHARS = 100_000

# Owner and name from ".../github.com/<owner>/<name>..."
_REPO_URL_PATTERN = re.compile(r"github\.com/([\w.-]+)/([\w.-]+)")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass
class RepoFile:
    """A source file fetched from a repository."""

    path: str  # path within the repository (e.g., "src/auth/login.js")
    content: str  # decoded text


# ---------------------------------------------------------------------------
# Cached GitHub client
# ---------------------------------------------------------------------------
@functools.lru_cache(maxsize=1)
def get_github_client() -> Github:
    """Create or return a cached GitHub client.

    GITHUB_TOKEN is optional; without it requests are anonymous and
    subject to GitHub's lower rate limits.
    Failed requests are never retried.
    """
    token = os.getenv("GITHUB_TOKEN")
    if not token:
        logger.info("GITHUB_TOKEN not set - using unauthenticated GitHub API")
        return Github(timeout=GITHUB_TIMEOUT, retry=None)
    return Github(auth=Auth.Token(token), timeout=GITHUB_TIMEOUT, retry=None)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """
    Extract owner and repository name from a GitHub URL.

    Args:
        repo_url: e.g. "https://github.com/acme/webshop.git"

    Returns:
        (owner, name) with any trailing ".git" removed from the name

    Raises:
        MaterializationError: If the URL has no owner/name part
    """
    match = _REPO_URL_PATTERN.search(repo_url)
    if not match:
        raise MaterializationError(
            "Invalid GitHub repository URL", stage="reference"
        )

    owner, name = match.groups()
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        raise MaterializationError(
            "Invalid GitHub repository URL", stage="reference"
        )
    return owner, name


def _error_message(e: GithubException) -> str:
    if isinstance(e.data, dict):
        return e.data.get("message", str(e))
    return str(e)


def decode_content(content: str | None, encoding: str | None) -> str:
    """Decode a blob's content from its transport encoding."""
    if not content:
        return ""
    if encoding == "base64":
        return base64.b64decode(content).decode("utf-8", errors="replace")
    return content


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------
def fetch_repository(owner: str, name: str) -> Repository:
    """
    Look up repository metadata.

    Raises:
        MaterializationError: If the repository is missing or unreachable
    """
    client = get_github_client()

    try:
        return client.get_repo(f"{owner}/{name}")
    except GithubException as e:
        if e.status == 404:
            raise MaterializationError(
                f"Repository {owner}/{name} not found", stage="metadata"
            ) from e
        raise MaterializationError(
            f"GitHub API error while fetching repository metadata: "
            f"{_error_message(e)}",
            stage="metadata",
        ) from e
    except requests.exceptions.RequestException as e:
        raise MaterializationError(
            f"GitHub API request failed while fetching repository metadata: {e}",
            stage="metadata",
        ) from e


def fetch_tree_entries(repository: Repository, branch: str) -> list:
    """
    Fetch the recursive file tree for *branch* (blobs only).

    Raises:
        MaterializationError: If the tree cannot be fetched
    """
    try:
        tree = repository.get_git_tree(branch, recursive=True)
    except GithubException as e:
        raise MaterializationError(
            f"Failed to fetch repository tree: {_error_message(e)}",
            stage="tree",
        ) from e
    except requests.exceptions.RequestException as e:
        raise MaterializationError(
            f"GitHub API request failed while fetching repository tree: {e}",
            stage="tree",
        ) from e

    return [entry for entry in tree.tree if entry.type == "blob"]


def fetch_file_content(repository: Repository, entry) -> str | None:
    """Fetch and decode one blob. Returns None (and logs) on failure."""
    try:
        blob = repository.get_git_blob(entry.sha)
    except GithubException as e:
        logger.warning("❌ Error fetching %s: %s", entry.path, _error_message(e))
        return None
    except requests.exceptions.RequestException as e:
        logger.warning("❌ Error fetching %s: %s", entry.path, e)
        return None

    try:
        return decode_content(blob.content, blob.encoding)
    except ValueError as e:
        logger.warning("❌ Could not decode %s: %s", entry.path, e)
        return None


def fetch_repository_files(repo_url: str) -> list[RepoFile]:
    """
    Fetch a bounded, prioritized set of source files from a repository.

    Args:
        repo_url: GitHub repository URL

    Returns:
        Up to 20 RepoFile objects, security-relevant paths first

    Raises:
        MaterializationError: If the URL is invalid, a metadata or tree
            lookup fails, or no supported files remain
    """
    owner, name = parse_repo_url(repo_url)

    repository = fetch_repository(owner, name)
    branch = repository.default_branch or "main"
    logger.info("Fetching tree for %s/%s@%s", owner, name, branch)

    entries = fetch_tree_entries(repository, branch)
    selected = select_files(entries)

    files: list[RepoFile] = []
    for entry in selected:
        content = fetch_file_content(repository, entry)
        if content is None:
            continue

        if len(content) > MAX_FILE_CHARS:
            logger.info("⚠️  Skipping large file: %s", entry.path)
            continue

        files.append(RepoFile(path=entry.path, content=content))

    if not files:
        raise MaterializationError(
            "No supported code files found in repository", stage="selection"
        )

    logger.info("✅ Fetched %d file(s) for analysis", len(files))
    return files
