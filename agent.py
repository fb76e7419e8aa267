"""
AuditLens Agent - LangGraph-based scan pipeline

This module implements the scan workflow as a state machine using LangGraph.
Repository scans fetch a prioritized file set from GitHub first; snippet
scans go straight to analysis. A failed repository fetch ends the graph
early with an error in the state.
"""

import functools
import logging
from dataclasses import dataclass, field

from langgraph.graph import END, START, StateGraph

import config as _config  # noqa: F401  loads .env and configures logging
from auditor import analyze_code, build_code_bundle
from errors import MaterializationError
from github_client import RepoFile, fetch_repository_files, parse_repo_url
from models import Finding, ScanRequest
from report import SNIPPET_REPO_NAME

logger = logging.getLogger(__name__)


# =============================================================================
# STATE DEFINITION
# =============================================================================
@dataclass
class ScanState:
    """
    State that flows through the scan graph.

    Each node can read any field and return updates to specific fields.
    LangGraph automatically merges the updates into the state.
    """

    # Input (required)
    kind: str  # "repo" or "snippet"
    content: str  # repository URL or raw code

    # Intermediate data (populated by nodes)
    repo_name: str = SNIPPET_REPO_NAME
    files: list[RepoFile] = field(default_factory=list)
    code: str = ""  # text sent to the auditor

    # Output
    findings: list[Finding] = field(default_factory=list)
    error: str | None = None  # materialization failure, if any


@dataclass
class ScanOutcome:
    """What a finished pipeline run hands back to the HTTP layer."""

    findings: list[Finding]
    repo_name: str = SNIPPET_REPO_NAME
    files_scanned: int = 0


# =============================================================================
# NODE FUNCTIONS
# =============================================================================
def fetch_repository(state: ScanState) -> dict:
    """
    Fetch a prioritized file set from GitHub.

    Reads: content
    Updates: repo_name, files, code, error
    """
    logger.info("📥 Fetching repository %s...", state.content)

    try:
        owner, name = parse_repo_url(state.content)
        files = fetch_repository_files(state.content)
    except MaterializationError as e:
        logger.error("Failed to fetch repository (%s): %s", e.stage, e)
        return {"error": str(e)}

    return {
        "repo_name": f"{owner}/{name}",
        "files": files,
        "code": build_code_bundle(files),
    }


def load_snippet(state: ScanState) -> dict:
    """
    Use the submitted snippet as-is.

    Reads: content
    Updates: code
    """
    logger.info("📄 Scanning code snippet (%d chars)", len(state.content))
    return {"code": state.content}


def run_analysis(state: ScanState) -> dict:
    """
    Send the assembled code to the auditor.

    Reads: code
    Updates: findings
    """
    return {"findings": analyze_code(state.code)}


# =============================================================================
# DECISION FUNCTIONS (for conditional edges)
# =============================================================================
def _get(state, key: str):
    # LangGraph may pass state as dict or dataclass
    return state.get(key) if isinstance(state, dict) else getattr(state, key)


def route_by_kind(state: ScanState) -> str:
    """Repository scans fetch files first; snippets skip straight ahead."""
    return "fetch_repository" if _get(state, "kind") == "repo" else "load_snippet"


def should_analyze(state: ScanState) -> str:
    """Stop when the repository could not be materialized."""
    if _get(state, "error"):
        logger.info("🔀 Decision: repository fetch failed → ending")
        return "end"
    return "analyze"


# =============================================================================
# GRAPH CONSTRUCTION
# =============================================================================
def build_scan_graph() -> StateGraph:
    """Build the scan workflow graph."""
    graph = StateGraph(ScanState)

    graph.add_node("fetch_repository", fetch_repository)
    graph.add_node("load_snippet", load_snippet)
    graph.add_node("analyze", run_analysis)

    graph.add_conditional_edges(
        START,
        route_by_kind,
        {
            "fetch_repository": "fetch_repository",
            "load_snippet": "load_snippet",
        },
    )
    graph.add_conditional_edges(
        "fetch_repository",
        should_analyze,
        {
            "analyze": "analyze",
            "end": END,
        },
    )
    graph.add_edge("load_snippet", "analyze")
    graph.add_edge("analyze", END)

    return graph


@functools.lru_cache(maxsize=1)
def create_agent():
    """Create and compile the scan agent (once per process)."""
    return build_scan_graph().compile()


def run_scan(request: ScanRequest) -> ScanOutcome:
    """
    Run the scan pipeline for a validated request.

    Raises:
        MaterializationError: If the repository could not be fetched
    """
    final_state = create_agent().invoke(
        ScanState(kind=request.kind, content=request.content)
    )

    error = final_state.get("error")
    if error:
        raise MaterializationError(error)

    return ScanOutcome(
        findings=final_state.get("findings", []),
        repo_name=final_state.get("repo_name", SNIPPET_REPO_NAME),
        files_scanned=len(final_state.get("files", [])),
    )
