"""Shared fixtures for AuditLens tests. Nothing here touches the network."""

import base64
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from real keys, real tokens and the real history DB."""
    # Importing auditor loads .env, so patch it before clearing the keys
    monkeypatch.setattr("auditor.USE_MOCK", False)
    monkeypatch.setenv("SCAN_HISTORY_DB", str(tmp_path / "history.db"))
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from main import app

    return TestClient(app)


def _blob(text: str) -> SimpleNamespace:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    # GitHub wraps base64 content at 60 chars
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return SimpleNamespace(content=wrapped, encoding="base64")


@pytest.fixture
def fake_github():
    """Factory: a mocked PyGithub client serving *files* (path -> text)."""

    def build(files: dict[str, str], default_branch: str = "main") -> MagicMock:
        repository = MagicMock()
        repository.default_branch = default_branch
        repository.get_git_tree.return_value = SimpleNamespace(
            tree=[SimpleNamespace(path=p, type="blob", sha=p) for p in files]
        )
        repository.get_git_blob.side_effect = lambda sha: _blob(files[sha])

        github = MagicMock()
        github.get_repo.return_value = repository
        return github

    return build
