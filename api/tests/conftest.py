"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_ENV_KEYS = (
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "GITHUB_API_BASE_URL",
    "GITHUB_TIMEOUT_SECONDS",
    "GLADIATORS_REQUIRE_TOKEN",
    "GLADIATORS_RETRY_DELAY_SECONDS",
    "GLADIATORS_MAX_ATTEMPTS",
    "GLADIATORS_BACKFILL_CONCURRENCY",
    "GLADIATORS_COMMIT_WEIGHT",
    "GLADIATORS_ADDITIONS_WEIGHT",
    "GLADIATORS_DELETIONS_WEIGHT",
    "GLADIATORS_LINES_PER_COMMIT_BASELINE",
    "ALLOWED_ORIGINS",
    "API_SLOW_REQUEST_MS",
    "GLADIATORS_MAX_CACHED_REPOS",
)


@pytest.fixture(autouse=True)
def _isolate_github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Tests never see a developer's real token or overrides.
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient used by service-level tests.

    commits_by_login: login -> list of commit rows ({"sha": ...}) or an Exception to raise.
    details_by_sha: sha -> commit detail dict or an Exception to raise.
    stats_responses: successive results for get_contributor_stats (values or Exceptions).
    """

    def __init__(
        self,
        commits_by_login: Optional[dict[str, Any]] = None,
        details_by_sha: Optional[dict[str, Any]] = None,
        stats_responses: Optional[list[Any]] = None,
        summary: Any = None,
    ) -> None:
        self.commits_by_login = commits_by_login or {}
        self.details_by_sha = details_by_sha or {}
        self.stats_responses = list(stats_responses or [])
        self.summary = [] if summary is None else summary
        self.calls: list[tuple[str, str]] = []

    async def get_contributor_stats(self, owner: str, repo: str) -> Any:
        self.calls.append(("stats", f"{owner}/{repo}"))
        result = self.stats_responses.pop(0) if len(self.stats_responses) > 1 else self.stats_responses[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def list_contributors(self, owner: str, repo: str, per_page: int = 100, max_pages: int = 5) -> Any:
        self.calls.append(("summary", f"{owner}/{repo}"))
        if isinstance(self.summary, Exception):
            raise self.summary
        return self.summary

    async def list_commits_by_author(self, owner: str, repo: str, login: str, limit: int = 30) -> list[dict]:
        self.calls.append(("commits", login))
        result = self.commits_by_login.get(login, [])
        if isinstance(result, Exception):
            raise result
        return result[:limit]

    async def get_commit(self, owner: str, repo: str, sha: str) -> dict:
        self.calls.append(("commit", sha))
        result = self.details_by_sha.get(sha, {})
        if isinstance(result, Exception):
            raise result
        return result


def commit_detail(date: str, additions: int, deletions: int) -> dict:
    return {
        "sha": f"sha-{date}-{additions}-{deletions}",
        "stats": {"additions": additions, "deletions": deletions, "total": additions + deletions},
        "commit": {"author": {"name": "x", "date": date}},
    }


@pytest.fixture
def fake_client_factory():
    return FakeGitHubClient


@pytest.fixture
def make_commit_detail():
    return commit_detail
