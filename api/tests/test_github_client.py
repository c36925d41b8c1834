"""Tests for the async GitHub API client.

Validates auth headers, ETag caching, error classification and pagination.
Uses mocked HTTP responses (respx) to avoid real GitHub API calls.
"""

import httpx
import pytest
import respx
from httpx import Response

from gladiators.services.diff_backfiller import backfill_missing_diffs
from gladiators.services.github_client import (
    ErrorKind,
    GitHubApiError,
    GitHubClient,
    StatsComputingError,
)
from gladiators.services.stats_merger import merge_sources

STATS_URL = "https://api.github.com/repos/owner/repo/stats/contributors"


def _client(**kwargs) -> GitHubClient:
    kwargs.setdefault("token", "test-token-123")
    return GitHubClient(**kwargs)


@pytest.mark.asyncio
async def test_contributor_stats_basic_get_with_headers():
    """Client should GET stats with bearer auth and API version headers."""
    with respx.mock:
        route = respx.get(STATS_URL).mock(
            return_value=Response(200, json=[{"author": {"login": "alice"}, "weeks": []}])
        )

        data = await _client().get_contributor_stats("owner", "repo")

        assert data[0]["author"]["login"] == "alice"
        request = route.calls[0].request
        assert request.headers["authorization"] == "Bearer test-token-123"
        assert request.headers["x-github-api-version"] == "2022-11-28"
        assert "user-agent" in request.headers


@pytest.mark.asyncio
async def test_token_read_from_environment(monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "  env-token  ")
    with respx.mock:
        route = respx.get(STATS_URL).mock(return_value=Response(200, json=[]))
        await GitHubClient().get_contributor_stats("owner", "repo")
        assert route.calls[0].request.headers["authorization"] == "Bearer env-token"


@pytest.mark.asyncio
async def test_missing_token_raises_before_request():
    with respx.mock:
        route = respx.get(STATS_URL).mock(return_value=Response(200, json=[]))
        with pytest.raises(GitHubApiError) as exc_info:
            await GitHubClient().get_contributor_stats("owner", "repo")
        assert exc_info.value.kind == ErrorKind.MISSING_CREDENTIAL
        assert not route.called


@pytest.mark.asyncio
async def test_unauthenticated_allowed_when_token_not_required():
    with respx.mock:
        route = respx.get(STATS_URL).mock(return_value=Response(200, json=[]))
        await GitHubClient(require_token=False).get_contributor_stats("owner", "repo")
        assert "authorization" not in route.calls[0].request.headers


@pytest.mark.asyncio
async def test_stats_202_raises_still_computing():
    with respx.mock:
        respx.get(STATS_URL).mock(return_value=Response(202, json={}))
        with pytest.raises(StatsComputingError) as exc_info:
            await _client().get_contributor_stats("owner", "repo")
        assert exc_info.value.kind == ErrorKind.STILL_COMPUTING


@pytest.mark.asyncio
async def test_stats_204_returns_none():
    with respx.mock:
        respx.get(STATS_URL).mock(return_value=Response(204))
        assert await _client().get_contributor_stats("owner", "repo") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,headers,kind",
    [
        (401, {}, ErrorKind.INVALID_CREDENTIAL),
        (403, {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"}, ErrorKind.RATE_LIMITED),
        (403, {"X-RateLimit-Remaining": "42"}, ErrorKind.FORBIDDEN),
        (404, {}, ErrorKind.NOT_FOUND),
        (500, {}, ErrorKind.TRANSPORT_ERROR),
    ],
)
async def test_error_statuses_are_classified(status, headers, kind):
    with respx.mock:
        respx.get(STATS_URL).mock(return_value=Response(status, json={"message": "x"}, headers=headers))
        with pytest.raises(GitHubApiError) as exc_info:
            await _client().get_contributor_stats("owner", "repo")
        assert exc_info.value.kind == kind
        assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_transport_failure_is_classified():
    with respx.mock:
        respx.get(STATS_URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(GitHubApiError) as exc_info:
            await _client().get_contributor_stats("owner", "repo")
        assert exc_info.value.kind == ErrorKind.TRANSPORT_ERROR


@pytest.mark.asyncio
async def test_etag_caching():
    """Client should use ETag for conditional requests and cache responses."""
    with respx.mock:
        route = respx.get(STATS_URL).mock(
            return_value=Response(200, json=[{"version": 1}], headers={"ETag": '"abc123"'})
        )
        client = _client()
        first = await client.get_contributor_stats("owner", "repo")

        route.mock(return_value=Response(304))
        second = await client.get_contributor_stats("owner", "repo")

        assert first == second == [{"version": 1}]
        assert route.calls[1].request.headers["if-none-match"] == '"abc123"'


@pytest.mark.asyncio
async def test_304_with_lost_cache_refetches():
    with respx.mock:
        route = respx.get(STATS_URL)
        route.mock(
            side_effect=[
                Response(200, json=[{"version": 1}], headers={"ETag": '"abc123"'}),
                Response(304),
                Response(200, json=[{"version": 2}]),
            ]
        )
        client = _client()
        await client.get_contributor_stats("owner", "repo")
        client._json_cache_by_url.clear()

        data = await client.get_contributor_stats("owner", "repo")
        assert data == [{"version": 2}]
        assert len(route.calls) == 3


@pytest.mark.asyncio
async def test_list_contributors_pagination():
    with respx.mock:
        route = respx.get("https://api.github.com/repos/owner/repo/contributors")
        route.mock(
            side_effect=[
                Response(200, json=[{"login": f"user{i}", "contributions": 100 - i} for i in range(100)]),
                Response(200, json=[{"login": f"more{i}", "contributions": 1} for i in range(50)]),
            ]
        )
        contributors = await _client().list_contributors("owner", "repo", per_page=100)

        assert len(contributors) == 150
        assert len(route.calls) == 2
        assert route.calls[1].request.url.params["page"] == "2"


@pytest.mark.asyncio
async def test_list_contributors_max_pages():
    with respx.mock:
        route = respx.get("https://api.github.com/repos/owner/repo/contributors").mock(
            return_value=Response(200, json=[{"login": f"user{i}"} for i in range(100)])
        )
        contributors = await _client().list_contributors("owner", "repo", per_page=100, max_pages=3)
        assert len(contributors) == 300
        assert len(route.calls) == 3


@pytest.mark.asyncio
async def test_list_contributors_non_list_response():
    with respx.mock:
        respx.get("https://api.github.com/repos/owner/repo/contributors").mock(
            return_value=Response(200, json={"message": "Some error"})
        )
        assert await _client().list_contributors("owner", "repo") == []


@pytest.mark.asyncio
async def test_list_commits_by_author_uses_author_filter_and_limit():
    with respx.mock:
        route = respx.get("https://api.github.com/repos/owner/repo/commits").mock(
            return_value=Response(200, json=[{"sha": f"sha{i}"} for i in range(40)])
        )
        commits = await _client().list_commits_by_author("owner", "repo", "Alice Dev", limit=30)

        assert len(commits) == 30
        params = route.calls[0].request.url.params
        assert params["author"] == "Alice Dev"
        assert params["per_page"] == "30"


@pytest.mark.asyncio
async def test_get_commit_detail():
    with respx.mock:
        respx.get("https://api.github.com/repos/owner/repo/commits/abc123").mock(
            return_value=Response(
                200,
                json={
                    "sha": "abc123",
                    "stats": {"additions": 3, "deletions": 1, "total": 4},
                    "commit": {"author": {"date": "2024-01-02T00:00:00Z"}},
                },
            )
        )
        detail = await _client().get_commit("owner", "repo", "abc123")
        assert detail["stats"]["additions"] == 3


@pytest.mark.asyncio
async def test_custom_base_url():
    """Client should support custom base URL (e.g., GitHub Enterprise)."""
    with respx.mock:
        respx.get("https://github.enterprise.com/api/v3/repos/owner/repo/stats/contributors").mock(
            return_value=Response(200, json=[])
        )
        client = _client(base_url="https://github.enterprise.com/api/v3/")
        assert await client.get_contributor_stats("owner", "repo") == []


@pytest.mark.asyncio
async def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("GITHUB_API_BASE_URL", "https://ghe.example.com/api/v3/")
    with respx.mock:
        route = respx.get("https://ghe.example.com/api/v3/repos/owner/repo/stats/contributors").mock(
            return_value=Response(200, json=[])
        )
        await _client().get_contributor_stats("owner", "repo")
        assert route.called


@pytest.mark.asyncio
async def test_commit_endpoints_are_not_cached():
    """Commit samples and details carry patch bodies; only stats/contributor pages are kept."""
    with respx.mock:
        list_route = respx.get("https://api.github.com/repos/owner/repo/commits").mock(
            return_value=Response(200, json=[{"sha": "abc123"}], headers={"ETag": '"list"'})
        )
        detail_route = respx.get("https://api.github.com/repos/owner/repo/commits/abc123").mock(
            return_value=Response(200, json={"sha": "abc123", "files": [{"patch": "x" * 10000}]}, headers={"ETag": '"d"'})
        )
        client = _client()
        for _ in range(2):
            await client.list_commits_by_author("owner", "repo", "alice")
            await client.get_commit("owner", "repo", "abc123")

        assert client._json_cache_by_url == {}
        assert client._etag_by_url == {}
        assert "if-none-match" not in detail_route.calls[1].request.headers
        assert "if-none-match" not in list_route.calls[1].request.headers


@pytest.mark.asyncio
async def test_backfill_run_leaves_only_stats_in_cache():
    logins = [f"dev{i}" for i in range(5)]
    stats = [{"author": {"login": login}, "weeks": [{"w": 1704585600, "a": 0, "d": 0, "c": 10}]} for login in logins]
    with respx.mock:
        respx.get(STATS_URL).mock(return_value=Response(200, json=stats, headers={"ETag": '"s"'}))
        respx.get("https://api.github.com/repos/owner/repo/commits").mock(
            return_value=Response(200, json=[{"sha": f"c{i}"} for i in range(10)])
        )
        respx.get(url__regex=r"https://api\.github\.com/repos/owner/repo/commits/c\d+").mock(
            return_value=Response(
                200,
                json={
                    "stats": {"additions": 2, "deletions": 1},
                    "commit": {"author": {"date": "2024-01-08T00:00:00Z"}},
                    "files": [{"patch": "x" * 10000}],
                },
            )
        )
        client = _client()
        records = merge_sources(await client.get_contributor_stats("owner", "repo"), [])
        updated = await backfill_missing_diffs(client, "owner", "repo", records)

    assert updated == 5
    assert list(client._json_cache_by_url) == [STATS_URL]


@pytest.mark.asyncio
async def test_response_cache_evicts_oldest_url():
    with respx.mock:
        respx.get(url__regex=r"https://api\.github\.com/repos/owner/r\d/stats/contributors").mock(
            return_value=Response(200, json=[], headers={"ETag": '"e"'})
        )
        client = _client(max_cached_urls=2)
        for name in ("r1", "r2", "r3"):
            await client.get_contributor_stats("owner", name)

    assert list(client._json_cache_by_url) == [
        "https://api.github.com/repos/owner/r2/stats/contributors",
        "https://api.github.com/repos/owner/r3/stats/contributors",
    ]
    assert set(client._etag_by_url) == set(client._json_cache_by_url)
