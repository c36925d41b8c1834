"""Async GitHub API client for contributor statistics.

REST wrapper with:
- token auth (GITHUB_TOKEN / GH_TOKEN), optionally required
- response classification into GitHubApiError kinds (no retries here)
- basic ETag conditional requests + in-memory response cache
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional
from urllib.parse import quote

import httpx

from gladiators.services import config


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    STILL_COMPUTING = "still_computing"
    TRANSPORT_ERROR = "transport_error"


# Commit samples and details are never cached; this bounds stats and contributor pages.
DEFAULT_MAX_CACHED_URLS = 256


class GitHubApiError(RuntimeError):
    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


class StatsComputingError(GitHubApiError):
    """GitHub answered 202: contributor stats are being computed, ask again later."""

    def __init__(self, url: str) -> None:
        super().__init__(ErrorKind.STILL_COMPUTING, f"GitHub is computing stats for {url}", 202)


def classify_response(r: httpx.Response, url: str) -> Optional[GitHubApiError]:
    """Map an error response to a GitHubApiError; None for success."""
    status = r.status_code
    if status < 400:
        return None
    if status == 401:
        return GitHubApiError(ErrorKind.INVALID_CREDENTIAL, "Invalid or expired token", status)
    if status == 403:
        if r.headers.get("X-RateLimit-Remaining") == "0":
            reset = r.headers.get("X-RateLimit-Reset", "unknown")
            return GitHubApiError(
                ErrorKind.RATE_LIMITED, f"Rate limited. Limit resets at {reset}.", status
            )
        return GitHubApiError(ErrorKind.FORBIDDEN, "Access forbidden. Check token permissions.", status)
    if status == 404:
        return GitHubApiError(ErrorKind.NOT_FOUND, "Repository not found or no access.", status)
    return GitHubApiError(
        ErrorKind.TRANSPORT_ERROR, f"GitHub API error {status} for {url}: {r.text[:200]}", status
    )


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        user_agent: str = "git-gladiators/1.0",
        timeout: Optional[float] = None,
        require_token: Optional[bool] = None,
        max_cached_urls: int = DEFAULT_MAX_CACHED_URLS,
    ) -> None:
        self._token = token or config.github_token()
        self._base_url = (base_url or config.github_base_url()).rstrip("/")
        self._timeout = timeout if timeout is not None else config.github_timeout_seconds()
        self._require_token = config.require_token() if require_token is None else require_token
        self._headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

        # Keyed by full URL; insertion order is eviction order.
        self._max_cached_urls = max(1, max_cached_urls)
        self._etag_by_url: dict[str, str] = {}
        self._json_cache_by_url: dict[str, Any] = {}

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def _request(self, method: str, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        if self._require_token and not self._token:
            raise GitHubApiError(ErrorKind.MISSING_CREDENTIAL, "GitHub token required (set GITHUB_TOKEN)")
        h = dict(self._headers)
        if headers:
            h.update(headers)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, headers=h) as client:
                return await client.request(method, url)
        except httpx.HTTPError as exc:
            raise GitHubApiError(ErrorKind.TRANSPORT_ERROR, f"GitHub request failed for {url}: {exc}") from exc

    async def get_json(self, path: str, cache: bool = True) -> Any:
        """GET JSON for a path or full URL.

        With cache=True the body and ETag are kept for conditional requests; the
        oldest entries are evicted past max_cached_urls.
        """
        url = path if path.startswith("http") else f"{self._base_url}{path}"

        extra_headers: dict[str, str] = {}
        etag = self._etag_by_url.get(url) if cache else None
        if etag:
            extra_headers["If-None-Match"] = etag

        r = await self._request("GET", url, headers=extra_headers)

        if r.status_code == 304:
            if url in self._json_cache_by_url:
                return self._json_cache_by_url[url]
            # If cache was lost, retry without condition.
            r = await self._request("GET", url, headers={})

        if r.status_code == 202:
            raise StatsComputingError(url)

        error = classify_response(r, url)
        if error is not None:
            raise error

        # 204 No Content: empty repository
        if r.status_code == 204 or not r.content:
            return None

        try:
            data = r.json()
        except ValueError as exc:
            raise GitHubApiError(
                ErrorKind.TRANSPORT_ERROR, f"GitHub response was not JSON for {url}", r.status_code
            ) from exc

        if cache:
            self._remember(url, r.headers.get("ETag"), data)
        return data

    def _remember(self, url: str, etag: Optional[str], data: Any) -> None:
        self._json_cache_by_url.pop(url, None)
        self._etag_by_url.pop(url, None)
        self._json_cache_by_url[url] = data
        if etag:
            self._etag_by_url[url] = etag
        while len(self._json_cache_by_url) > self._max_cached_urls:
            oldest = next(iter(self._json_cache_by_url))
            self._json_cache_by_url.pop(oldest)
            self._etag_by_url.pop(oldest, None)

    async def get_contributor_stats(self, owner: str, repo: str) -> Any:
        """Weekly additions/deletions/commits per author. Raises StatsComputingError on 202."""
        return await self.get_json(f"/repos/{owner}/{repo}/stats/contributors")

    async def list_contributors(self, owner: str, repo: str, per_page: int = 100, max_pages: int = 5) -> list[dict]:
        """List contributors with contribution counts. Caps pages to avoid runaway API usage."""
        out: list[dict] = []
        for page in range(1, max_pages + 1):
            data = await self.get_json(
                f"/repos/{owner}/{repo}/contributors?per_page={per_page}&page={page}&anon=false"
            )
            if not isinstance(data, list):
                break
            out.extend(data)
            if len(data) < per_page:
                break
        return out

    async def list_commits_by_author(self, owner: str, repo: str, login: str, limit: int = 30) -> list[dict]:
        """Most recent commits authored by login (single page, newest first)."""
        data = await self.get_json(
            f"/repos/{owner}/{repo}/commits?author={quote(login, safe='')}&per_page={limit}",
            cache=False,
        )
        if not isinstance(data, list):
            return []
        return data[:limit]

    async def get_commit(self, owner: str, repo: str, sha: str) -> dict:
        """Commit detail including stats.additions / stats.deletions and commit.author.date."""
        data = await self.get_json(f"/repos/{owner}/{repo}/commits/{sha}", cache=False)
        return data if isinstance(data, dict) else {}
