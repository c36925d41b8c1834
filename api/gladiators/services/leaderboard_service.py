"""Leaderboard pipeline: fetch sources, merge, backfill, then score per period.

Fetching is a small state machine:
idle -> fetching_sources -> backfilling -> ready, with retry_scheduled whenever
GitHub is still computing contributor stats. Merged records are cached per
repository so switching period only re-runs aggregate/score/classify/rank.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from gladiators.models.contributor_stats import ContributorRecord, Period, ScoredEntry
from gladiators.models.leaderboard import LeaderboardResponse, LeaderboardStatus, PipelineState
from gladiators.services import config
from gladiators.services.diff_backfiller import backfill_missing_diffs
from gladiators.services.github_client import ErrorKind, GitHubApiError, GitHubClient, StatsComputingError
from gladiators.services.period_aggregator import aggregate_period
from gladiators.services.ranker import rank_entries
from gladiators.services.scoring import ScoringConfig, calculate_score
from gladiators.services.stats_merger import merge_sources
from gladiators.services.title_classifier import classify

log = logging.getLogger(__name__)


def compute_leaderboard(
    records: list[ContributorRecord],
    period: Period | str,
    now: Optional[float] = None,
    scoring: Optional[ScoringConfig] = None,
) -> list[ScoredEntry]:
    """Ranked entries for period from merged (and backfilled) records. Pure."""
    entries: list[ScoredEntry] = []
    for totals in aggregate_period(records, period, now=now):
        title = classify(totals.commits, totals.additions, totals.deletions)
        entries.append(
            ScoredEntry(
                **totals.model_dump(),
                score=calculate_score(totals.commits, totals.additions, totals.deletions, scoring=scoring),
                title=title.label,
                color=title.color,
                emoji=title.emoji,
            )
        )
    return rank_entries(entries)


def _repo_key(owner: str, repo: str) -> str:
    return f"{owner.strip().lower()}/{repo.strip().lower()}"


class LeaderboardPipeline:
    def __init__(
        self,
        client: GitHubClient,
        retry_delay_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backfill_concurrency: Optional[int] = None,
        scoring: Optional[ScoringConfig] = None,
        max_cached_repos: Optional[int] = None,
    ) -> None:
        self.client = client
        self.retry_delay_seconds = (
            config.retry_delay_seconds() if retry_delay_seconds is None else retry_delay_seconds
        )
        self.max_attempts = config.max_attempts() if max_attempts is None else max(1, max_attempts)
        self.backfill_concurrency = (
            config.backfill_concurrency() if backfill_concurrency is None else backfill_concurrency
        )
        self.scoring = scoring
        self.max_cached_repos = config.max_cached_repos() if max_cached_repos is None else max(1, max_cached_repos)
        self.state = PipelineState.IDLE
        self._records_by_repo: dict[str, list[ContributorRecord]] = {}

    def cached_records(self, owner: str, repo: str) -> Optional[list[ContributorRecord]]:
        return self._records_by_repo.get(_repo_key(owner, repo))

    @property
    def cached_repo_count(self) -> int:
        return len(self._records_by_repo)

    def invalidate(self, owner: str, repo: str) -> None:
        self._records_by_repo.pop(_repo_key(owner, repo), None)

    def _store(self, key: str, records: list[ContributorRecord]) -> None:
        # Least recently used repository is dropped first.
        self._records_by_repo.pop(key, None)
        self._records_by_repo[key] = records
        while len(self._records_by_repo) > self.max_cached_repos:
            self._records_by_repo.pop(next(iter(self._records_by_repo)))

    async def _fetch_sources(self, owner: str, repo: str) -> tuple[Any, Any]:
        detailed, summary = await asyncio.gather(
            self.client.get_contributor_stats(owner, repo),
            self.client.list_contributors(owner, repo),
            return_exceptions=True,
        )
        if isinstance(detailed, BaseException):
            raise detailed
        if isinstance(summary, GitHubApiError):
            log.info("contributor summary unavailable for %s/%s (%s); using stats only", owner, repo, summary.kind.value)
            summary = []
        elif isinstance(summary, BaseException):
            raise summary
        return detailed, summary

    async def load(self, owner: str, repo: str, refresh: bool = False) -> list[ContributorRecord]:
        """Merged, backfilled records for owner/repo; served from cache unless refresh."""
        key = _repo_key(owner, repo)
        if not refresh and key in self._records_by_repo:
            records = self._records_by_repo[key]
            self._store(key, records)
            return records

        for attempt in range(1, self.max_attempts + 1):
            self.state = PipelineState.FETCHING_SOURCES
            try:
                detailed, summary = await self._fetch_sources(owner, repo)
            except StatsComputingError:
                if attempt >= self.max_attempts:
                    break
                self.state = PipelineState.RETRY_SCHEDULED
                log.info(
                    "stats still computing for %s/%s; retry %d/%d in %.1fs",
                    owner,
                    repo,
                    attempt,
                    self.max_attempts - 1,
                    self.retry_delay_seconds,
                )
                await asyncio.sleep(self.retry_delay_seconds)
                continue
            except GitHubApiError:
                self.state = PipelineState.IDLE
                raise

            records = merge_sources(detailed, summary)
            self.state = PipelineState.BACKFILLING
            await backfill_missing_diffs(
                self.client, owner, repo, records, concurrency=self.backfill_concurrency
            )
            self._store(key, records)
            self.state = PipelineState.READY
            return records

        self.state = PipelineState.IDLE
        log.warning("stats for %s/%s still computing after %d attempts", owner, repo, self.max_attempts)
        raise GitHubApiError(
            ErrorKind.STILL_COMPUTING,
            f"GitHub is still computing stats for {owner}/{repo}. Try again shortly.",
            202,
        )

    async def leaderboard(
        self,
        owner: str,
        repo: str,
        period: Period | str = Period.ALL,
        refresh: bool = False,
        now: Optional[float] = None,
    ) -> LeaderboardResponse:
        records = await self.load(owner, repo, refresh=refresh)
        entries = compute_leaderboard(records, period, now=now, scoring=self.scoring)
        if not records:
            status = LeaderboardStatus.EMPTY
        elif not entries:
            status = LeaderboardStatus.NO_ACTIVITY
        else:
            status = LeaderboardStatus.OK
        return LeaderboardResponse(
            owner=owner,
            repo=repo,
            period=Period(period),
            status=status,
            generated_at=datetime.now(timezone.utc),
            contributor_count=len(records),
            entries=entries,
        )
