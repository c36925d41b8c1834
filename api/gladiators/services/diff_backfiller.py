"""Recover line-change counts for contributors whose weekly stats report commits but no diff.

GitHub's stats/contributors endpoint sometimes returns weeks with commits and
zero additions/deletions. For each such contributor we sample their most recent
commits, fetch a bounded number of commit details, and rebuild per-week
additions/deletions from the sample. The result is approximate by construction.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

import httpx

from gladiators.models.contributor_stats import ContributorRecord, WeekBucket
from gladiators.services.github_client import GitHubApiError, GitHubClient

COMMIT_SAMPLE_LIMIT = 30
DETAIL_FETCH_LIMIT = 10
log = logging.getLogger(__name__)


def week_start_for(moment: datetime) -> int:
    """Unix seconds of the most recent Sunday 00:00 UTC on or before moment."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    midnight = moment.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    days_since_sunday = (midnight.weekday() + 1) % 7
    return int((midnight - timedelta(days=days_since_sunday)).timestamp())


def needs_backfill(record: ContributorRecord) -> bool:
    return (
        record.total_commits() > 0
        and record.total_additions() == 0
        and record.total_deletions() == 0
    )


def _parse_iso_utc(raw: Any) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _authored_date(detail: dict) -> Optional[datetime]:
    commit = detail.get("commit")
    author = commit.get("author") if isinstance(commit, dict) else None
    if isinstance(author, dict):
        parsed = _parse_iso_utc(author.get("date"))
        if parsed is not None:
            return parsed
    return _parse_iso_utc(detail.get("authored_date") or detail.get("authoredDate"))


def _diff_stats(detail: dict) -> Optional[tuple[int, int]]:
    stats = detail.get("stats")
    if not isinstance(stats, dict):
        return None
    additions = stats.get("additions")
    deletions = stats.get("deletions")
    if not isinstance(additions, int) or not isinstance(deletions, int):
        return None
    return max(0, additions), max(0, deletions)


def aggregate_commit_details(details: Iterable[Optional[dict]]) -> list[WeekBucket]:
    """Fold commit details into week buckets; details missing stats or a date are skipped."""
    by_week: dict[int, WeekBucket] = {}
    for detail in details:
        if not isinstance(detail, dict):
            continue
        stats = _diff_stats(detail)
        authored = _authored_date(detail)
        if stats is None or authored is None:
            continue
        week = week_start_for(authored)
        bucket = by_week.setdefault(week, WeekBucket(week_start=week))
        bucket.additions += stats[0]
        bucket.deletions += stats[1]
        bucket.commits += 1
    return list(by_week.values())


def apply_backfill(record: ContributorRecord, new_weeks: list[WeekBucket]) -> None:
    """Merge sampled buckets into record in place.

    Existing buckets keep their commit counter; only additions/deletions are replaced.
    """
    if not record.weeks:
        record.weeks = list(new_weeks)
        return
    existing = {w.week_start: w for w in record.weeks}
    for bucket in new_weeks:
        current = existing.get(bucket.week_start)
        if current is None:
            record.weeks.append(bucket)
            existing[bucket.week_start] = bucket
            continue
        current.additions = bucket.additions
        current.deletions = bucket.deletions


async def _fetch_detail(client: GitHubClient, owner: str, repo: str, sha: str) -> Optional[dict]:
    try:
        return await client.get_commit(owner, repo, sha)
    except (GitHubApiError, httpx.HTTPError) as e:
        log.debug("commit detail %s/%s@%s: %s", owner, repo, sha, e)
        return None


async def backfill_contributor(client: GitHubClient, owner: str, repo: str, record: ContributorRecord) -> bool:
    """Backfill one contributor. Returns True when its weeks were updated."""
    try:
        commits = await client.list_commits_by_author(owner, repo, record.login, limit=COMMIT_SAMPLE_LIMIT)
    except (GitHubApiError, httpx.HTTPError) as e:
        log.debug("commit list %s/%s author=%s: %s", owner, repo, record.login, e)
        return False
    shas: list[str] = []
    for row in commits[:DETAIL_FETCH_LIMIT]:
        sha = row.get("sha") if isinstance(row, dict) else None
        if isinstance(sha, str) and sha:
            shas.append(sha)
    if not shas:
        return False

    details = await asyncio.gather(*(_fetch_detail(client, owner, repo, sha) for sha in shas))
    new_weeks = aggregate_commit_details(details)
    if not new_weeks:
        return False
    apply_backfill(record, new_weeks)
    return True


async def backfill_missing_diffs(
    client: GitHubClient,
    owner: str,
    repo: str,
    records: list[ContributorRecord],
    concurrency: Optional[int] = None,
) -> int:
    """Backfill every qualifying record concurrently. Returns how many were updated.

    concurrency bounds simultaneous contributor jobs; None runs them all at once.
    A failing job leaves its record untouched and never affects the others.
    """
    targets = [r for r in records if needs_backfill(r)]
    if not targets:
        return 0
    semaphore = asyncio.Semaphore(concurrency) if concurrency else None

    async def _run(record: ContributorRecord) -> bool:
        if semaphore is None:
            return await backfill_contributor(client, owner, repo, record)
        async with semaphore:
            return await backfill_contributor(client, owner, repo, record)

    results = await asyncio.gather(*(_run(r) for r in targets), return_exceptions=True)
    updated = 0
    for record, result in zip(targets, results):
        if isinstance(result, BaseException):
            log.warning("backfill failed for %s in %s/%s: %s", record.login, owner, repo, result)
        elif result:
            updated += 1
    log.info("backfilled %d/%d contributors for %s/%s", updated, len(targets), owner, repo)
    return updated
