"""Merge the detailed weekly stats and the contributor summary into one record set.

The detailed source (stats/contributors) wins for every login it contains; the
summary source (contributors) only fills gaps, with an empty week set and its
contribution count kept as the fallback commit total. Logins are matched
case-insensitively.
"""

from __future__ import annotations

from typing import Any, Optional

from gladiators.models.contributor_stats import ContributorRecord, WeekBucket


def _first_str(row: dict, *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _as_list(source: Any) -> list:
    return source if isinstance(source, list) else []


def _merge_week_buckets(raw_weeks: Any) -> list[WeekBucket]:
    """Parse raw {w,a,d,c} rows, folding duplicate week starts into one bucket."""
    by_week: dict[int, WeekBucket] = {}
    for raw in _as_list(raw_weeks):
        if not isinstance(raw, dict):
            continue
        bucket = WeekBucket.model_validate(raw)
        existing = by_week.get(bucket.week_start)
        if existing is None:
            by_week[bucket.week_start] = bucket
            continue
        existing.additions += bucket.additions
        existing.deletions += bucket.deletions
        existing.commits += bucket.commits
    return list(by_week.values())


def _detailed_record(entry: Any) -> Optional[ContributorRecord]:
    if not isinstance(entry, dict):
        return None
    author = entry.get("author")
    if not isinstance(author, dict):
        return None
    login = _first_str(author, "login")
    if not login:
        return None
    return ContributorRecord(
        login=login,
        avatar_url=_first_str(author, "avatar_url", "avatarUrl"),
        profile_url=_first_str(author, "html_url", "profileUrl", "profile_url"),
        weeks=_merge_week_buckets(entry.get("weeks")),
    )


def _summary_record(entry: Any) -> Optional[ContributorRecord]:
    if not isinstance(entry, dict):
        return None
    login = _first_str(entry, "login")
    if not login:
        return None
    contributions = entry.get("contributions")
    return ContributorRecord(
        login=login,
        avatar_url=_first_str(entry, "avatar_url", "avatarUrl"),
        profile_url=_first_str(entry, "html_url", "profileUrl", "profile_url"),
        weeks=[],
        fallback_total_commits=contributions if isinstance(contributions, int) and contributions > 0 else 0,
    )


def merge_sources(detailed: Any, summary: Any) -> list[ContributorRecord]:
    """Return one ContributorRecord per lowercased login.

    Either source may be None or not list-shaped; it is then treated as empty.
    An empty result is the "no data" condition, not an error.
    """
    by_key: dict[str, ContributorRecord] = {}
    for entry in _as_list(detailed):
        record = _detailed_record(entry)
        if record is None or record.key in by_key:
            continue
        by_key[record.key] = record
    for entry in _as_list(summary):
        record = _summary_record(entry)
        if record is None or record.key in by_key:
            continue
        by_key[record.key] = record
    return list(by_key.values())
