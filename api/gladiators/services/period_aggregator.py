"""Sum week buckets inside a reporting window (all / week / month)."""

from __future__ import annotations

import time
from typing import Optional

from gladiators.models.contributor_stats import ContributorRecord, Period, PeriodTotals

_DAY_SECONDS = 24 * 60 * 60
_WINDOW_DAYS: dict[Period, int] = {
    Period.WEEK: 7,
    Period.MONTH: 28,
}


def period_cutoff(period: Period | str, now: Optional[float] = None) -> float:
    """Earliest week start (unix seconds) counted for period; 0 for all time."""
    days = _WINDOW_DAYS.get(Period(period))
    if days is None:
        return 0
    current = time.time() if now is None else now
    return current - days * _DAY_SECONDS


def aggregate_period(
    records: list[ContributorRecord],
    period: Period | str,
    now: Optional[float] = None,
) -> list[PeriodTotals]:
    """Totals per contributor for the window, in input order.

    Contributors with no commits, additions or deletions in the window are dropped.
    """
    cutoff = period_cutoff(period, now=now)
    out: list[PeriodTotals] = []
    for record in records:
        weeks = [w for w in record.weeks if w.week_start >= cutoff]
        totals = PeriodTotals(
            login=record.login,
            avatar_url=record.avatar_url,
            profile_url=record.profile_url,
            commits=sum(w.commits for w in weeks),
            additions=sum(w.additions for w in weeks),
            deletions=sum(w.deletions for w in weeks),
        )
        if totals.is_active():
            out.append(totals)
    return out
