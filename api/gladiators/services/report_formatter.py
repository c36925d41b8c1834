"""Plain-text rendering of a leaderboard response."""

from __future__ import annotations

from gladiators.models.contributor_stats import Period, ScoredEntry
from gladiators.models.leaderboard import LeaderboardResponse, LeaderboardStatus

_MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}
_PERIOD_LABELS = {
    Period.WEEK: "this week",
    Period.MONTH: "this month",
    Period.ALL: "all time",
}


def format_number(num: int) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(num)


def medal_for(rank: int) -> str:
    return _MEDALS.get(rank, "")


def period_label(period: Period | str) -> str:
    return _PERIOD_LABELS[Period(period)]


def format_entry(entry: ScoredEntry) -> str:
    medal = medal_for(entry.rank)
    head = f"{medal or '  '} #{entry.rank:<3} {entry.login}"
    badge = f"{entry.emoji} {entry.title}".strip()
    stats = (
        f"⚡{format_number(entry.commits)}  "
        f"+{format_number(entry.additions)}  "
        f"-{format_number(entry.deletions)}"
    )
    return f"{head}  [{badge}]  POWER {entry.score:.1f}  {stats}"


def format_leaderboard_text(response: LeaderboardResponse) -> str:
    header = f"{response.owner}/{response.repo} - {period_label(response.period)}"
    if response.status == LeaderboardStatus.EMPTY:
        return f"{header}\nNo warriors found: this repository has no contributor data."
    if response.status == LeaderboardStatus.NO_ACTIVITY or not response.entries:
        return f"{header}\nNo activity: no contributions found for {period_label(response.period)}."
    lines = [header]
    lines.extend(format_entry(entry) for entry in response.entries)
    return "\n".join(lines)
