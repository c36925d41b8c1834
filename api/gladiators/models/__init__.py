"""Pydantic models."""

from gladiators.models.contributor_stats import (
    ContributorRecord,
    Period,
    PeriodTotals,
    ScoredEntry,
    WeekBucket,
)
from gladiators.models.error import ErrorDetail
from gladiators.models.leaderboard import (
    LeaderboardResponse,
    LeaderboardStatus,
    PipelineState,
    Title,
)

__all__ = [
    "ContributorRecord",
    "ErrorDetail",
    "LeaderboardResponse",
    "LeaderboardStatus",
    "Period",
    "PeriodTotals",
    "PipelineState",
    "ScoredEntry",
    "Title",
    "WeekBucket",
]
