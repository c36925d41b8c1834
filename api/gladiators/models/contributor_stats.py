"""Contributor statistics models: weekly buckets, merged records, period totals, scored entries."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        # JSON NaN/Infinity decode to non-finite floats.
        if not math.isfinite(value):
            return 0
        return max(0, int(value))
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
    return 0


class Period(str, Enum):
    ALL = "all"
    WEEK = "week"
    MONTH = "month"


class WeekBucket(BaseModel):
    """One Sunday-aligned week of activity. Accepts the API short keys (w, a, d, c)."""

    model_config = ConfigDict(populate_by_name=True)

    week_start: int = Field(default=0, validation_alias=AliasChoices("week_start", "w"))
    additions: int = Field(default=0, validation_alias=AliasChoices("additions", "a"))
    deletions: int = Field(default=0, validation_alias=AliasChoices("deletions", "d"))
    commits: int = Field(default=0, validation_alias=AliasChoices("commits", "c"))

    @field_validator("week_start", "additions", "deletions", "commits", mode="before")
    @classmethod
    def _coerce_counter(cls, value: Any) -> int:
        return _non_negative_int(value)


class ContributorRecord(BaseModel):
    """Merged per-contributor data. Identity is the lowercased login."""

    login: str
    avatar_url: str = ""
    profile_url: str = ""
    weeks: list[WeekBucket] = Field(default_factory=list)
    fallback_total_commits: Optional[int] = None

    @property
    def key(self) -> str:
        return self.login.lower()

    def total_commits(self) -> int:
        # A summary-only contributor has no weeks; its contribution count stands in.
        return sum(w.commits for w in self.weeks) or (self.fallback_total_commits or 0)

    def total_additions(self) -> int:
        return sum(w.additions for w in self.weeks)

    def total_deletions(self) -> int:
        return sum(w.deletions for w in self.weeks)


class PeriodTotals(BaseModel):
    login: str
    avatar_url: str = ""
    profile_url: str = ""
    commits: int = 0
    additions: int = 0
    deletions: int = 0

    def is_active(self) -> bool:
        return self.commits > 0 or self.additions > 0 or self.deletions > 0


class ScoredEntry(PeriodTotals):
    """Ready-to-render leaderboard row."""

    score: float = 0.0
    title: str
    color: str
    emoji: str = ""
    rank: int = Field(default=1, ge=1)
