"""Leaderboard response models and the closed set of contributor titles."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from gladiators.models.contributor_stats import Period, ScoredEntry


class Title(Enum):
    """Contributor titles. Each carries (label, display colour, emoji badge)."""

    CODE_ARCHITECT = ("Code Architect", "#FFD700", "🏛️")
    THE_CLEANER = ("The Cleaner", "#9B59B6", "🧹")
    TSUNAMI_CODER = ("Tsunami Coder", "#3498DB", "🌊")
    RAPID_FIRE = ("Rapid Fire", "#E74C3C", "⚡")
    NOVEL_WRITER = ("Novel Writer", "#2ECC71", "📚")
    VETERAN = ("Veteran", "#F39C12", "🎖️")
    WARRIOR = ("Warrior", "#E67E22", "⚔️")
    DEFENDER = ("Defender", "#1ABC9C", "🛡️")
    RISING_STAR = ("Rising Star", "#27AE60", "🌱")
    FRESH_BLOOD = ("Fresh Blood", "#95A5A6", "🆕")
    INACTIVE = ("Inactive", "#666677", "💤")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def color(self) -> str:
        return self.value[1]

    @property
    def emoji(self) -> str:
        return self.value[2]


class LeaderboardStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    NO_ACTIVITY = "no_activity"


class PipelineState(str, Enum):
    IDLE = "idle"
    FETCHING_SOURCES = "fetching_sources"
    BACKFILLING = "backfilling"
    READY = "ready"
    RETRY_SCHEDULED = "retry_scheduled"


class LeaderboardResponse(BaseModel):
    """GET /api/repos/{owner}/{repo}/leaderboard response."""

    owner: str
    repo: str
    period: Period
    status: LeaderboardStatus
    generated_at: datetime
    contributor_count: int = Field(ge=0, description="Contributors in the merged source set")
    entries: list[ScoredEntry] = Field(default_factory=list)


class RepoRef(BaseModel):
    owner: str
    repo: str


class TitleRule(BaseModel):
    order: int = Field(ge=1)
    title: str
    color: str
    emoji: str
    rule: str


class ScoringWeights(BaseModel):
    commit_weight: float
    additions_weight: float
    deletions_weight: float
    lines_per_commit_baseline: float


class ScoringResponse(BaseModel):
    """GET /api/scoring response: weights in effect plus the ordered title rules."""

    weights: ScoringWeights
    titles: list[TitleRule]
