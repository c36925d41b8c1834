"""Balanced contributor score ("power").

Log-scaled commit/addition/deletion terms keep raw volume from dominating; a
bonus of up to +10 rewards an average commit size near the baseline.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

from gladiators.services import config

MAX_BALANCE_BONUS = 10.0


@dataclass(frozen=True)
class ScoringConfig:
    commit_weight: float = 0.4
    additions_weight: float = 0.35
    deletions_weight: float = 0.25
    lines_per_commit_baseline: float = 50


DEFAULT_SCORING = ScoringConfig()


def scoring_from_env() -> ScoringConfig:
    """Defaults overlaid with any GLADIATORS_*_WEIGHT / baseline overrides."""
    return replace(DEFAULT_SCORING, **config.scoring_overrides())


def balance_bonus(commits: int, additions: int, deletions: int, baseline: float) -> float:
    if commits <= 0 or baseline <= 0:
        return 0.0
    avg_lines = (additions + deletions) / commits
    if avg_lines <= 0 or avg_lines > 2 * baseline:
        return 0.0
    return min(MAX_BALANCE_BONUS, MAX_BALANCE_BONUS * (1 - abs(avg_lines - baseline) / baseline))


def calculate_score(
    commits: int,
    additions: int,
    deletions: int,
    *,
    commit_weight: Optional[float] = None,
    additions_weight: Optional[float] = None,
    deletions_weight: Optional[float] = None,
    lines_per_commit_baseline: Optional[float] = None,
    scoring: Optional[ScoringConfig] = None,
) -> float:
    """Score rounded to one decimal place. Named weights override the scoring config."""
    cfg = scoring or DEFAULT_SCORING
    cw = cfg.commit_weight if commit_weight is None else commit_weight
    aw = cfg.additions_weight if additions_weight is None else additions_weight
    dw = cfg.deletions_weight if deletions_weight is None else deletions_weight
    baseline = cfg.lines_per_commit_baseline if lines_per_commit_baseline is None else lines_per_commit_baseline

    log_commits = math.log10(commits + 1) * 100
    log_additions = math.log10(additions + 1) * 10
    log_deletions = math.log10(deletions + 1) * 10
    weighted = log_commits * cw + log_additions * aw + log_deletions * dw

    bonus = balance_bonus(commits, additions, deletions, baseline)
    # Half-up rounding to one decimal.
    return math.floor((weighted + bonus) * 10 + 0.5) / 10
