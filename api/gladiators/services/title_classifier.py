"""Assign a contributor title from period totals.

Rules are evaluated top to bottom and the first match wins. The order is part
of the contract: several rules can match the same totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from gladiators.models.leaderboard import Title


@dataclass(frozen=True)
class TitleStats:
    commits: int
    additions: int
    deletions: int

    @property
    def total(self) -> int:
        return self.additions + self.deletions

    @property
    def ratio(self) -> float:
        return self.total / self.commits if self.commits > 0 else 0.0

    @property
    def delete_ratio(self) -> float:
        return self.deletions / self.total if self.total > 0 else 0.0


@dataclass(frozen=True)
class TitleRule:
    title: Title
    description: str
    matches: Callable[[TitleStats], bool]


TITLE_RULES: tuple[TitleRule, ...] = (
    TitleRule(Title.CODE_ARCHITECT, "commits >= 500", lambda s: s.commits >= 500),
    TitleRule(
        Title.THE_CLEANER,
        "deletions / (additions + deletions) > 0.6 and additions + deletions > 100",
        lambda s: s.delete_ratio > 0.6 and s.total > 100,
    ),
    TitleRule(Title.TSUNAMI_CODER, "lines per commit > 500", lambda s: s.ratio > 500),
    TitleRule(
        Title.RAPID_FIRE,
        "lines per commit < 20 and commits > 50",
        lambda s: s.ratio < 20 and s.commits > 50,
    ),
    TitleRule(Title.NOVEL_WRITER, "additions > 50000", lambda s: s.additions > 50000),
    TitleRule(Title.VETERAN, "commits >= 100", lambda s: s.commits >= 100),
    TitleRule(Title.WARRIOR, "commits >= 50", lambda s: s.commits >= 50),
    TitleRule(Title.DEFENDER, "commits >= 20", lambda s: s.commits >= 20),
    TitleRule(Title.RISING_STAR, "commits >= 10", lambda s: s.commits >= 10),
    TitleRule(Title.FRESH_BLOOD, "commits >= 1", lambda s: s.commits >= 1),
)


def classify(commits: int, additions: int, deletions: int) -> Title:
    stats = TitleStats(commits=commits, additions=additions, deletions=deletions)
    for rule in TITLE_RULES:
        if rule.matches(stats):
            return rule.title
    return Title.INACTIVE
