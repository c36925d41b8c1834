"""Order scored entries and assign 1-based ranks."""

from __future__ import annotations

from gladiators.models.contributor_stats import ScoredEntry


def rank_entries(entries: list[ScoredEntry]) -> list[ScoredEntry]:
    """Sort by score descending and number the rows 1..n.

    sorted() is stable, so equal scores keep their incoming order; ranks never
    repeat or skip on ties.
    """
    ordered = sorted(entries, key=lambda e: e.score, reverse=True)
    for index, entry in enumerate(ordered):
        entry.rank = index + 1
    return ordered
