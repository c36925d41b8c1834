"""Environment-driven settings for the GitHub client, fetch pipeline and scoring weights.

Values are read at call time so tests and long-lived processes pick up changes.
"""

from __future__ import annotations

import os
from typing import Optional

_DEFAULT_BASE_URL = "https://api.github.com"


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "1" if default else "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = (os.environ.get(name) or str(default)).strip()
    try:
        value = int(raw)
    except ValueError:
        value = default
    return max(lo, min(value, hi))


def _env_float(name: str, default: float, *, lo: float, hi: float) -> float:
    raw = (os.environ.get(name) or str(default)).strip()
    try:
        value = float(raw)
    except ValueError:
        value = default
    return max(lo, min(value, hi))


def github_token() -> Optional[str]:
    token = os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
    if token:
        token = token.strip() or None
    return token


def github_base_url() -> str:
    return (os.getenv("GITHUB_API_BASE_URL") or _DEFAULT_BASE_URL).strip().rstrip("/")


def github_timeout_seconds() -> float:
    return _env_float("GITHUB_TIMEOUT_SECONDS", 20.0, lo=1.0, hi=120.0)


def require_token() -> bool:
    return _env_flag("GLADIATORS_REQUIRE_TOKEN", default=True)


def retry_delay_seconds() -> float:
    return _env_float("GLADIATORS_RETRY_DELAY_SECONDS", 3.0, lo=0.0, hi=300.0)


def max_attempts() -> int:
    return _env_int("GLADIATORS_MAX_ATTEMPTS", 10, lo=1, hi=100)


def backfill_concurrency() -> Optional[int]:
    """Max concurrent backfill jobs; None means unbounded."""
    value = _env_int("GLADIATORS_BACKFILL_CONCURRENCY", 0, lo=0, hi=1000)
    return value or None


def scoring_overrides() -> dict[str, float]:
    """Scoring weights set through the environment, keyed by ScoringConfig field name."""
    out: dict[str, float] = {}
    for field, env_name in (
        ("commit_weight", "GLADIATORS_COMMIT_WEIGHT"),
        ("additions_weight", "GLADIATORS_ADDITIONS_WEIGHT"),
        ("deletions_weight", "GLADIATORS_DELETIONS_WEIGHT"),
        ("lines_per_commit_baseline", "GLADIATORS_LINES_PER_COMMIT_BASELINE"),
    ):
        raw = (os.environ.get(env_name) or "").strip()
        if not raw:
            continue
        try:
            out[field] = float(raw)
        except ValueError:
            continue
    return out


def slow_request_ms() -> float:
    """Requests slower than this are logged by the API middleware."""
    return _env_float("API_SLOW_REQUEST_MS", 1500.0, lo=25.0, hi=600000.0)


def allowed_origins() -> list[str]:
    raw = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def max_cached_repos() -> int:
    """Repositories whose merged records the pipeline keeps in memory."""
    return _env_int("GLADIATORS_MAX_CACHED_REPOS", 64, lo=1, hi=10000)
