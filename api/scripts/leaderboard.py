#!/usr/bin/env python3
"""Print a contributor leaderboard for a GitHub repository.

Usage:
  python scripts/leaderboard.py OWNER/REPO|URL [--period all|week|month] [--json] [-v]

Notes:
- Requires GITHUB_TOKEN (or GH_TOKEN) unless GLADIATORS_REQUIRE_TOKEN=0
- Retries while GitHub is still computing contributor stats
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

_api_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _api_dir)
load_dotenv(os.path.join(_api_dir, ".env"))

from gladiators.models.contributor_stats import Period
from gladiators.services.github_client import GitHubApiError, GitHubClient
from gladiators.services.leaderboard_service import LeaderboardPipeline
from gladiators.services.repo_url import parse_github_repo
from gladiators.services.report_formatter import format_leaderboard_text
from gladiators.services.scoring import scoring_from_env

log = logging.getLogger(__name__)


async def _run(owner: str, repo: str, period: Period, as_json: bool) -> int:
    pipeline = LeaderboardPipeline(GitHubClient(), scoring=scoring_from_env())
    try:
        response = await pipeline.leaderboard(owner, repo, period=period)
    except GitHubApiError as e:
        log.error("leaderboard failed for %s/%s: %s", owner, repo, e.message)
        print(f"error ({e.kind.value}): {e.message}", file=sys.stderr)
        return 1
    if as_json:
        print(response.model_dump_json(indent=2))
    else:
        print(format_leaderboard_text(response))
    return 0


def main() -> None:
    ap = argparse.ArgumentParser(description="Rank repository contributors by balanced score")
    ap.add_argument("repo", help="owner/repo or a GitHub repository URL")
    ap.add_argument(
        "--period",
        choices=[p.value for p in Period],
        default=Period.ALL.value,
        help="Reporting window (default all).",
    )
    ap.add_argument("--json", action="store_true", help="Print the response as JSON.")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    parsed = parse_github_repo(args.repo)
    if parsed is None:
        ap.error(f"not a GitHub repository: {args.repo}")
    owner, repo = parsed
    sys.exit(asyncio.run(_run(owner, repo, Period(args.period), args.json)))


if __name__ == "__main__":
    main()
