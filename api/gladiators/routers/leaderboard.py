"""Leaderboard, repository resolution and scoring-rules routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from gladiators.models.contributor_stats import Period
from gladiators.models.error import ErrorDetail
from gladiators.models.leaderboard import (
    LeaderboardResponse,
    RepoRef,
    ScoringResponse,
    ScoringWeights,
    Title,
    TitleRule,
)
from gladiators.services.github_client import ErrorKind, GitHubApiError
from gladiators.services.leaderboard_service import LeaderboardPipeline
from gladiators.services.repo_url import parse_github_repo
from gladiators.services.scoring import DEFAULT_SCORING
from gladiators.services.title_classifier import TITLE_RULES

router = APIRouter()

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.MISSING_CREDENTIAL: 401,
    ErrorKind.INVALID_CREDENTIAL: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STILL_COMPUTING: 503,
    ErrorKind.TRANSPORT_ERROR: 502,
}


def get_pipeline(request: Request) -> LeaderboardPipeline:
    return request.app.state.leaderboard_pipeline


def _http_error(exc: GitHubApiError, pipeline: LeaderboardPipeline) -> HTTPException:
    headers = None
    if exc.kind == ErrorKind.STILL_COMPUTING:
        headers = {"Retry-After": str(max(1, int(round(pipeline.retry_delay_seconds))))}
    return HTTPException(
        status_code=_STATUS_BY_KIND.get(exc.kind, 502),
        detail={"error": exc.kind.value, "message": exc.message},
        headers=headers,
    )


@router.get(
    "/repos/resolve",
    response_model=RepoRef,
    responses={422: {"description": "Not a GitHub repository URL"}},
)
async def resolve_repo(url: str = Query(..., min_length=1, description="GitHub page or clone URL")) -> RepoRef:
    """Extract owner/repo from a GitHub URL."""
    parsed = parse_github_repo(url)
    if parsed is None:
        raise HTTPException(status_code=422, detail="Not a GitHub repository URL")
    return RepoRef(owner=parsed[0], repo=parsed[1])


@router.get(
    "/repos/{owner}/{repo}/leaderboard",
    response_model=LeaderboardResponse,
    responses={
        401: {"model": ErrorDetail},
        403: {"model": ErrorDetail},
        404: {"model": ErrorDetail},
        429: {"model": ErrorDetail},
        502: {"model": ErrorDetail},
        503: {"model": ErrorDetail},
    },
)
async def get_leaderboard(
    owner: str,
    repo: str,
    period: Period = Query(Period.ALL, description="Reporting window: all, week or month."),
    refresh: bool = Query(False, description="Refetch from GitHub instead of using cached stats."),
    pipeline: LeaderboardPipeline = Depends(get_pipeline),
) -> LeaderboardResponse:
    """Ranked contributor leaderboard for a repository."""
    try:
        return await pipeline.leaderboard(owner, repo, period=period, refresh=refresh)
    except GitHubApiError as exc:
        raise _http_error(exc, pipeline) from exc


@router.get("/scoring", response_model=ScoringResponse)
async def get_scoring(pipeline: LeaderboardPipeline = Depends(get_pipeline)) -> ScoringResponse:
    """Scoring weights in effect and the ordered title rules."""
    cfg = pipeline.scoring or DEFAULT_SCORING
    rules = [
        TitleRule(
            order=index + 1,
            title=rule.title.label,
            color=rule.title.color,
            emoji=rule.title.emoji,
            rule=rule.description,
        )
        for index, rule in enumerate(TITLE_RULES)
    ]
    rules.append(
        TitleRule(
            order=len(rules) + 1,
            title=Title.INACTIVE.label,
            color=Title.INACTIVE.color,
            emoji=Title.INACTIVE.emoji,
            rule="otherwise",
        )
    )
    return ScoringResponse(
        weights=ScoringWeights(
            commit_weight=cfg.commit_weight,
            additions_weight=cfg.additions_weight,
            deletions_weight=cfg.deletions_weight,
            lines_per_commit_baseline=cfg.lines_per_commit_baseline,
        ),
        titles=rules,
    )
