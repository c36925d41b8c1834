"""Liveness, readiness and version endpoints."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from gladiators.models.leaderboard import PipelineState

router = APIRouter()

HEALTH_VERSION = "1.0.0"
SERVICE_STARTED_AT = datetime.now(timezone.utc)

_UNITS = (("d", 86400), ("h", 3600), ("m", 60))


def _iso_utc(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _uptime_human(seconds: int) -> str:
    """3725 -> '1h 2m 5s'. Leading zero units are omitted."""
    parts: list[str] = []
    rest = seconds
    for suffix, size in _UNITS:
        count, rest = divmod(rest, size)
        if count or parts:
            parts.append(f"{count}{suffix}")
    parts.append(f"{rest}s")
    return " ".join(parts)


class HealthResponse(BaseModel):
    """GET /api/health response."""

    model_config = ConfigDict(extra="forbid")
    status: Annotated[str, Field(description="Always 'ok'")]
    version: Annotated[str, Field(description="Semver MAJOR.MINOR.PATCH")]
    timestamp: Annotated[str, Field(description="ISO8601 UTC")]
    started_at: Annotated[str, Field(description="ISO8601 UTC when service process started")]
    uptime_seconds: Annotated[int, Field(ge=0)]
    uptime_human: str


class ReadyResponse(BaseModel):
    """GET /api/ready response: whether leaderboards can be served right now."""

    model_config = ConfigDict(extra="forbid")
    status: Annotated[str, Field(description="Always 'ready'")]
    version: str
    pipeline_state: PipelineState
    github_token_configured: bool
    cached_repositories: Annotated[int, Field(ge=0)]


@router.get("/version")
async def version():
    """Return API version (lightweight, for dashboards)."""
    return {"version": HEALTH_VERSION}


@router.get("/ready", response_model=ReadyResponse)
async def ready(request: Request):
    """Readiness probe. 503 until a leaderboard pipeline is attached to the app."""
    pipeline = getattr(request.app.state, "leaderboard_pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="not ready")
    return ReadyResponse(
        status="ready",
        version=HEALTH_VERSION,
        pipeline_state=pipeline.state,
        github_token_configured=getattr(pipeline.client, "has_token", False),
        cached_repositories=pipeline.cached_repo_count,
    )


@router.get("/health", response_model=HealthResponse)
async def health():
    """Return API health status."""
    now = datetime.now(timezone.utc)
    up = max(0, int((now - SERVICE_STARTED_AT).total_seconds()))
    return HealthResponse(
        status="ok",
        version=HEALTH_VERSION,
        timestamp=_iso_utc(now),
        started_at=_iso_utc(SERVICE_STARTED_AT),
        uptime_seconds=up,
        uptime_human=_uptime_human(up),
    )
