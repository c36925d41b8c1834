from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from gladiators.routers import health, leaderboard
from gladiators.services import config
from gladiators.services.github_client import GitHubClient
from gladiators.services.leaderboard_service import LeaderboardPipeline
from gladiators.services.scoring import scoring_from_env

app = FastAPI(
    title="Git Gladiators Leaderboard API",
    description="Ranks repository contributors by a balanced commit/line-change score.",
    version=health.HEALTH_VERSION,
)
logger = logging.getLogger("gladiators.api")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
logger.propagate = False
logger.setLevel(logging.INFO)


@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    if elapsed_ms >= config.slow_request_ms():
        logger.warning(
            "slow_api_request method=%s path=%s status=%s elapsed_ms=%.2f query=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            dict(request.query_params),
        )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# One pipeline per process; merged records are cached per repository.
app.state.leaderboard_pipeline = LeaderboardPipeline(GitHubClient(), scoring=scoring_from_env())


@app.get("/", include_in_schema=False)
async def root():
    """Landing info for API discovery."""
    return {
        "name": app.title,
        "version": health.HEALTH_VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }


app.include_router(leaderboard.router, prefix="/api", tags=["leaderboard"])
app.include_router(health.router, prefix="/api", tags=["health"])
