"""Error response schema for leaderboard failures."""

from pydantic import BaseModel


class ErrorInfo(BaseModel):
    """Classified GitHub failure: error kind plus a human-readable message."""

    error: str
    message: str


class ErrorDetail(BaseModel):
    """Error body: single top-level field detail."""

    detail: ErrorInfo
