"""Resolve owner/repo from GitHub page, clone or SSH URLs, or a bare owner/repo slug."""

from __future__ import annotations

import re
from urllib.parse import urlparse

_SSH_PREFIX = re.compile(r"^(?:ssh://)?git@github\.com[:/]", re.IGNORECASE)
_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")

# First path segments on github.com that are site sections, not owners.
RESERVED_OWNERS = frozenset(
    {
        "about",
        "apps",
        "codespaces",
        "collections",
        "enterprise",
        "enterprises",
        "events",
        "explore",
        "features",
        "issues",
        "login",
        "marketplace",
        "new",
        "notifications",
        "organizations",
        "orgs",
        "pricing",
        "pulls",
        "search",
        "settings",
        "sponsors",
        "topics",
        "trending",
        "users",
    }
)


def _path_segments(text: str) -> list[str] | None:
    ssh = _SSH_PREFIX.match(text)
    if ssh:
        return text[ssh.end():].split("/")
    if "://" not in text:
        if text.lower().startswith("github.com/"):
            text = "https://" + text
        elif text.count("/") == 1:
            return text.split("/")
        else:
            return None
    parts = urlparse(text)
    host = (parts.hostname or "").lower()
    if host not in ("github.com", "www.github.com"):
        return None
    return parts.path.split("/")[1:]


def parse_github_repo(url: str) -> tuple[str, str] | None:
    """Return (owner, repo), or None for anything that is not a repository.

    Site sections such as github.com/orgs/x or github.com/settings/profile are
    rejected.
    """
    if not url:
        return None
    text = url.strip()
    if text.startswith("git+"):
        text = text[len("git+"):]
    segments = _path_segments(text)
    if not segments or len(segments) < 2:
        return None
    owner, repo = segments[0].strip(), segments[1].strip()
    if repo.lower().endswith(".git"):
        repo = repo[:-4]
    if not _NAME_RE.match(owner) or not _NAME_RE.match(repo):
        return None
    if owner.lower() in RESERVED_OWNERS:
        return None
    return owner, repo
