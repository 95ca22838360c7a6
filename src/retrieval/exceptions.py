"""Exceptions raised while fetching issue data for a graph build."""

from __future__ import annotations

import datetime as dt
from typing import Optional


class GraphFetchError(RuntimeError):
    """Base class for failures that abort a graph build."""


class InvalidRepositoryUrlError(GraphFetchError):
    """Raised when the repository URL is not a plain github.com owner/repo URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Not a valid GitHub repository URL: {url!r}")


class RateLimitExceededError(GraphFetchError):
    """Raised on a 403 whose rate-limit-remaining header reads 0."""

    def __init__(self, reset_at: Optional[dt.datetime]) -> None:
        self.reset_at = reset_at
        if reset_at is None:
            when = "an unknown time"
        else:
            when = reset_at.strftime("%Y-%m-%d %H:%M:%S UTC")
        super().__init__(f"GitHub API rate limit exceeded; the limit resets at {when}")


class IssueFetchError(GraphFetchError):
    """Raised when the issue listing cannot be retrieved."""

    def __init__(self, url: str, status_code: Optional[int] = None, detail: str = "") -> None:
        self.url = url
        self.status_code = status_code
        status = f"HTTP {status_code}" if status_code is not None else "request error"
        message = f"Failed to fetch issues from {url} ({status})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


__all__ = [
    "GraphFetchError",
    "InvalidRepositoryUrlError",
    "RateLimitExceededError",
    "IssueFetchError",
]
