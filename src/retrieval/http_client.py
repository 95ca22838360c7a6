"""HTTP helpers and rate-limit header parsing for the issue retrieval workflow."""

from __future__ import annotations

import datetime as dt
from typing import Dict, Optional, Tuple

import requests

from .config import REQUEST_TIMEOUT, USER_AGENT

SESSION = requests.Session()
SESSION.headers.update(
    {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": USER_AGENT,
    }
)

RATE_LIMIT_REMAINING_HEADER = "x-ratelimit-remaining"
RATE_LIMIT_RESET_HEADER = "x-ratelimit-reset"


def auth_headers(token: Optional[str]) -> Dict[str, str]:
    """Return per-request headers, attaching the token when one was supplied."""
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def github_get(url: str, token: Optional[str] = None) -> requests.Response:
    """Issue a single GET against the GitHub REST API."""
    return SESSION.get(url, headers=auth_headers(token), timeout=REQUEST_TIMEOUT)


def header_value(resp: requests.Response, name: str) -> Optional[str]:
    """Look up a response header without caring about its capitalisation."""
    headers = getattr(resp, "headers", None) or {}
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted:
            return value
    return None


def parse_rate_limit(resp: requests.Response) -> Tuple[Optional[int], Optional[dt.datetime]]:
    """Return (remaining, reset_at) from the rate-limit headers; None when unreadable."""
    remaining_raw = header_value(resp, RATE_LIMIT_REMAINING_HEADER)
    reset_raw = header_value(resp, RATE_LIMIT_RESET_HEADER)

    remaining = None
    if remaining_raw is not None and str(remaining_raw).strip().isdigit():
        remaining = int(str(remaining_raw).strip())

    reset_at = None
    if reset_raw is not None and str(reset_raw).strip().isdigit():
        try:
            reset_at = dt.datetime.fromtimestamp(int(str(reset_raw).strip()), tz=dt.timezone.utc)
        except (OverflowError, OSError, ValueError):
            reset_at = None
    return remaining, reset_at


def is_rate_limited(resp: requests.Response) -> bool:
    """True for a 403 that GitHub flags as an exhausted rate limit."""
    remaining = header_value(resp, RATE_LIMIT_REMAINING_HEADER)
    return resp.status_code == 403 and str(remaining).strip() == "0"


def response_message(resp: requests.Response) -> str:
    """Extract GitHub's error message, falling back to a trimmed body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        msg = body.get("message") or body.get("error")
        if msg:
            return str(msg)
    return (resp.text or "")[:300]


def log_http_error(resp: requests.Response, url: str) -> None:
    """Print a short, human-readable message when GitHub returns an error."""
    print(f"[error] HTTP {resp.status_code} for {url}\n  -> {response_message(resp)}")


__all__ = [
    "SESSION",
    "RATE_LIMIT_REMAINING_HEADER",
    "RATE_LIMIT_RESET_HEADER",
    "auth_headers",
    "github_get",
    "header_value",
    "parse_rate_limit",
    "is_rate_limited",
    "response_message",
    "log_http_error",
]
