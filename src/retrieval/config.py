"""Central configuration constants for the issue retrieval workflow."""

from __future__ import annotations

import os
import re

USER_AGENT = "issue-reference-graph/1.0"
BASE_URL = "https://api.github.com"
PER_PAGE = 100
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "90"))
MAX_COMMENT_WORKERS = int(os.getenv("MAX_COMMENT_WORKERS", "8"))

# GitHub's documented hourly allowance for anonymous callers.
UNAUTHENTICATED_REQUEST_LIMIT = int(os.getenv("UNAUTHENTICATED_REQUEST_LIMIT", "60"))
RATE_LIMIT_BUFFER = int(os.getenv("RATE_LIMIT_BUFFER", "1"))
COMMENT_BUDGET_BUFFER = int(os.getenv("COMMENT_BUDGET_BUFFER", "2"))

REPO_URL_PATTERN = re.compile(r"^https://github\.com/[A-Za-z0-9-]+/[A-Za-z0-9-._]+/?$")

__all__ = [
    "USER_AGENT",
    "BASE_URL",
    "PER_PAGE",
    "REQUEST_TIMEOUT",
    "MAX_COMMENT_WORKERS",
    "UNAUTHENTICATED_REQUEST_LIMIT",
    "RATE_LIMIT_BUFFER",
    "COMMENT_BUDGET_BUFFER",
    "REPO_URL_PATTERN",
]
