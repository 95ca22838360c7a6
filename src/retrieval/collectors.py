"""Data collection helpers for open issues and their comments.

The issue listing is paginated under a request budget: anonymous callers get
GitHub's hourly allowance, authenticated callers are not capped here. Comments
are fetched afterwards, one request per issue, on a bounded thread pool and
only for as many issues as the remaining budget allows.
"""

from __future__ import annotations

import enum
import json
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

import requests

from .config import (
    BASE_URL,
    COMMENT_BUDGET_BUFFER,
    MAX_COMMENT_WORKERS,
    PER_PAGE,
    RATE_LIMIT_BUFFER,
    REPO_URL_PATTERN,
    UNAUTHENTICATED_REQUEST_LIMIT,
)
from .exceptions import (
    GraphFetchError,
    InvalidRepositoryUrlError,
    IssueFetchError,
    RateLimitExceededError,
)
from .http_client import github_get, is_rate_limited, log_http_error, parse_rate_limit, response_message

GITHUB_PREFIX = "https://github.com/"


def ensure_dir(path: str) -> None:
    """Create output directories as-needed without raising for existing folders."""
    os.makedirs(path, exist_ok=True)


def save_json(path: str, data: Any) -> None:
    """Write JSON to disk using UTF-8 and deterministic formatting."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def parse_repo_url(url: str) -> Tuple[str, str]:
    """Split a https://github.com/<owner>/<repo> URL, rejecting anything else."""
    if not isinstance(url, str) or not REPO_URL_PATTERN.fullmatch(url):
        raise InvalidRepositoryUrlError(url)
    owner, repo = url[len(GITHUB_PREFIX):].rstrip("/").split("/", 1)
    return owner, repo


@dataclass
class RequestBudget:
    """Counts outbound requests against an optional ceiling (None = unbounded)."""

    limit: Optional[int] = None
    spent: int = 0

    @classmethod
    def for_token(cls, token: Optional[str]) -> "RequestBudget":
        return cls(limit=None if token else UNAUTHENTICATED_REQUEST_LIMIT)

    @property
    def bounded(self) -> bool:
        return self.limit is not None

    def remaining(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(0, self.limit - self.spent)

    def exhausted(self) -> bool:
        return self.limit is not None and self.spent >= self.limit

    def spend(self, count: int = 1) -> None:
        self.spent += count


def comment_allowance(budget: RequestBudget) -> Optional[int]:
    """How many comment requests may still be issued; None when unbounded."""
    if budget.limit is None:
        return None
    return max(0, min(budget.limit - COMMENT_BUDGET_BUFFER, budget.limit - budget.spent))


class PaginationState(enum.Enum):
    FETCHING = "fetching"
    BUDGET_EXHAUSTED = "budget_exhausted"
    RATE_LIMITED = "rate_limited"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class IssueFetchResult:
    """Outcome of paginating the open-issue listing."""

    issues: List[Dict[str, Any]]
    state: PaginationState
    requests_spent: int

    @property
    def partial(self) -> bool:
        return self.state is PaginationState.BUDGET_EXHAUSTED


@dataclass
class CommentFetchResult:
    comments: Dict[int, List[Dict[str, Any]]] = field(default_factory=dict)
    skipped: List[int] = field(default_factory=list)


@dataclass
class RepositoryFetch:
    """Everything a graph build needs from one fetch cycle."""

    issues: List[Dict[str, Any]]
    comments: Dict[int, List[Dict[str, Any]]]
    pagination_state: PaginationState
    requests_spent: int
    skipped_comment_issues: List[int] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return self.pagination_state is PaginationState.BUDGET_EXHAUSTED or bool(self.skipped_comment_issues)


def _issue_number(issue: Any) -> Optional[int]:
    if not isinstance(issue, dict):
        return None
    number = issue.get("number")
    if isinstance(number, bool) or not isinstance(number, int):
        return None
    return number


def get_open_issues(owner: str,
                    repo: str,
                    token: Optional[str] = None,
                    budget: Optional[RequestBudget] = None) -> IssueFetchResult:
    """Page through open issues until an empty page, the budget, or a failure stops us."""
    budget = budget if budget is not None else RequestBudget.for_token(token)
    base_url = f"{BASE_URL}/repos/{owner}/{repo}/issues?state=open"
    issues: List[Dict[str, Any]] = []
    seen: Set[int] = set()
    error: Optional[GraphFetchError] = None
    state = PaginationState.FETCHING
    page = 1

    while state is PaginationState.FETCHING:
        if budget.exhausted():
            print(f"[rate-limit] request budget of {budget.limit} spent after {page - 1} pages")
            state = PaginationState.BUDGET_EXHAUSTED
            continue

        page_url = f"{base_url}&per_page={PER_PAGE}&page={page}"
        budget.spend()
        try:
            resp = github_get(page_url, token)
        except requests.RequestException as exc:
            print(f"[error] {page_url} -> {exc}")
            error = IssueFetchError(page_url, detail=str(exc))
            state = PaginationState.FAILED
            continue

        if is_rate_limited(resp):
            _, reset_at = parse_rate_limit(resp)
            error = RateLimitExceededError(reset_at)
            state = PaginationState.RATE_LIMITED
            continue

        if resp.status_code != 200:
            log_http_error(resp, page_url)
            error = IssueFetchError(page_url, resp.status_code, response_message(resp))
            state = PaginationState.FAILED
            continue

        try:
            batch = resp.json()
        except ValueError:
            batch = None
        if not isinstance(batch, list):
            error = IssueFetchError(page_url, resp.status_code, "response body is not a list")
            state = PaginationState.FAILED
            continue

        if not batch:
            state = PaginationState.COMPLETE
            continue

        for entry in batch:
            number = _issue_number(entry)
            if number is None or number in seen:
                continue
            seen.add(number)
            issues.append(entry)

        remaining, _ = parse_rate_limit(resp)
        if remaining is not None and remaining <= RATE_LIMIT_BUFFER:
            print(f"[rate-limit] only {remaining} API requests left; stopping after page {page}")
            state = PaginationState.BUDGET_EXHAUSTED
            continue

        page += 1

    if error is not None:
        raise error
    return IssueFetchResult(issues=issues, state=state, requests_spent=budget.spent)


def get_issue_comments(issue: Dict[str, Any], token: Optional[str] = None) -> Optional[List[Dict[str, Any]]]:
    """Fetch the first page of an issue's comments; None when the request fails."""
    number = issue.get("number")
    url = issue.get("comments_url")
    if not url:
        return None
    try:
        resp = github_get(url, token)
    except requests.RequestException as exc:
        print(f"[warn] comments for #{number} unavailable -> {exc}")
        return None

    if resp.status_code != 200:
        print(f"[warn] comments for #{number} -> HTTP {resp.status_code}; treating as none")
        return None
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if not isinstance(payload, list):
        print(f"[warn] comments for #{number} returned an unexpected body; treating as none")
        return None
    return payload


def collect_comments(issues: List[Dict[str, Any]],
                     token: Optional[str] = None,
                     budget: Optional[RequestBudget] = None) -> CommentFetchResult:
    """Fetch comments for as many issues as the budget allows, one pooled task per issue."""
    budget = budget if budget is not None else RequestBudget.for_token(token)
    candidates = [
        issue for issue in issues
        if _issue_number(issue) is not None and issue.get("comments_url")
    ]

    allowance = comment_allowance(budget)
    if allowance is None:
        selected = candidates
        skipped: List[int] = []
    else:
        selected = candidates[:allowance]
        skipped = [issue["number"] for issue in candidates[allowance:]]
    if skipped:
        print(f"[rate-limit] skipping comments for {len(skipped)} issues to stay within {budget.limit} requests")

    result = CommentFetchResult(skipped=skipped)
    if not selected:
        return result

    budget.spend(len(selected))
    workers = max(1, min(MAX_COMMENT_WORKERS, len(selected)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(get_issue_comments, issue, token): issue["number"] for issue in selected}
        for future in as_completed(futures):
            comments = future.result()
            if comments is not None:
                result.comments[futures[future]] = comments
    return result


def fetch_issues_and_comments(owner: str, repo: str, token: Optional[str] = None) -> RepositoryFetch:
    """Run the listing and comment phases against one shared request budget."""
    budget = RequestBudget.for_token(token)
    listing = get_open_issues(owner, repo, token, budget)
    print(f"  fetched {len(listing.issues)} open issues in {listing.requests_spent} requests")
    comments = collect_comments(listing.issues, token, budget)
    return RepositoryFetch(
        issues=listing.issues,
        comments=comments.comments,
        pagination_state=listing.state,
        requests_spent=budget.spent,
        skipped_comment_issues=comments.skipped,
    )


__all__ = [
    "ensure_dir",
    "save_json",
    "parse_repo_url",
    "RequestBudget",
    "comment_allowance",
    "PaginationState",
    "IssueFetchResult",
    "CommentFetchResult",
    "RepositoryFetch",
    "get_open_issues",
    "get_issue_comments",
    "collect_comments",
    "fetch_issues_and_comments",
]
