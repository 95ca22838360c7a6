"""Entry points for building an issue-reference graph for one repository."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.graph.builder import GraphCache, IssueGraph
from src.retrieval.collectors import ensure_dir, fetch_issues_and_comments, parse_repo_url, save_json
from src.retrieval.exceptions import GraphFetchError, InvalidRepositoryUrlError, RateLimitExceededError
from src.secrets import github_token_from_secrets

from .display import display_mode, render_payload

GRAPH_CACHE = GraphCache()


@dataclass
class GraphBuildResult:
    """A finished graph plus what the caller needs to present it."""

    graph: IssueGraph
    issues: List[Dict[str, Any]]
    partial: bool = False
    requests_spent: int = 0
    skipped_comment_issues: List[int] = field(default_factory=list)
    notice: Optional[str] = None


def build_repo_graph(repo_url: str, token: Optional[str] = None) -> GraphBuildResult:
    """Validate the URL, fetch issues and comments, and build the graph."""
    owner, repo = parse_repo_url(repo_url)

    print(f"\n=== {owner}/{repo} ===")
    print("  fetching open issues and comments...")
    fetched = fetch_issues_and_comments(owner, repo, token)

    print("  building reference graph...")
    graph = GRAPH_CACHE.build(fetched.issues, fetched.comments)

    notice = None
    if fetched.partial:
        notice = (
            f"Showing partial results: API request budget reached after "
            f"{len(fetched.issues)} issues"
        )
        if fetched.skipped_comment_issues:
            notice += f" ({len(fetched.skipped_comment_issues)} without comments)"
        print(f"[warn] {notice}")

    return GraphBuildResult(
        graph=graph,
        issues=fetched.issues,
        partial=fetched.partial,
        requests_spent=fetched.requests_spent,
        skipped_comment_issues=fetched.skipped_comment_issues,
        notice=notice,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Return the CLI parser used by the graph entry point."""
    parser = argparse.ArgumentParser(
        description="Build a graph of #N cross-references between a repository's open issues.",
    )
    parser.add_argument("repo_url", help="https://github.com/<owner>/<repo>")
    parser.add_argument("--token", default=None, help="GitHub token (defaults to local_secrets.json)")
    parser.add_argument("--output", default=None, help="write the renderer payload to this JSON file")
    parser.add_argument(
        "--dark",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="style the payload for dark (--dark) or light (--no-dark) mode; defaults to the saved preference",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> GraphBuildResult:
    """Entry point used by both CLI and imports."""
    args = build_arg_parser().parse_args(argv)
    token = args.token or github_token_from_secrets()

    try:
        result = build_repo_graph(args.repo_url, token)
    except InvalidRepositoryUrlError as exc:
        print(f"[error] {exc}")
        sys.exit(1)
    except RateLimitExceededError as exc:
        print(f"[rate-limit] {exc}")
        sys.exit(1)
    except GraphFetchError as exc:
        print(f"[error] {exc}")
        sys.exit(1)

    graph = result.graph
    print(f"  {len(graph.nodes)} issues, {len(graph.edges)} references, {result.requests_spent} requests")

    if args.output:
        with display_mode(args.dark) as mode:
            payload = render_payload(graph, mode)
        payload["issues"] = result.issues
        payload["partial"] = result.partial
        out_dir = os.path.dirname(args.output)
        if out_dir:
            ensure_dir(out_dir)
        save_json(args.output, payload)
        print(f"    DONE BUILDING GRAPH → {args.output}")
    return result


__all__ = ["GRAPH_CACHE", "GraphBuildResult", "build_repo_graph", "build_arg_parser", "main"]


if __name__ == "__main__":
    main()
