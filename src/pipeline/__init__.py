"""Issue-reference graph pipeline: fetch, build, and hand off to a renderer."""

from .runner import GraphBuildResult, build_repo_graph, main

__all__ = ["GraphBuildResult", "build_repo_graph", "main"]
