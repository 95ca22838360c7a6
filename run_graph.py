"""Convenience shim to build the issue-reference graph for one repository."""

from __future__ import annotations

import sys

from src.pipeline.runner import main as graph_main


if __name__ == "__main__":
    graph_main(sys.argv[1:])
