"""Extraction of `#123`-style issue references from free text."""

from __future__ import annotations

import re
from typing import Any, Iterable, Set

ISSUE_REF_RE = re.compile(r"#([0-9]+)")


def extract_issue_refs(text: Any) -> Set[int]:
    """Return the distinct issue numbers mentioned as #N; empty for missing text."""
    if not text or not isinstance(text, str):
        return set()
    return {int(match.group(1)) for match in ISSUE_REF_RE.finditer(text)}


def extract_refs_from_texts(texts: Iterable[Any]) -> Set[int]:
    """Union of the references found across several bodies."""
    refs: Set[int] = set()
    for text in texts:
        refs |= extract_issue_refs(text)
    return refs


__all__ = ["ISSUE_REF_RE", "extract_issue_refs", "extract_refs_from_texts"]
