"""Light/dark display mode and the renderer-facing graph payload.

The display mode is held for the lifetime of a view through `display_mode()`,
which reads the saved preference on entry. On exit it saves the mode only if
it was toggled inside the block, then reverts the process-wide mode to light.
An explicit mode passed on entry is a one-off override and is never saved.
"""

from __future__ import annotations

import json
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from src.graph.builder import IssueGraph

DEFAULT_PREFS_FILENAME = "display_prefs.json"

EDGE_COLOR_DARK = "#4B5563"
EDGE_COLOR_LIGHT = "#666"
UNLABELED_NODE_COLOR = "#000000"
NODE_SIZE_SCALE = 4


@dataclass
class DisplayMode:
    dark: bool = False

    def toggle(self) -> bool:
        self.dark = not self.dark
        return self.dark

    @property
    def edge_color(self) -> str:
        return EDGE_COLOR_DARK if self.dark else EDGE_COLOR_LIGHT

    @property
    def border_color(self) -> str:
        return "#ffffff" if self.dark else "#000000"


ACTIVE_MODE = DisplayMode()


def _prefs_path(path: Optional[str | Path] = None) -> Path:
    default = Path.cwd() / DEFAULT_PREFS_FILENAME
    candidate = path or os.getenv("DISPLAY_PREFS_FILE") or default
    return Path(candidate).expanduser()


def load_display_preference(path: Optional[str | Path] = None) -> bool:
    """Return the saved dark-mode flag; light when nothing usable is stored."""
    prefs_path = _prefs_path(path)
    if not prefs_path.exists():
        return False
    try:
        with prefs_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError):
        return False
    return isinstance(data, dict) and data.get("dark_mode") is True


def save_display_preference(dark: bool, path: Optional[str | Path] = None) -> None:
    prefs_path = _prefs_path(path)
    try:
        with prefs_path.open("w", encoding="utf-8") as handle:
            json.dump({"dark_mode": bool(dark)}, handle)
    except OSError as exc:
        print(f"[warn] could not save display preference to {prefs_path}: {exc}")


@contextmanager
def display_mode(dark: Optional[bool] = None, path: Optional[str | Path] = None) -> Iterator[DisplayMode]:
    """Hold the active display mode for the duration of a view."""
    initial = load_display_preference(path) if dark is None else bool(dark)
    ACTIVE_MODE.dark = initial
    try:
        yield ACTIVE_MODE
    finally:
        if ACTIVE_MODE.dark != initial:
            save_display_preference(ACTIVE_MODE.dark, path)
        ACTIVE_MODE.dark = False


def node_color(attributes: Dict[str, Any]) -> str:
    """Nodes take the colour of their first label."""
    labels = attributes.get("labels") or []
    color = labels[0].get("color") if labels else None
    return f"#{color}" if color else UNLABELED_NODE_COLOR


def render_payload(graph: IssueGraph, mode: Optional[DisplayMode] = None) -> Dict[str, Any]:
    """Serialise the graph with the styling attributes a renderer draws from."""
    mode = mode or ACTIVE_MODE
    payload = graph.to_dict()
    for node in payload["nodes"]:
        node["render_size"] = node["size"] * NODE_SIZE_SCALE
        node["color"] = node_color(node["attributes"])
        node["border_color"] = mode.border_color
    for edge in payload["edges"]:
        edge["type"] = "arrow"
        edge["color"] = mode.edge_color
    payload["dark_mode"] = mode.dark
    return payload


__all__ = [
    "DisplayMode",
    "ACTIVE_MODE",
    "load_display_preference",
    "save_display_preference",
    "display_mode",
    "node_color",
    "render_payload",
]
