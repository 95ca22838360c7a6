"""Tests for src.pipeline.display covering the scoped display mode and payload styling.

Run with:
    pytest tests/test_display.py --maxfail=1 -v --cov=src.pipeline.display --cov-report=term-missing
"""

import json

import pytest

from src.graph.builder import build_issue_graph
from src.pipeline import display


def _issue(number, body="", labels=None):
    return {"number": number, "body": body, "labels": labels or [], "user": {"login": "dev"}}


def test_display_mode_reads_saved_preference_and_reverts(tmp_path):
    prefs = tmp_path / "prefs.json"
    prefs.write_text(json.dumps({"dark_mode": True}), encoding="utf-8")
    with display.display_mode(path=prefs) as mode:
        assert mode.dark is True
        assert display.ACTIVE_MODE.dark is True
        mode.toggle()
    assert display.ACTIVE_MODE.dark is False
    assert json.loads(prefs.read_text(encoding="utf-8")) == {"dark_mode": False}


def test_display_mode_explicit_argument_is_not_saved(tmp_path):
    prefs = tmp_path / "prefs.json"
    with display.display_mode(True, path=prefs) as mode:
        assert mode.dark is True
    assert not prefs.exists()
    assert display.ACTIVE_MODE.dark is False


def test_display_mode_saves_only_when_toggled(tmp_path):
    prefs = tmp_path / "prefs.json"
    prefs.write_text(json.dumps({"dark_mode": False}), encoding="utf-8")
    with display.display_mode(path=prefs):
        pass
    assert json.loads(prefs.read_text(encoding="utf-8")) == {"dark_mode": False}
    with display.display_mode(path=prefs) as mode:
        mode.toggle()
    assert display.load_display_preference(prefs) is True


def test_default_prefs_file_lives_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.delenv("DISPLAY_PREFS_FILE", raising=False)
    monkeypatch.chdir(tmp_path)
    with display.display_mode() as mode:
        mode.toggle()
    assert json.loads((tmp_path / "display_prefs.json").read_text(encoding="utf-8")) == {"dark_mode": True}
    assert display.load_display_preference() is True


def test_display_mode_reverts_when_body_raises(tmp_path):
    with pytest.raises(RuntimeError):
        with display.display_mode(True, path=tmp_path / "prefs.json"):
            raise RuntimeError("boom")
    assert display.ACTIVE_MODE.dark is False


def test_load_display_preference_defaults_to_light(tmp_path, monkeypatch):
    assert display.load_display_preference(tmp_path / "missing.json") is False
    bad = tmp_path / "bad.json"
    bad.write_text("nope", encoding="utf-8")
    assert display.load_display_preference(bad) is False
    monkeypatch.setenv("DISPLAY_PREFS_FILE", str(bad))
    assert display.load_display_preference() is False


def test_render_payload_styles_nodes_and_edges():
    graph = build_issue_graph([
        _issue(1, labels=[{"name": "bug", "color": "d73a4a"}]),
        _issue(2, "see #1"),
    ])
    payload = display.render_payload(graph, display.DisplayMode(dark=True))
    first, second = payload["nodes"]
    assert first["color"] == "#d73a4a"
    assert second["color"] == "#000000"
    assert first["render_size"] == 8
    assert first["border_color"] == "#ffffff"
    assert payload["edges"] == [
        {"id": "2-1", "source": "2", "target": "1", "type": "arrow", "color": "#4B5563"},
    ]
    assert payload["dark_mode"] is True

    light = display.render_payload(graph, display.DisplayMode(dark=False))
    assert light["edges"][0]["color"] == "#666"
