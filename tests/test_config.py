"""Tests for src.retrieval.config ensuring env overrides and defaults work.

Run with coverage to validate configuration handling:
    pytest tests/test_config.py --maxfail=1 -v --cov=src.retrieval.config --cov-report=term-missing
"""

from importlib import reload

import src.retrieval.config as config


def test_config_defaults_are_present():
    assert config.PER_PAGE == 100
    assert config.UNAUTHENTICATED_REQUEST_LIMIT == 60
    assert config.RATE_LIMIT_BUFFER == 1
    assert config.COMMENT_BUDGET_BUFFER == 2
    assert config.MAX_COMMENT_WORKERS >= 1
    assert config.BASE_URL == "https://api.github.com"


def test_repo_url_pattern():
    assert config.REPO_URL_PATTERN.match("https://github.com/owner/repo")
    assert config.REPO_URL_PATTERN.match("https://github.com/owner/repo/")
    assert not config.REPO_URL_PATTERN.match("https://github.com/owner")


def test_env_override_for_comment_workers(monkeypatch):
    monkeypatch.setenv("MAX_COMMENT_WORKERS", "3")
    reloaded = reload(config)
    try:
        assert reloaded.MAX_COMMENT_WORKERS == 3
    finally:
        monkeypatch.delenv("MAX_COMMENT_WORKERS", raising=False)
        reload(config)
