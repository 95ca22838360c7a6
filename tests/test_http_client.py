"""Unit tests for src.retrieval.http_client covering headers and rate-limit parsing.

Execute with coverage to validate networking helpers:
    pytest tests/test_http_client.py --maxfail=1 -v --cov=src.retrieval.http_client --cov-report=term-missing
"""

import datetime as dt
from typing import Any, Dict, Optional
from unittest.mock import MagicMock, patch

from src.retrieval import http_client


def _make_resp(status: int = 200, payload: Any = None, headers: Optional[Dict[str, str]] = None):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    if payload is None:
        payload = {}
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


def test_auth_headers_with_and_without_token():
    assert "Authorization" not in http_client.auth_headers(None)
    assert "Authorization" not in http_client.auth_headers("")
    headers = http_client.auth_headers("abc")
    assert headers["Authorization"] == "token abc"
    assert headers["Accept"] == "application/vnd.github.v3+json"


def test_session_sends_v3_accept_header():
    assert http_client.SESSION.headers["Accept"] == "application/vnd.github.v3+json"


@patch("src.retrieval.http_client.SESSION")
def test_github_get_passes_token_and_timeout(mock_session):
    mock_session.get.return_value = _make_resp(200, [])
    resp = http_client.github_get("https://api.github.com/x", "tok")
    assert resp.status_code == 200
    _, kwargs = mock_session.get.call_args
    assert kwargs["headers"]["Authorization"] == "token tok"
    assert kwargs["timeout"] == http_client.REQUEST_TIMEOUT


def test_header_value_is_case_insensitive():
    resp = _make_resp(headers={"X-RateLimit-Remaining": "42"})
    assert http_client.header_value(resp, "x-ratelimit-remaining") == "42"
    assert http_client.header_value(resp, "x-ratelimit-reset") is None


def test_parse_rate_limit_reads_both_headers():
    resp = _make_resp(headers={"x-ratelimit-remaining": "7", "x-ratelimit-reset": "1700000000"})
    remaining, reset_at = http_client.parse_rate_limit(resp)
    assert remaining == 7
    assert reset_at == dt.datetime(2023, 11, 14, 22, 13, 20, tzinfo=dt.timezone.utc)


def test_parse_rate_limit_tolerates_garbage():
    resp = _make_resp(headers={"x-ratelimit-remaining": "lots", "x-ratelimit-reset": "soon"})
    assert http_client.parse_rate_limit(resp) == (None, None)
    assert http_client.parse_rate_limit(_make_resp()) == (None, None)


def test_is_rate_limited_requires_403_and_zero_remaining():
    assert http_client.is_rate_limited(_make_resp(403, headers={"X-RateLimit-Remaining": "0"}))
    assert not http_client.is_rate_limited(_make_resp(403, headers={"X-RateLimit-Remaining": "5"}))
    assert not http_client.is_rate_limited(_make_resp(403))
    assert not http_client.is_rate_limited(_make_resp(200, headers={"X-RateLimit-Remaining": "0"}))


def test_log_http_error_handles_json_and_text(capsys):
    resp = _make_resp(404, {"message": "Not Found"})
    http_client.log_http_error(resp, "url")
    assert "Not Found" in capsys.readouterr().out

    resp = _make_resp(502)
    resp.json.side_effect = ValueError()
    resp.text = "plain"
    http_client.log_http_error(resp, "url")
    assert "plain" in capsys.readouterr().out
