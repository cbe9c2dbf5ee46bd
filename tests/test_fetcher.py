"""Tests for the outbound HTTP helpers."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mirror.services.fetcher import (
    USER_AGENT,
    build_client,
    describe_error,
    fetch_json,
    fetch_text,
    redact_url,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _mock_response(
    text: str = "OK", status_code: int = 200, json: dict | None = None
) -> httpx.Response:
    """Create a mock httpx.Response."""
    if json is not None:
        return httpx.Response(
            status_code=status_code,
            json=json,
            request=httpx.Request("GET", "https://example.com"),
        )
    return httpx.Response(
        status_code=status_code,
        text=text,
        request=httpx.Request("GET", "https://example.com"),
    )


def _patched_client(MockClient, **get_kwargs):
    instance = AsyncMock()
    for key, value in get_kwargs.items():
        setattr(instance.get, key, value)
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    MockClient.return_value = instance
    return instance


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestBuildClient:
    def test_sends_user_agent_header(self):
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            build_client(5)
            call_kwargs = MockClient.call_args[1]
            assert call_kwargs["headers"]["User-Agent"] == USER_AGENT
            assert call_kwargs["timeout"] == 5

    def test_default_timeout_from_settings(self):
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            build_client()
            assert MockClient.call_args[1]["timeout"] == 10.0


class TestFetchJson:
    async def test_returns_decoded_json(self):
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            _patched_client(MockClient, return_value=_mock_response(json={"ok": True}))
            assert await fetch_json("https://example.com", params={"a": "1"}) == {"ok": True}

    async def test_raises_on_error_status(self):
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            _patched_client(MockClient, return_value=_mock_response(status_code=500))
            with pytest.raises(httpx.HTTPStatusError):
                await fetch_json("https://example.com")


class TestFetchText:
    async def test_returns_body(self):
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            _patched_client(MockClient, return_value=_mock_response("<rss/>"))
            assert await fetch_text("https://example.com/feed") == "<rss/>"

    async def test_returns_none_on_404(self):
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            _patched_client(MockClient, return_value=_mock_response(status_code=404))
            assert await fetch_text("https://example.com/feed") is None

    async def test_returns_none_on_timeout(self):
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            _patched_client(MockClient, side_effect=httpx.ReadTimeout("timeout"))
            assert await fetch_text("https://slow.example.com") is None


class TestRedaction:
    def test_redact_url_drops_credentials(self):
        url = "https://api.tomtom.com/search/2/search/Chicago.json?key=sekrit&limit=5"
        redacted = redact_url(url)
        assert "sekrit" not in redacted
        assert "limit=5" in redacted
        assert redacted.startswith("https://api.tomtom.com/search/2/search/Chicago.json")

    def test_describe_status_error(self):
        request = httpx.Request("GET", "https://api.tomtom.com/x.json?key=sekrit")
        response = httpx.Response(403, request=request)
        exc = httpx.HTTPStatusError("Client error", request=request, response=response)
        described = describe_error(exc)
        assert described == "HTTP 403 from https://api.tomtom.com/x.json"

    def test_describe_other_error(self):
        assert describe_error(RuntimeError("boom")) == "RuntimeError: boom"
