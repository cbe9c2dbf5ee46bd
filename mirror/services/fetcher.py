"""Outbound HTTP helpers for data adapters using httpx async client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mirror.config import get_settings

logger = logging.getLogger(__name__)

USER_AGENT = "MagicMirror/1.0"
MAX_REDIRECTS = 3


def build_client(timeout: float | None = None, **kwargs: Any) -> httpx.AsyncClient:
    """AsyncClient with the mirror User-Agent and a bounded timeout."""
    headers = {"User-Agent": USER_AGENT}
    headers.update(kwargs.pop("headers", {}) or {})
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else get_settings().adapter_timeout,
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        headers=headers,
        **kwargs,
    )


# Query parameters that carry credentials (TomTom sends its key as ?key=)
SECRET_PARAMS = ("key", "api_key", "apikey", "token", "access_token")


def redact_url(url: httpx.URL | str) -> str:
    """*url* with credential query parameters removed, safe to log."""
    url = httpx.URL(str(url))
    for name in SECRET_PARAMS:
        url = url.copy_remove_param(name)
    return str(url)


def describe_error(exc: BaseException) -> str:
    """Loggable summary of an outbound failure that never includes credentials.

    ``HTTPStatusError`` renders the full request URL, so it is reduced to the
    status code and the redacted URL.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code} from {redact_url(exc.request.url)}"
    return f"{type(exc).__name__}: {exc}"


async def fetch_json(url: str, params: dict | None = None, timeout: float | None = None) -> Any:
    """GET *url* and return decoded JSON. Raises httpx.HTTPError on failure."""
    async with build_client(timeout) as client:
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()


async def fetch_text(url: str, timeout: float | None = None) -> str | None:
    """Fetch a URL and return the body, or None on failure.

    Logs errors but never raises.
    """
    try:
        async with build_client(timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
    except httpx.HTTPStatusError as exc:
        logger.warning("HTTP %s for %s", exc.response.status_code, redact_url(url))
        return None
    except httpx.HTTPError as exc:
        logger.warning("HTTP error fetching %s: %s", redact_url(url), type(exc).__name__)
        return None
