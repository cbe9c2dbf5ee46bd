"""TomTom fuzzy search for the admin location picker."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from mirror.services.fetcher import fetch_json
from mirror.services.resilient import AdapterUnavailable

logger = logging.getLogger(__name__)

TOMTOM_SEARCH_URL = "https://api.tomtom.com/search/2/search"
MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100
RESULT_LIMIT = 5


def validate_query(query: str | None) -> str:
    """Return the trimmed query or raise ValueError with a user-facing message."""
    if query is None or not query.strip():
        raise ValueError('Query parameter "q" is required')
    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise ValueError(f"Query must be at least {MIN_QUERY_LENGTH} characters")
    if len(query) > MAX_QUERY_LENGTH:
        raise ValueError(f"Query must not exceed {MAX_QUERY_LENGTH} characters")
    return query


def parse_results(data: dict[str, Any]) -> list[dict[str, Any]]:
    results = []
    for item in data.get("results") or []:
        position = item.get("position") or {}
        address = (item.get("address") or {}).get("freeformAddress")
        if address is None or "lat" not in position or "lon" not in position:
            continue
        results.append({"address": address, "lat": position["lat"], "lon": position["lon"]})
    return results


async def search_locations(query: str, api_key: str | None) -> dict[str, Any]:
    """Search TomTom. Raises AdapterUnavailable without a key, httpx errors on failure."""
    if not api_key:
        raise AdapterUnavailable("TOMTOM_API_KEY not configured")
    data = await fetch_json(
        f"{TOMTOM_SEARCH_URL}/{quote(query, safe='')}.json",
        params={
            "key": api_key,
            "typeahead": "true",
            "limit": str(RESULT_LIMIT),
            "language": "en-US",
        },
    )
    return {"results": parse_results(data)}
