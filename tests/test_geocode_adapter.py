"""TomTom geocode search."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mirror.adapters.geocode import parse_results, search_locations, validate_query
from mirror.services.resilient import AdapterUnavailable, resilient_fetch
from tests.test_constants import TEST_TOMTOM_API_KEY

SECRET_KEY = "SECRET-TOMTOM-KEY"


class TestValidateQuery:
    @pytest.mark.parametrize(
        "query,message",
        [
            (None, 'Query parameter "q" is required'),
            ("   ", 'Query parameter "q" is required'),
            ("a", "Query must be at least 2 characters"),
            ("x" * 101, "Query must not exceed 100 characters"),
        ],
    )
    def test_rejects(self, query, message):
        with pytest.raises(ValueError, match=message):
            validate_query(query)

    def test_trims(self):
        assert validate_query("  Chicago ") == "Chicago"


class TestSearch:
    def test_parse_results_skips_incomplete(self):
        data = {
            "results": [
                {
                    "address": {"freeformAddress": "Chicago, IL"},
                    "position": {"lat": 41.88, "lon": -87.63},
                },
                {"address": {}, "position": {"lat": 1, "lon": 2}},
            ]
        }
        assert parse_results(data) == [{"address": "Chicago, IL", "lat": 41.88, "lon": -87.63}]

    async def test_requires_key(self):
        with pytest.raises(AdapterUnavailable):
            await search_locations("Chicago", None)

    async def test_calls_tomtom_with_typeahead(self):
        with patch(
            "mirror.adapters.geocode.fetch_json", new=AsyncMock(return_value={"results": []})
        ) as mock_fetch:
            result = await search_locations("Fort Wayne", TEST_TOMTOM_API_KEY)
        assert result == {"results": []}
        url = mock_fetch.await_args.args[0]
        assert url.endswith("/Fort%20Wayne.json")
        params = mock_fetch.await_args.kwargs["params"]
        assert params["typeahead"] == "true"
        assert params["limit"] == "5"


class TestRejectedKey:
    async def test_key_never_reaches_the_log(self, caplog):
        url = f"https://api.tomtom.com/search/2/search/Chicago.json?key={SECRET_KEY}&limit=5"
        response = httpx.Response(403, request=httpx.Request("GET", url))
        with patch("mirror.services.fetcher.httpx.AsyncClient") as MockClient:
            instance = AsyncMock()
            instance.get.return_value = response
            instance.__aenter__ = AsyncMock(return_value=instance)
            instance.__aexit__ = AsyncMock(return_value=False)
            MockClient.return_value = instance
            with caplog.at_level(logging.WARNING):
                result = await resilient_fetch(
                    "geocode",
                    lambda: search_locations("Chicago", SECRET_KEY),
                    {"results": []},
                    5,
                )
        assert result == {"results": []}
        assert "HTTP 403" in caplog.text
        assert SECRET_KEY not in caplog.text
