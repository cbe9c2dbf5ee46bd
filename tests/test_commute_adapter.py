"""TomTom commute adapter."""

from __future__ import annotations

import logging
from datetime import datetime
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from mirror.adapters.commute import (
    RouteRequest,
    departure_time,
    fetch_commutes,
    js_weekday,
    load_active_routes,
    parse_route,
    traffic_status,
)
from mirror.models.commute_route import CommuteRoute
from mirror.services.resilient import AdapterUnavailable
from tests.test_constants import TEST_TOMTOM_API_KEY

TZ = ZoneInfo("America/Indiana/Indianapolis")
MONDAY = datetime(2024, 6, 3, 6, 30, tzinfo=TZ)
SATURDAY = datetime(2024, 6, 8, 6, 30, tzinfo=TZ)

ROUTE = RouteRequest("Work", 41.08, -85.14, 41.13, -85.13, "08:30")

TOMTOM_RESPONSE = {
    "routes": [
        {
            "summary": {
                "lengthInMeters": 19794,
                "travelTimeInSeconds": 1800,
                "trafficDelayInSeconds": 240,
            }
        }
    ]
}


class TestHelpers:
    def test_js_weekday(self):
        assert js_weekday(MONDAY) == 1
        assert js_weekday(SATURDAY) == 6
        assert js_weekday(datetime(2024, 6, 9, tzinfo=TZ)) == 0

    @pytest.mark.parametrize(
        "delay,total,expected",
        [
            (2, 30, "light"),
            (3, 30, "moderate"),
            (7, 30, "moderate"),
            (8, 30, "heavy"),
            (0, 0, "light"),
        ],
    )
    def test_traffic_status(self, delay, total, expected):
        assert traffic_status(delay, total) == expected

    def test_departure_time(self):
        assert departure_time("08:30", 30, MONDAY) == datetime(2024, 6, 3, 8, 0, tzinfo=TZ)

    def test_parse_route(self):
        data = parse_route(TOMTOM_RESPONSE, ROUTE, MONDAY)
        assert data == {
            "name": "Work",
            "durationMinutes": 30,
            "distanceMiles": 12.3,
            "trafficDelayMinutes": 4,
            "trafficStatus": "moderate",
            "suggestedDepartureTime": "2024-06-03T08:00:00-04:00",
            "targetArrivalTime": "08:30",
        }


class TestLoadActiveRoutes:
    def test_filters_by_day_and_enabled(self, db):
        db.add_all(
            [
                CommuteRoute(
                    name="Weekday", origin_lat=1, origin_lon=1, dest_lat=2, dest_lon=2,
                    arrival_time="08:00",
                ),
                CommuteRoute(
                    name="Saturday", origin_lat=1, origin_lon=1, dest_lat=2, dest_lon=2,
                    arrival_time="09:00", days_active="6",
                ),
                CommuteRoute(
                    name="Disabled", origin_lat=1, origin_lon=1, dest_lat=2, dest_lon=2,
                    arrival_time="08:00", enabled=False,
                ),
            ]
        )
        db.commit()
        assert [r.name for r in load_active_routes(db, MONDAY)] == ["Weekday"]
        assert [r.name for r in load_active_routes(db, SATURDAY)] == ["Saturday"]


def _client(get_side_effect):
    client = AsyncMock()
    client.get.side_effect = get_side_effect
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestFetchCommutes:
    async def test_requires_key(self):
        with pytest.raises(AdapterUnavailable):
            await fetch_commutes([ROUTE], None, MONDAY)

    async def test_requires_routes(self):
        with pytest.raises(AdapterUnavailable):
            await fetch_commutes([], TEST_TOMTOM_API_KEY, MONDAY)

    async def test_queries_tomtom_with_traffic(self):
        url = "https://api.tomtom.com/routing/1/calculateRoute/41.08,-85.14:41.13,-85.13/json"
        response = httpx.Response(200, json=TOMTOM_RESPONSE, request=httpx.Request("GET", url))
        client = _client([response])
        with patch("mirror.adapters.commute.build_client", return_value=client):
            data = await fetch_commutes([ROUTE], TEST_TOMTOM_API_KEY, MONDAY)
        assert data["isDemo"] is False
        assert data["commutes"][0]["durationMinutes"] == 30
        args, kwargs = client.get.call_args
        assert args[0] == url
        assert kwargs["params"]["traffic"] == "true"
        assert kwargs["params"]["key"] == TEST_TOMTOM_API_KEY

    async def test_all_failed_is_unavailable(self):
        client = _client(httpx.ConnectError("refused"))
        with patch("mirror.adapters.commute.build_client", return_value=client):
            with pytest.raises(AdapterUnavailable):
                await fetch_commutes([ROUTE], TEST_TOMTOM_API_KEY, MONDAY)

    async def test_rejected_key_is_not_logged(self, caplog):
        url = (
            "https://api.tomtom.com/routing/1/calculateRoute/41.08,-85.14:41.13,-85.13/json"
            "?key=SECRET-TOMTOM-KEY&traffic=true"
        )
        client = _client([httpx.Response(403, request=httpx.Request("GET", url))])
        with patch("mirror.adapters.commute.build_client", return_value=client):
            with caplog.at_level(logging.WARNING), pytest.raises(AdapterUnavailable):
                await fetch_commutes([ROUTE], "SECRET-TOMTOM-KEY", MONDAY)
        assert "HTTP 403" in caplog.text
        assert "SECRET-TOMTOM-KEY" not in caplog.text
