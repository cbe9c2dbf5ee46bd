"""Public display endpoints: always 200, degraded payloads on failure."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from mirror.models.system_state import SYSTEM_STATE_ID, SystemState


# ---------------------------------------------------------------------------
# /api/config-version
# ---------------------------------------------------------------------------


class TestConfigVersion:
    def test_default_when_no_row(self, anon_client: TestClient):
        response = anon_client.get("/api/config-version")
        assert response.status_code == 200
        assert response.json() == {"version": 0, "updatedAt": None}

    def test_returns_current_version(self, api_client: TestClient):
        api_client.post("/api/admin/mirror/refresh")
        data = api_client.get("/api/config-version").json()
        assert data["version"] == 1
        assert isinstance(data["updatedAt"], str)

    def test_refreshes_heartbeat(self, anon_client: TestClient, db):
        anon_client.get("/api/config-version")
        db.expire_all()
        state = db.get(SystemState, SYSTEM_STATE_ID)
        assert state is not None
        assert state.online is True
        assert state.last_ping is not None

    def test_store_failure_still_200(self, anon_client: TestClient):
        from mirror.db.session import get_db
        from mirror.main import app

        broken = MagicMock()
        broken.execute.side_effect = RuntimeError("database is locked")
        broken.get.side_effect = RuntimeError("database is locked")

        def override_get_db():
            yield broken

        app.dependency_overrides[get_db] = override_get_db
        response = anon_client.get("/api/config-version")
        assert response.status_code == 200
        assert response.json() == {"version": 0, "updatedAt": None}
        broken.rollback.assert_called_once()

    def test_heartbeat_failure_keeps_version(self, api_client: TestClient):
        api_client.post("/api/admin/mirror/refresh")
        api_client.post("/api/admin/mirror/refresh")
        with patch(
            "mirror.api.public.touch_heartbeat",
            side_effect=RuntimeError("database is locked"),
        ):
            response = api_client.get("/api/config-version")
        assert response.status_code == 200
        assert response.json()["version"] == 2


# ---------------------------------------------------------------------------
# /api/version and heartbeat
# ---------------------------------------------------------------------------


class TestVersion:
    def test_development_build_time(self, anon_client: TestClient):
        data = anon_client.get("/api/version").json()
        assert data["buildTime"] == "development"
        assert isinstance(data["timestamp"], int)
        assert data["timestamp"] > 1_600_000_000_000

    def test_heartbeat_records_gauges(self, anon_client: TestClient, db):
        gauges = {"uptime": 120, "memory_usage": 64, "cpu_usage": 0.25}
        with patch("mirror.api.public.collect_gauges", return_value=gauges):
            response = anon_client.post("/api/mirror/heartbeat")
        assert response.json() == {"success": True}
        db.expire_all()
        state = db.get(SystemState, SYSTEM_STATE_ID)
        assert state.uptime == 120
        assert state.memory_usage == 64
        assert state.cpu_usage == 0.25


# ---------------------------------------------------------------------------
# Weather settings
# ---------------------------------------------------------------------------


class TestWeatherSettings:
    def test_defaults(self, anon_client: TestClient):
        assert anon_client.get("/api/weather/settings").json() == {
            "latitude": "41.0793",
            "longitude": "-85.1394",
            "location": "Fort Wayne, IN",
            "units": "fahrenheit",
        }

    def test_round_trip_strips_prefix(self, api_client: TestClient):
        values = {
            "latitude": "41.88",
            "longitude": "-87.63",
            "location": "Chicago, IL",
            "units": "celsius",
        }
        assert api_client.put("/api/admin/weather", json=values).status_code == 200
        assert api_client.get("/api/weather/settings").json() == values
        assert api_client.get("/api/admin/weather").json() == values

    def test_store_failure_returns_defaults(self, anon_client: TestClient):
        with patch(
            "mirror.services.dashboard.get_weather_settings", side_effect=RuntimeError("boom")
        ):
            data = anon_client.get("/api/weather/settings").json()
        assert data["location"] == "Fort Wayne, IN"


# ---------------------------------------------------------------------------
# Domain payloads
# ---------------------------------------------------------------------------


class TestDomainEndpoints:
    def test_weather_falls_back_to_demo(self, anon_client: TestClient):
        with patch(
            "mirror.adapters.weather.fetch_json",
            new=AsyncMock(side_effect=RuntimeError("upstream down")),
        ):
            response = anon_client.get("/api/weather")
        assert response.status_code == 200
        data = response.json()
        assert data["isDemo"] is True
        assert data["location"] == "Fort Wayne, IN"

    def test_calendar_demo_without_feeds(self, anon_client: TestClient):
        data = anon_client.get("/api/calendar").json()
        assert data["isDemo"] is True
        assert data["todayEvents"]

    def test_commute_demo_without_key(self, anon_client: TestClient):
        data = anon_client.get("/api/commute").json()
        assert data["isDemo"] is True

    def test_news_demo_when_feeds_fail(self, anon_client: TestClient):
        with patch("mirror.adapters.news.fetch_text", new=AsyncMock(return_value=None)):
            data = anon_client.get("/api/news").json()
        assert data["isDemo"] is True
        assert data["articles"]

    def test_feast_day_uses_local_date(self, anon_client: TestClient):
        from datetime import datetime

        fake_now = datetime(2024, 12, 25, 9, 0)
        with patch("mirror.api.public.dashboard.local_now", return_value=fake_now):
            data = anon_client.get("/api/feast-day").json()
        assert data["feastDay"] == "The Nativity of the Lord"
        assert data["season"] == "Christmas"

    def test_now_playing_unconfigured(self, anon_client: TestClient):
        data = anon_client.get("/api/spotify/now-playing").json()
        assert data["isPlaying"] is False
        assert data["configured"] is False

    def test_summary_template_without_key(self, anon_client: TestClient):
        with patch(
            "mirror.adapters.weather.fetch_json",
            new=AsyncMock(side_effect=RuntimeError("upstream down")),
        ):
            data = anon_client.get("/api/summary").json()
        assert data["source"] == "template"
        assert data["summary"]
        assert data["greeting"].startswith("Good")


# ---------------------------------------------------------------------------
# Unreadable store
# ---------------------------------------------------------------------------


@pytest.fixture
def broken_client(anon_client: TestClient):
    from mirror.db.session import get_db
    from mirror.main import app

    broken = MagicMock()
    broken.query.side_effect = RuntimeError("database is locked")
    broken.get.side_effect = RuntimeError("database is locked")
    broken.execute.side_effect = RuntimeError("database is locked")

    def override_get_db():
        yield broken

    app.dependency_overrides[get_db] = override_get_db
    return anon_client


class TestUnreadableStore:
    def test_weather_uses_default_location(self, broken_client: TestClient):
        with patch(
            "mirror.adapters.weather.fetch_json",
            new=AsyncMock(side_effect=RuntimeError("upstream down")),
        ):
            response = broken_client.get("/api/weather")
        assert response.status_code == 200
        assert response.json()["isDemo"] is True
        assert response.json()["location"] == "Fort Wayne, IN"

    def test_weather_settings_defaults(self, broken_client: TestClient):
        response = broken_client.get("/api/weather/settings")
        assert response.status_code == 200
        assert response.json()["units"] == "fahrenheit"

    def test_calendar_demo(self, broken_client: TestClient):
        response = broken_client.get("/api/calendar")
        assert response.status_code == 200
        assert response.json()["isDemo"] is True

    def test_commute_demo(self, broken_client: TestClient):
        response = broken_client.get("/api/commute")
        assert response.status_code == 200
        assert response.json()["isDemo"] is True

    def test_summary_template(self, broken_client: TestClient):
        with patch(
            "mirror.adapters.weather.fetch_json",
            new=AsyncMock(side_effect=RuntimeError("upstream down")),
        ):
            response = broken_client.get("/api/summary")
        assert response.status_code == 200
        assert response.json()["source"] == "template"
