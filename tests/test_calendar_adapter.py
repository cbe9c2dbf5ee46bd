"""iCal adapter: parsing, bucketing, fetch and feed validation."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from mirror.adapters.calendar import (
    UPCOMING_LIMIT,
    CalendarEvent,
    CalendarValidationError,
    FeedSource,
    bucket_events,
    demo_calendar,
    fetch_calendar,
    load_feed_sources,
    normalize_url,
    parse_events,
    validate_feed_url,
)
from mirror.models.calendar_feed import CalendarFeed
from mirror.services.resilient import AdapterUnavailable

TZ = ZoneInfo("America/Indiana/Indianapolis")
NOW = datetime(2024, 6, 3, 8, 0, tzinfo=TZ)  # Monday, EDT (UTC-4)

ICS = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Mirror Tests//EN",
        "BEGIN:VEVENT",
        "UID:ended@example.com",
        "DTSTART:20240603T100000Z",
        "DTEND:20240603T110000Z",
        "SUMMARY:Early Gym",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:standup@example.com",
        "DTSTART:20240603T140000Z",
        "DTEND:20240603T143000Z",
        "SUMMARY:Standup",
        "LOCATION:Office",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:holiday@example.com",
        "DTSTART;VALUE=DATE:20240604",
        "DTEND;VALUE=DATE:20240605",
        "SUMMARY:Holiday",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:trip@example.com",
        "DTSTART:20240607T000000",
        "DTEND:20240608T000000",
        "SUMMARY:Road Trip",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:far@example.com",
        "DTSTART;VALUE=DATE:20240620",
        "SUMMARY:Far Away",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
)

SOURCE = FeedSource(name="Family", url="https://example.com/family.ics", color="#00f")


def _event(title: str, start: datetime, end: datetime) -> CalendarEvent:
    return CalendarEvent(
        id=title, title=title, start=start, end=end, all_day=False, calendar="Family"
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseEvents:
    def test_parses_vevents_in_local_time(self):
        events = {e.title: e for e in parse_events(ICS, SOURCE, TZ)}
        standup = events["Standup"]
        assert standup.start == datetime(2024, 6, 3, 10, 0, tzinfo=TZ)
        assert standup.location == "Office"
        assert standup.color == "#00f"
        assert standup.all_day is False

    def test_date_values_are_all_day(self):
        events = {e.title: e for e in parse_events(ICS, SOURCE, TZ)}
        assert events["Holiday"].all_day is True

    def test_midnight_to_midnight_is_all_day(self):
        events = {e.title: e for e in parse_events(ICS, SOURCE, TZ)}
        assert events["Road Trip"].all_day is True

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_events("<html>not a calendar</html>", SOURCE, TZ)


class TestBucketEvents:
    def test_buckets_sample_feed(self):
        buckets = bucket_events(parse_events(ICS, SOURCE, TZ), NOW, days_ahead=7)
        assert [e.title for e in buckets.today] == ["Standup"]
        assert [e.title for e in buckets.tomorrow] == ["Holiday"]
        assert [e.title for e in buckets.upcoming] == ["Road Trip"]

    def test_running_event_counts_as_today(self):
        running = _event(
            "Running",
            datetime(2024, 6, 2, 20, 0, tzinfo=TZ),
            datetime(2024, 6, 3, 9, 0, tzinfo=TZ),
        )
        assert bucket_events([running], NOW).today == [running]

    def test_upcoming_is_capped(self):
        events = [
            _event(
                f"E{i}",
                datetime(2024, 6, 5, 9 + i, tzinfo=TZ),
                datetime(2024, 6, 5, 10 + i, tzinfo=TZ),
            )
            for i in range(8)
        ]
        upcoming = bucket_events(events, NOW).upcoming
        assert len(upcoming) == UPCOMING_LIMIT
        assert [e.title for e in upcoming] == ["E0", "E1", "E2", "E3", "E4"]

    def test_days_ahead_limits_horizon(self):
        later = _event(
            "Later", datetime(2024, 6, 6, 9, tzinfo=TZ), datetime(2024, 6, 6, 10, tzinfo=TZ)
        )
        assert bucket_events([later], NOW, days_ahead=2).upcoming == []
        assert bucket_events([later], NOW, days_ahead=3).upcoming == [later]


# ---------------------------------------------------------------------------
# Sources and fetch
# ---------------------------------------------------------------------------


class TestSources:
    def test_normalize_webcal(self):
        assert normalize_url("webcal://p01.icloud.com/x.ics") == "https://p01.icloud.com/x.ics"
        assert normalize_url("https://example.com/a.ics") == "https://example.com/a.ics"

    def test_enabled_feeds_from_store(self, db):
        db.add_all(
            [
                CalendarFeed(name="On", url="https://a/1.ics"),
                CalendarFeed(name="Off", url="https://a/2.ics", enabled=False),
            ]
        )
        db.commit()
        assert [s.name for s in load_feed_sources(db)] == ["On"]

    def test_env_fallback_when_store_empty(self, db):
        settings = MagicMock(
            calendar_url_primary="https://a/primary.ics", calendar_url_secondary=None
        )
        with patch("mirror.adapters.calendar.get_settings", return_value=settings):
            sources = load_feed_sources(db)
        assert [(s.name, s.url) for s in sources] == [("primary", "https://a/primary.ics")]


def _client_returning(responses: dict[str, object]):
    client = AsyncMock()

    async def get(url, **kwargs):
        result = responses[url]
        if isinstance(result, Exception):
            raise result
        return result

    client.get.side_effect = get
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


def _ics_response(url: str, text: str = ICS, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=text, request=httpx.Request("GET", url))


class TestFetchCalendar:
    async def test_no_sources_is_unavailable(self):
        with pytest.raises(AdapterUnavailable):
            await fetch_calendar([], now=NOW)

    async def test_failed_feed_is_skipped(self):
        good = FeedSource("Good", "https://a/good.ics")
        bad = FeedSource("Bad", "https://a/bad.ics")
        client = _client_returning(
            {
                "https://a/good.ics": _ics_response("https://a/good.ics"),
                "https://a/bad.ics": httpx.ConnectError("refused"),
            }
        )
        with patch("mirror.adapters.calendar.build_client", return_value=client):
            data = await fetch_calendar([good, bad], now=NOW)
        assert data["isDemo"] is False
        assert [e["title"] for e in data["todayEvents"]] == ["Standup"]
        assert data["todayEvents"][0]["calendar"] == "Good"

    async def test_all_feeds_failing_is_unavailable(self):
        client = _client_returning(
            {"https://a/bad.ics": _ics_response("https://a/bad.ics", status=500)}
        )
        with patch("mirror.adapters.calendar.build_client", return_value=client):
            with pytest.raises(AdapterUnavailable):
                await fetch_calendar([FeedSource("Bad", "https://a/bad.ics")], now=NOW)

    def test_demo_calendar(self):
        data = demo_calendar(NOW)
        assert data["isDemo"] is True
        assert len(data["todayEvents"]) == 3
        assert data["upcomingEvents"][-1]["allDay"] is True


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidateFeedUrl:
    URL = "https://example.com/cal.ics"

    async def _validate(self, result):
        client = _client_returning({self.URL: result})
        with patch("mirror.adapters.calendar.build_client", return_value=client):
            return await validate_feed_url(self.URL)

    async def test_counts_events(self):
        assert await self._validate(_ics_response(self.URL)) == 5

    @pytest.mark.parametrize(
        "status,category",
        [
            (404, CalendarValidationError.NOT_FOUND),
            (401, CalendarValidationError.UNAUTHORIZED),
            (403, CalendarValidationError.UNAUTHORIZED),
            (500, CalendarValidationError.UNREACHABLE),
        ],
    )
    async def test_status_categories(self, status, category):
        with pytest.raises(CalendarValidationError) as exc_info:
            await self._validate(_ics_response(self.URL, "", status))
        assert exc_info.value.category == category

    async def test_connection_error_is_unreachable(self):
        with pytest.raises(CalendarValidationError) as exc_info:
            await self._validate(httpx.ConnectError("refused"))
        assert exc_info.value.category == CalendarValidationError.UNREACHABLE

    async def test_html_is_invalid_format(self):
        with pytest.raises(CalendarValidationError) as exc_info:
            await self._validate(_ics_response(self.URL, "<html><body>Login</body></html>"))
        assert exc_info.value.category == CalendarValidationError.INVALID_FORMAT
