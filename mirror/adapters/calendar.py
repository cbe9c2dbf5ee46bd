"""iCal calendar adapter: fetch feeds, parse VEVENTs, bucket by day.

Recurring events are taken at their first occurrence only (RRULE is not expanded).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import httpx
from icalendar import Calendar
from sqlalchemy.orm import Session

from mirror.config import get_settings
from mirror.models.calendar_feed import CalendarFeed
from mirror.services.fetcher import build_client, describe_error
from mirror.services.resilient import AdapterUnavailable

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 5
DEFAULT_DAYS_AHEAD = 7


class CalendarValidationError(Exception):
    """Feed URL failed validation. ``category`` is a user-facing failure class."""

    UNREACHABLE = "unreachable"
    NOT_FOUND = "not-found"
    UNAUTHORIZED = "unauthorized"
    INVALID_FORMAT = "invalid-format"

    def __init__(self, category: str, message: str) -> None:
        super().__init__(message)
        self.category = category
        self.message = message


@dataclass
class FeedSource:
    name: str
    url: str
    color: str | None = None


@dataclass
class CalendarEvent:
    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool
    calendar: str
    location: str | None = None
    description: str | None = None
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "allDay": self.all_day,
            "location": self.location,
            "description": self.description,
            "calendar": self.calendar,
            "color": self.color,
        }


@dataclass
class CalendarBuckets:
    today: list[CalendarEvent] = field(default_factory=list)
    tomorrow: list[CalendarEvent] = field(default_factory=list)
    upcoming: list[CalendarEvent] = field(default_factory=list)

    def to_dict(self, is_demo: bool = False) -> dict[str, Any]:
        return {
            "todayEvents": [e.to_dict() for e in self.today],
            "tomorrowEvents": [e.to_dict() for e in self.tomorrow],
            "upcomingEvents": [e.to_dict() for e in self.upcoming],
            "lastUpdated": datetime.now(UTC).isoformat(),
            "isDemo": is_demo,
        }


def normalize_url(url: str) -> str:
    """Apple and Google share links use webcal://; fetch them over https."""
    if url.lower().startswith("webcal://"):
        return "https://" + url[len("webcal://") :]
    return url


def load_feed_sources(db: Session) -> list[FeedSource]:
    """Enabled feeds from the store, else the environment fallback URLs."""
    feeds = (
        db.query(CalendarFeed)
        .filter(CalendarFeed.enabled == True)  # noqa: E712
        .order_by(CalendarFeed.created_at)
        .all()
    )
    if feeds:
        return [FeedSource(name=f.name, url=f.url, color=f.color) for f in feeds]
    settings = get_settings()
    sources = []
    if settings.calendar_url_primary:
        sources.append(FeedSource(name="primary", url=settings.calendar_url_primary))
    if settings.calendar_url_secondary:
        sources.append(FeedSource(name="secondary", url=settings.calendar_url_secondary))
    return sources


def _to_local(value: date | datetime, tz: ZoneInfo) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=tz)
        return value.astimezone(tz)
    return datetime.combine(value, time.min, tzinfo=tz)


def parse_events(ics_text: str, source: FeedSource, tz: ZoneInfo) -> list[CalendarEvent]:
    """Parse VEVENTs from iCal text. Raises ValueError on malformed input."""
    calendar = Calendar.from_ical(ics_text)
    events: list[CalendarEvent] = []
    for component in calendar.walk("VEVENT"):
        dtstart = component.get("dtstart")
        if dtstart is None:
            continue
        raw_start = dtstart.dt
        date_only = not isinstance(raw_start, datetime)
        start = _to_local(raw_start, tz)

        dtend = component.get("dtend")
        duration = component.get("duration")
        if dtend is not None:
            end = _to_local(dtend.dt, tz)
        elif duration is not None:
            end = start + duration.dt
        else:
            end = start + timedelta(days=1) if date_only else start

        all_day = date_only or (
            start.time() == time.min and end.time() == time.min and end > start
        )
        summary = str(component.get("summary") or "Untitled Event")
        uid = component.get("uid")
        events.append(
            CalendarEvent(
                id=str(uid) if uid else f"{int(start.timestamp() * 1000)}-{summary}",
                title=summary,
                start=start,
                end=end,
                all_day=all_day,
                calendar=source.name,
                location=str(component.get("location")) if component.get("location") else None,
                description=(
                    str(component.get("description")) if component.get("description") else None
                ),
                color=source.color,
            )
        )
    return events


def bucket_events(
    events: list[CalendarEvent],
    now: datetime,
    days_ahead: int = DEFAULT_DAYS_AHEAD,
) -> CalendarBuckets:
    """Drop ended events, sort by start, and split into today/tomorrow/upcoming.

    Today includes events that started earlier and are still running.
    Upcoming starts after tomorrow and within *days_ahead* days, at most five.
    """
    today_start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    tomorrow_start = today_start + timedelta(days=1)
    tomorrow_end = tomorrow_start + timedelta(days=1)
    horizon = today_start + timedelta(days=days_ahead + 1)

    live = sorted((e for e in events if e.end > now), key=lambda e: e.start)
    buckets = CalendarBuckets()
    for event in live:
        if event.start < tomorrow_start:
            buckets.today.append(event)
        elif event.start < tomorrow_end:
            buckets.tomorrow.append(event)
        elif event.start < horizon and len(buckets.upcoming) < UPCOMING_LIMIT:
            buckets.upcoming.append(event)
    return buckets


async def _fetch_feed(
    client: httpx.AsyncClient, source: FeedSource, tz: ZoneInfo
) -> list[CalendarEvent]:
    response = await client.get(normalize_url(source.url))
    response.raise_for_status()
    return parse_events(response.text, source, tz)


async def fetch_calendar(
    sources: list[FeedSource],
    days_ahead: int = DEFAULT_DAYS_AHEAD,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Fetch every source concurrently and bucket the merged events.

    A failing feed is logged and skipped. Raises AdapterUnavailable when
    there are no sources or every feed failed.
    """
    if not sources:
        raise AdapterUnavailable("no calendar feeds configured")
    tz = ZoneInfo(get_settings().timezone)
    now = now or datetime.now(tz)

    async with build_client() as client:
        results = await asyncio.gather(
            *(_fetch_feed(client, source, tz) for source in sources),
            return_exceptions=True,
        )

    events: list[CalendarEvent] = []
    failures = 0
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            failures += 1
            logger.warning("Calendar feed %s failed: %s", source.name, describe_error(result))
            continue
        logger.info("Calendar feed %s: %d events", source.name, len(result))
        events.extend(result)
    if failures == len(sources):
        raise AdapterUnavailable("all calendar feeds failed")
    return bucket_events(events, now, days_ahead).to_dict()


def demo_calendar(now: datetime | None = None) -> dict[str, Any]:
    """Canned events for a display with no working feeds."""
    tz = ZoneInfo(get_settings().timezone)
    now = now or datetime.now(tz)
    today = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)

    def at(days: int, hours: float) -> datetime:
        return today + timedelta(days=days, hours=hours)

    def event(id_, title, start, end, calendar, location=None, all_day=False):
        return CalendarEvent(
            id=id_,
            title=title,
            start=start,
            end=end,
            all_day=all_day,
            calendar=calendar,
            location=location,
        )

    buckets = CalendarBuckets(
        today=[
            event("1", "Morning Standup", at(0, 9), at(0, 9.5), "primary"),
            event("2", "Lunch with Sarah", at(0, 12), at(0, 13), "secondary", "Olive Garden"),
            event("3", "Kids Soccer Practice", at(0, 17), at(0, 18), "primary", "Shoaff Park"),
        ],
        tomorrow=[
            event("4", "Team Meeting", at(1, 10), at(1, 11), "primary"),
            event("5", "Date Night", at(1, 19), at(1, 22), "secondary"),
        ],
        upcoming=[
            event("6", "Dentist Appointment", at(3, 0), at(3, 0), "primary"),
            event("7", "Family Dinner", at(5, 0), at(6, 0), "secondary", all_day=True),
        ],
    )
    return buckets.to_dict(is_demo=True)


# ----------------------------------------------------------------------
# Validation (admin, before a feed is saved)
# ----------------------------------------------------------------------


async def validate_feed_url(url: str, timeout: float | None = None) -> int:
    """Fetch and parse *url*; return the number of VEVENTs.

    Raises CalendarValidationError with a category the admin UI can act on.
    """
    try:
        async with build_client(timeout) as client:
            response = await client.get(normalize_url(url))
    except httpx.TimeoutException as exc:
        raise CalendarValidationError(
            CalendarValidationError.UNREACHABLE, "Timed out connecting to the calendar server"
        ) from exc
    except httpx.HTTPError as exc:
        raise CalendarValidationError(
            CalendarValidationError.UNREACHABLE, f"Could not reach the calendar server: {exc}"
        ) from exc

    if response.status_code == 404:
        raise CalendarValidationError(
            CalendarValidationError.NOT_FOUND, "Calendar not found at this URL"
        )
    if response.status_code in (401, 403):
        raise CalendarValidationError(
            CalendarValidationError.UNAUTHORIZED,
            "Access denied. Make sure the calendar is shared publicly",
        )
    if response.status_code >= 400:
        raise CalendarValidationError(
            CalendarValidationError.UNREACHABLE,
            f"Calendar server returned HTTP {response.status_code}",
        )

    try:
        calendar = Calendar.from_ical(response.text)
    except (ValueError, IndexError, KeyError) as exc:
        raise CalendarValidationError(
            CalendarValidationError.INVALID_FORMAT, "URL did not return a valid iCal feed"
        ) from exc
    if calendar.name != "VCALENDAR":
        raise CalendarValidationError(
            CalendarValidationError.INVALID_FORMAT, "URL did not return a valid iCal feed"
        )
    return len(calendar.walk("VEVENT"))
