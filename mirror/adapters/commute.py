"""TomTom routing adapter for traffic-aware commute times."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from mirror.config import get_settings
from mirror.models.commute_route import CommuteRoute
from mirror.services.fetcher import build_client, describe_error
from mirror.services.resilient import AdapterUnavailable

logger = logging.getLogger(__name__)

TOMTOM_ROUTING_URL = "https://api.tomtom.com/routing/1/calculateRoute"
METERS_PER_MILE = 1609.344


@dataclass
class RouteRequest:
    name: str
    origin_lat: float
    origin_lon: float
    dest_lat: float
    dest_lon: float
    arrival_time: str  # HH:MM


def js_weekday(day: datetime) -> int:
    """Day of week with 0=Sunday, 6=Saturday."""
    return (day.weekday() + 1) % 7


def load_active_routes(db: Session, now: datetime) -> list[RouteRequest]:
    """Enabled routes whose days_active include today."""
    today = js_weekday(now)
    rows = (
        db.query(CommuteRoute)
        .filter(CommuteRoute.enabled == True)  # noqa: E712
        .order_by(CommuteRoute.created_at)
        .all()
    )
    return [
        RouteRequest(
            name=row.name,
            origin_lat=row.origin_lat,
            origin_lon=row.origin_lon,
            dest_lat=row.dest_lat,
            dest_lon=row.dest_lon,
            arrival_time=row.arrival_time,
        )
        for row in rows
        if today in row.active_days()
    ]


def traffic_status(delay_minutes: float, total_minutes: float) -> str:
    """light under 10% delay, moderate under 25%, heavy otherwise."""
    if total_minutes <= 0:
        return "light"
    pct = delay_minutes / total_minutes * 100
    if pct < 10:
        return "light"
    if pct < 25:
        return "moderate"
    return "heavy"


def departure_time(arrival_time: str, duration_minutes: float, now: datetime) -> datetime:
    hours, minutes = (int(part) for part in arrival_time.split(":"))
    target = datetime.combine(now.date(), time(hours, minutes), tzinfo=now.tzinfo)
    return target - timedelta(minutes=duration_minutes)


def build_route_url(route: RouteRequest) -> str:
    return (
        f"{TOMTOM_ROUTING_URL}/{route.origin_lat},{route.origin_lon}:"
        f"{route.dest_lat},{route.dest_lon}/json"
    )


def parse_route(data: dict[str, Any], route: RouteRequest, now: datetime) -> dict[str, Any]:
    """Normalize a TomTom routing response. Raises KeyError/IndexError if malformed."""
    summary = data["routes"][0]["summary"]
    duration = summary["travelTimeInSeconds"] / 60
    delay = summary.get("trafficDelayInSeconds", 0) / 60
    return {
        "name": route.name,
        "durationMinutes": round(duration),
        "distanceMiles": round(summary["lengthInMeters"] / METERS_PER_MILE, 1),
        "trafficDelayMinutes": round(delay),
        "trafficStatus": traffic_status(delay, duration),
        "suggestedDepartureTime": departure_time(route.arrival_time, duration, now).isoformat(),
        "targetArrivalTime": route.arrival_time,
    }


async def fetch_commutes(
    routes: list[RouteRequest],
    api_key: str | None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Query TomTom for each route concurrently.

    Failed routes are skipped. Raises AdapterUnavailable when there is no key,
    no route, or no route succeeded.
    """
    if not api_key:
        raise AdapterUnavailable("TOMTOM_API_KEY not configured")
    if not routes:
        raise AdapterUnavailable("no commute routes active today")
    now = now or datetime.now(ZoneInfo(get_settings().timezone))
    params = {"key": api_key, "traffic": "true", "travelMode": "car", "routeType": "fastest"}

    async def one(client, route: RouteRequest) -> dict[str, Any]:
        response = await client.get(build_route_url(route), params=params)
        response.raise_for_status()
        return parse_route(response.json(), route, now)

    async with build_client() as client:
        results = await asyncio.gather(*(one(client, r) for r in routes), return_exceptions=True)

    commutes = []
    for route, result in zip(routes, results):
        if isinstance(result, BaseException):
            logger.warning("TomTom request failed for %s: %s", route.name, describe_error(result))
            continue
        commutes.append(result)
    if not commutes:
        raise AdapterUnavailable("all TomTom requests failed")
    return {"commutes": commutes, "lastUpdated": datetime.now(UTC).isoformat(), "isDemo": False}


def demo_commutes(now: datetime | None = None) -> dict[str, Any]:
    now = now or datetime.now(ZoneInfo(get_settings().timezone))

    def at(hour: int, minute: int) -> str:
        return datetime.combine(now.date(), time(hour, minute), tzinfo=now.tzinfo).isoformat()

    return {
        "commutes": [
            {
                "name": "Jack",
                "durationMinutes": 24,
                "distanceMiles": 12.3,
                "trafficDelayMinutes": 3,
                "trafficStatus": "light",
                "suggestedDepartureTime": at(8, 6),
                "targetArrivalTime": "08:30",
            },
            {
                "name": "Lauren",
                "durationMinutes": 18,
                "distanceMiles": 8.7,
                "trafficDelayMinutes": 5,
                "trafficStatus": "moderate",
                "suggestedDepartureTime": at(7, 42),
                "targetArrivalTime": "08:00",
            },
        ],
        "lastUpdated": datetime.now(UTC).isoformat(),
        "isDemo": True,
    }
