"""Display data assembly: each domain read wrapped in resilient_fetch.

Both the public read endpoints and the AI briefing use these, so the
briefing sees exactly what the widgets show.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from mirror.adapters import calendar as calendar_adapter
from mirror.adapters import commute as commute_adapter
from mirror.adapters import news as news_adapter
from mirror.adapters import spotify as spotify_adapter
from mirror.adapters import weather as weather_adapter
from mirror.config import get_settings
from mirror.services.resilient import resilient_fetch
from mirror.services.settings_service import (
    WEATHER_DEFAULTS,
    get_category_settings,
    get_weather_settings,
)

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now(ZoneInfo(get_settings().timezone))


def read_weather_settings(db: Session) -> dict[str, str]:
    """Stored weather settings, or the defaults when the store is unreadable."""
    try:
        return get_weather_settings(db)
    except Exception:
        db.rollback()
        logger.exception("Failed to read weather settings, using defaults")
        return dict(WEATHER_DEFAULTS)


def _days_ahead(db: Session) -> int:
    try:
        return int(get_category_settings(db, "calendar").get("daysAhead"))
    except (TypeError, ValueError):
        return calendar_adapter.DEFAULT_DAYS_AHEAD


async def load_weather(db: Session) -> dict[str, Any]:
    settings = get_settings()
    weather = read_weather_settings(db)
    return await resilient_fetch(
        "weather",
        lambda: weather_adapter.fetch_weather(
            weather["latitude"],
            weather["longitude"],
            weather["location"],
            weather["units"],
            settings.timezone,
        ),
        lambda: weather_adapter.demo_weather(weather["location"], weather["units"]),
        settings.adapter_timeout,
    )


async def load_calendar(db: Session) -> dict[str, Any]:
    settings = get_settings()

    # Store reads run inside the bounded fetch and fall back with it
    async def live() -> dict[str, Any]:
        sources = calendar_adapter.load_feed_sources(db)
        return await calendar_adapter.fetch_calendar(sources, _days_ahead(db))

    return await resilient_fetch(
        "calendar",
        live,
        calendar_adapter.demo_calendar,
        settings.adapter_timeout * 2,
    )


async def load_commute(db: Session) -> dict[str, Any]:
    settings = get_settings()
    now = local_now()

    async def live() -> dict[str, Any]:
        routes = commute_adapter.load_active_routes(db, now)
        return await commute_adapter.fetch_commutes(routes, settings.tomtom_api_key, now)

    return await resilient_fetch(
        "commute",
        live,
        lambda: commute_adapter.demo_commutes(now),
        settings.adapter_timeout,
    )


async def load_news() -> dict[str, Any]:
    return await resilient_fetch(
        "news",
        news_adapter.fetch_news,
        news_adapter.demo_news,
        get_settings().adapter_timeout * 2,
    )


async def load_now_playing() -> dict[str, Any]:
    settings = get_settings()
    if not spotify_adapter.is_configured(settings):
        return dict(spotify_adapter.NOT_CONFIGURED)
    return await resilient_fetch(
        "spotify",
        spotify_adapter.fetch_now_playing,
        {"isPlaying": False, "configured": True, "error": "Request failed"},
        settings.adapter_timeout,
    )
