"""Daily briefing: LLM-written when possible, template otherwise."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from mirror.adapters.weather import describe_weather
from mirror.config import Settings, get_settings
from mirror.llm import get_llm_provider
from mirror.prompts import render_prompt
from mirror.services import dashboard
from mirror.services.resilient import resilient_fetch
from mirror.services.settings_service import (
    AI_BEHAVIOR_DEFAULTS,
    AI_SUMMARY_TOGGLES,
    WEATHER_DEFAULTS,
    get_ai_behavior_settings,
    get_ai_summary_settings,
    get_weather_settings,
)

logger = logging.getLogger(__name__)

BUSY_DAY_EVENTS = 4
MAX_CONTEXT_EVENTS = 5

LENGTH_RULES = {
    "low": "Write exactly one sentence.",
    "medium": "Write two or three sentences.",
    "high": "Write four or five sentences.",
}
TONE_RULES = {
    "formal": "polished and respectful",
    "casual": "warm and conversational, like a friend in the kitchen",
}
HUMOR_RULES = {
    "none": "no jokes",
    "subtle": "a light touch of wit is welcome, at most once",
    "playful": "be playful and a little funny",
}


def time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def greeting(hour: int) -> str:
    return f"Good {time_of_day(hour)}"


@dataclass
class BriefingContext:
    now: datetime
    units: str = "fahrenheit"
    location: str | None = None
    weather: dict[str, Any] | None = None
    calendar: dict[str, Any] | None = None
    commute: dict[str, Any] | None = None

    @property
    def degree(self) -> str:
        return "°C" if self.units == "celsius" else "°F"

    @property
    def today_events(self) -> list[dict[str, Any]]:
        return (self.calendar or {}).get("todayEvents") or []


def _live(payload: dict[str, Any] | None) -> dict[str, Any] | None:
    """Demo payloads are placeholders and must not reach the briefing."""
    if not payload or payload.get("isDemo"):
        return None
    return payload


# ----------------------------------------------------------------------
# Template fallback
# ----------------------------------------------------------------------


def contextual_tip(
    current: dict[str, Any], event_count: int, units: str = "fahrenheit"
) -> str | None:
    """First applicable tip for the current conditions, or None."""
    code = current.get("weatherCode", 0)
    temperature = current.get("temperature", 50)
    if units == "celsius":
        temperature = temperature * 9 / 5 + 32
    if 61 <= code <= 67:
        return "Don't forget an umbrella if you're heading out."
    if 71 <= code <= 77:
        return "Roads may be slick, so drive carefully."
    if temperature < 32:
        return "Bundle up, it's freezing out there."
    if temperature > 85:
        return "Stay hydrated in this heat."
    if event_count >= BUSY_DAY_EVENTS:
        return "Busy day ahead. Pace yourself."
    if event_count == 0 and code <= 2:
        return "Perfect day to get outside and enjoy the weather."
    return None


def template_summary(ctx: BriefingContext) -> tuple[str, str | None]:
    """Deterministic summary and tip from whatever context is available."""
    parts: list[str] = []
    tip = None
    current = (ctx.weather or {}).get("current")
    if current:
        conditions = describe_weather(current.get("weatherCode")).lower()
        parts.append(f"It's {current['temperature']}{ctx.degree} and {conditions} outside.")
        daily = (ctx.weather or {}).get("daily") or []
        precip = daily[0].get("precipitationProbability") if daily else None
        if precip is not None and precip > 50:
            parts.append(f"There's a {precip}% chance of precipitation today.")

    events = ctx.today_events
    if len(events) == 1:
        parts.append(f"You have 1 event on your calendar today: {events[0]['title']}.")
    elif events:
        parts.append(f"You have {len(events)} events on your calendar today.")
    else:
        parts.append("Your calendar is clear today.")

    if current:
        tip = contextual_tip(current, len(events), ctx.units)
    return " ".join(parts), tip


# ----------------------------------------------------------------------
# LLM prompt
# ----------------------------------------------------------------------


def _format_time(value: str, ctx: BriefingContext) -> str:
    moment = datetime.fromisoformat(value).astimezone(ctx.now.tzinfo)
    return moment.strftime("%I:%M %p").lstrip("0")


def build_context_lines(ctx: BriefingContext, toggles: dict[str, bool]) -> list[str]:
    """One line per fact the admin has allowed into the briefing."""
    lines: list[str] = []
    if toggles["includeDayDate"]:
        lines.append(f"Today is {ctx.now.strftime('%A, %B')} {ctx.now.day}.")
    if toggles["includeWeekendDetection"] and ctx.now.weekday() >= 5:
        lines.append("It is the weekend.")

    current = (ctx.weather or {}).get("current")
    if current:
        weather = (
            f"Weather: {current['temperature']}{ctx.degree}, "
            f"{describe_weather(current.get('weatherCode')).lower()}"
        )
        if toggles["includeWeatherLocation"] and ctx.location:
            weather += f" in {ctx.location}"
        if toggles["includeFeelsLike"]:
            weather += f", feels like {current['feelsLike']}{ctx.degree}"
        if toggles["includeWindSpeed"]:
            weather += f", wind {current['windSpeed']} mph"
        lines.append(weather + ".")
        daily = (ctx.weather or {}).get("daily") or []
        if toggles["includePrecipitation"] and daily:
            lines.append(f"Chance of precipitation today: {daily[0]['precipitationProbability']}%.")
        if toggles["includeTomorrowWeather"] and len(daily) > 1:
            tomorrow = daily[1]
            lines.append(
                f"Tomorrow: high {tomorrow['tempHigh']}{ctx.degree}, "
                f"low {tomorrow['tempLow']}{ctx.degree}, "
                f"{describe_weather(tomorrow['weatherCode']).lower()}."
            )

    if toggles["includeCalendar"] and ctx.calendar is not None:
        events = ctx.today_events
        if not toggles["includeAllDayEvents"]:
            events = [e for e in events if not e.get("allDay")]
        if events:
            described = []
            for event in events[:MAX_CONTEXT_EVENTS]:
                if toggles["includeEventTimes"] and not event.get("allDay"):
                    described.append(f"{event['title']} at {_format_time(event['start'], ctx)}")
                else:
                    described.append(event["title"])
            lines.append(f"Today's events ({len(events)}): {'; '.join(described)}.")
            if toggles["includeTimeUntilNext"]:
                upcoming = [
                    e for e in events
                    if not e.get("allDay") and datetime.fromisoformat(e["start"]) > ctx.now
                ]
                if upcoming:
                    nxt = upcoming[0]
                    delta = datetime.fromisoformat(nxt["start"]) - ctx.now
                    minutes = int(delta.total_seconds() // 60)
                    lines.append(f"Next event '{nxt['title']}' starts in {minutes} minutes.")
        else:
            lines.append("No events scheduled today.")

    if toggles["includeCommute"] and ctx.commute:
        for commute in ctx.commute.get("commutes") or []:
            line = f"Commute for {commute['name']}: {commute['durationMinutes']} minutes"
            if toggles["includeCommuteDeviation"] and commute.get("trafficDelayMinutes"):
                line += (
                    f" including {commute['trafficDelayMinutes']} minutes of "
                    f"{commute['trafficStatus']} traffic"
                )
            lines.append(line + f", arrive by {commute['targetArrivalTime']}.")
    return lines


def build_system_prompt(behavior: dict[str, Any], period: str) -> str:
    if period == "morning":
        mood = {
            "energizing": "It is morning: be upbeat and energizing.",
            "neutral": "Keep an even, matter-of-fact tone.",
        }.get(behavior["morningTone"], "Set the mood as the household instructions describe.")
    elif period in ("evening", "night"):
        mood = {
            "calming": "It is evening: be calm and help the household wind down.",
            "neutral": "Keep an even, matter-of-fact tone.",
        }.get(behavior["eveningTone"], "Set the mood as the household instructions describe.")
    else:
        mood = "Keep an even, matter-of-fact tone."

    names = [n for n in behavior.get("userNames") or [] if n]
    return render_prompt(
        "briefing_system_v1",
        LENGTH=LENGTH_RULES.get(behavior["verbosity"], LENGTH_RULES["medium"]),
        TONE=TONE_RULES.get(behavior["tone"], TONE_RULES["casual"]),
        HUMOR=HUMOR_RULES.get(behavior["humorLevel"], HUMOR_RULES["subtle"]),
        TIME_OF_DAY_TONE=mood,
        ADDRESSING=(
            f"- Household members: {', '.join(names)}. "
            "Address them by name when it reads naturally.\n"
            if names
            else ""
        ),
        STRESS=(
            "- If the day is packed, acknowledge it and be reassuring.\n"
            if behavior["stressAwareEnabled"]
            else ""
        ),
        CELEBRATION=(
            "- If the calendar shows a birthday, anniversary or holiday, celebrate it briefly.\n"
            if behavior["celebrationModeEnabled"]
            else ""
        ),
        CUSTOM_INSTRUCTIONS=(
            f"- Household instructions: {behavior['customInstructions']}\n"
            if behavior.get("customInstructions")
            else ""
        ),
    )


async def generate_ai_summary(
    ctx: BriefingContext,
    toggles: dict[str, bool],
    behavior: dict[str, Any],
    settings: Settings,
) -> str:
    """Ask the LLM for the briefing. Raises ValueError without an API key."""
    provider = get_llm_provider(settings)
    period = time_of_day(ctx.now.hour)
    system_prompt = build_system_prompt(behavior, period)
    prompt = render_prompt(
        "briefing_user_v1",
        TIME_OF_DAY=period,
        CONTEXT="\n".join(build_context_lines(ctx, toggles)) or "No context available.",
    )
    return await provider.acomplete(
        prompt,
        system_prompt,
        model=behavior["model"],
        temperature=float(behavior["temperature"]),
        max_tokens=int(behavior["maxTokens"]),
        top_p=float(behavior["topP"]),
        presence_penalty=float(behavior["presencePenalty"]),
        stop=behavior.get("stopSequences") or None,
    )


def read_briefing_settings(db: Session) -> tuple[dict[str, bool], dict[str, Any], dict[str, str]]:
    """Toggles, behavior and weather settings, or their defaults when the store fails."""
    try:
        return (
            get_ai_summary_settings(db),
            get_ai_behavior_settings(db),
            get_weather_settings(db),
        )
    except Exception:
        db.rollback()
        logger.exception("Failed to read briefing settings, using defaults")
        return (
            dict.fromkeys(AI_SUMMARY_TOGGLES, True),
            dict(AI_BEHAVIOR_DEFAULTS),
            dict(WEATHER_DEFAULTS),
        )


async def build_summary(db: Session) -> dict[str, Any]:
    """Gather display context in-process and produce the briefing payload."""
    settings = get_settings()
    now = dashboard.local_now()
    toggles, behavior, weather_settings = read_briefing_settings(db)

    weather, calendar, commute = await asyncio.gather(
        dashboard.load_weather(db),
        dashboard.load_calendar(db) if toggles["includeCalendar"] else _none(),
        dashboard.load_commute(db) if toggles["includeCommute"] else _none(),
    )
    ctx = BriefingContext(
        now=now,
        units=weather_settings["units"],
        location=weather_settings["location"],
        weather=_live(weather),
        calendar=_live(calendar),
        commute=_live(commute),
    )

    summary: str | None = None
    tip: str | None = None
    source = "template"
    if settings.openrouter_api_key:
        summary = await resilient_fetch(
            "ai-summary",
            lambda: generate_ai_summary(ctx, toggles, behavior, settings),
            None,
            settings.summary_timeout,
        ) or None
        source = "ai" if summary else source
    else:
        logger.debug("OPENROUTER_API_KEY not set, using template summary")

    if summary is None:
        summary, tip = template_summary(ctx)

    payload: dict[str, Any] = {
        "greeting": greeting(now.hour),
        "summary": summary,
        "source": source,
        "lastUpdated": datetime.now(UTC).isoformat(),
    }
    if tip:
        payload["tip"] = tip
    return payload


async def _none() -> None:
    return None
