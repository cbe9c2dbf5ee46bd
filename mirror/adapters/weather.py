"""Open-Meteo weather adapter. Free, no API key required."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from typing import Any

from mirror.services.fetcher import fetch_json

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_FIELDS = (
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "wind_speed_10m",
    "weather_code",
    "is_day",
)
DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "weather_code",
    "precipitation_probability_max",
    "sunrise",
    "sunset",
)

# WMO weather codes, https://open-meteo.com/en/docs
WEATHER_DESCRIPTIONS: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def describe_weather(code: int | None) -> str:
    return WEATHER_DESCRIPTIONS.get(code, "Unknown") if code is not None else "Unknown"


def build_params(latitude: str, longitude: str, units: str, timezone: str) -> dict[str, str]:
    return {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(CURRENT_FIELDS),
        "daily": ",".join(DAILY_FIELDS),
        "temperature_unit": units,
        "wind_speed_unit": "mph",
        "timezone": timezone,
        "forecast_days": "7",
    }


def parse_forecast(data: dict[str, Any], location: str) -> dict[str, Any]:
    """Normalize an Open-Meteo response. Raises KeyError/TypeError on malformed input."""
    current = data["current"]
    daily = data["daily"]
    return {
        "current": {
            "temperature": round(current["temperature_2m"]),
            "feelsLike": round(current["apparent_temperature"]),
            "humidity": current["relative_humidity_2m"],
            "windSpeed": round(current["wind_speed_10m"]),
            "weatherCode": current["weather_code"],
            "isDay": current["is_day"] == 1,
        },
        "daily": [
            {
                "date": day,
                "tempHigh": round(daily["temperature_2m_max"][i]),
                "tempLow": round(daily["temperature_2m_min"][i]),
                "weatherCode": daily["weather_code"][i],
                "precipitationProbability": daily["precipitation_probability_max"][i],
            }
            for i, day in enumerate(daily["time"])
        ],
        "location": location,
        "lastUpdated": datetime.now(UTC).isoformat(),
        "isDemo": False,
    }


async def fetch_weather(
    latitude: str,
    longitude: str,
    location: str,
    units: str,
    timezone: str,
) -> dict[str, Any]:
    """Fetch the live forecast. Raises on network, status or parse failure."""
    params = build_params(latitude, longitude, units, timezone)
    data = await fetch_json(OPEN_METEO_URL, params=params)
    return parse_forecast(data, location)


def demo_weather(location: str, units: str = "fahrenheit") -> dict[str, Any]:
    """Canned forecast shown when Open-Meteo is unavailable."""
    celsius = units == "celsius"

    def temp(f: int) -> int:
        return round((f - 32) * 5 / 9) if celsius else f

    today = date.today()
    highs = (72, 75, 68, 64, 70, 77, 79)
    lows = (55, 58, 52, 47, 50, 59, 61)
    codes = (1, 2, 61, 3, 0, 1, 95)
    precip = (5, 10, 70, 20, 0, 10, 60)
    return {
        "current": {
            "temperature": temp(68),
            "feelsLike": temp(66),
            "humidity": 45,
            "windSpeed": 8,
            "weatherCode": 1,
            "isDay": True,
        },
        "daily": [
            {
                "date": (today + timedelta(days=i)).isoformat(),
                "tempHigh": temp(highs[i]),
                "tempLow": temp(lows[i]),
                "weatherCode": codes[i],
                "precipitationProbability": precip[i],
            }
            for i in range(7)
        ],
        "location": location,
        "lastUpdated": datetime.now(UTC).isoformat(),
        "isDemo": True,
    }
