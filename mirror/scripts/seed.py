"""Seed a fresh database: admin user, default widgets and settings,
config version 1 and the system state row.

Usage:
    python -m mirror.scripts.seed
    ADMIN_EMAIL=me@example.com ADMIN_PASSWORD=... python -m mirror.scripts.seed

Safe to re-run: existing rows are left alone except the admin password.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from mirror.db.session import SessionLocal, create_tables
from mirror.models.config_version import CONFIG_VERSION_ID, ConfigVersion
from mirror.models.setting import Setting
from mirror.models.system_state import SYSTEM_STATE_ID, SystemState
from mirror.models.widget import Widget
from mirror.services.auth import create_user, get_user_by_email
from mirror.services.settings_service import encode_value

logger = logging.getLogger(__name__)

DEFAULT_WIDGETS: list[dict] = [
    {
        "id": "clock",
        "name": "Clock",
        "description": "Time display with greeting and feast day",
        "settings": {"showFeastDay": True, "showGreeting": True, "format24h": False},
    },
    {
        "id": "weather",
        "name": "Weather",
        "description": "Current weather and forecast",
        "settings": {"showForecast": True, "forecastDays": 5, "refreshInterval": 900000},
    },
    {
        "id": "calendar",
        "name": "Calendar",
        "description": "Upcoming events from iCal feeds",
        "settings": {"daysAhead": 7, "maxEvents": 8, "refreshInterval": 300000},
    },
    {
        "id": "commute",
        "name": "Commute",
        "description": "Traffic-aware commute times",
        "settings": {"showOnWeekends": False, "startHour": 6, "endHour": 9},
    },
    {
        "id": "news",
        "name": "News",
        "description": "RSS news headlines",
        "settings": {"maxHeadlines": 5, "refreshInterval": 1800000},
    },
    {
        "id": "ai-summary",
        "name": "AI Summary",
        "description": "AI-generated daily briefing",
        "settings": {"refreshInterval": 1800000, "model": "anthropic/claude-3-haiku"},
    },
    {
        "id": "spotify",
        "name": "Spotify",
        "description": "Now playing from Spotify",
        "settings": {"showAlbumArt": True, "showProgress": True},
    },
]

# (id, value, label)
DEFAULT_SETTINGS: list[tuple[str, object, str]] = [
    ("weather.latitude", "41.0793", "Latitude"),
    ("weather.longitude", "-85.1394", "Longitude"),
    ("weather.location", "Fort Wayne, IN", "Location Name"),
    ("weather.units", "fahrenheit", "Units"),
    ("display.brightness", 100, "Brightness (%)"),
    ("display.autoRefresh", True, "Auto Refresh"),
    ("calendar.daysAhead", 7, "Days Ahead"),
    ("calendar.maxEvents", 8, "Max Events"),
]


def seed_database(db: Session, admin_email: str, admin_password: str) -> dict[str, int]:
    """Insert whatever default rows are missing. Returns counts of rows created."""
    created = {"users": 0, "widgets": 0, "settings": 0}

    user = get_user_by_email(db, admin_email)
    if user is None:
        create_user(db, admin_email, admin_password, name="Admin")
        created["users"] = 1
    else:
        user.set_password(admin_password)

    for order, widget in enumerate(DEFAULT_WIDGETS, start=1):
        if db.get(Widget, widget["id"]) is None:
            db.add(
                Widget(
                    id=widget["id"],
                    name=widget["name"],
                    description=widget["description"],
                    enabled=True,
                    order=order,
                    settings=encode_value(widget["settings"]),
                )
            )
            created["widgets"] += 1

    for setting_id, value, label in DEFAULT_SETTINGS:
        if db.get(Setting, setting_id) is None:
            db.add(
                Setting(
                    id=setting_id,
                    value=encode_value(value),
                    category=setting_id.split(".", 1)[0],
                    label=label,
                )
            )
            created["settings"] += 1

    if db.get(ConfigVersion, CONFIG_VERSION_ID) is None:
        db.add(ConfigVersion(id=CONFIG_VERSION_ID, version=1))
    if db.get(SystemState, SYSTEM_STATE_ID) is None:
        db.add(SystemState(id=SYSTEM_STATE_ID, online=True, last_ping=datetime.now(UTC)))

    db.commit()
    return created


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        print("ERROR: ADMIN_PASSWORD must be set", file=sys.stderr)
        return 1

    create_tables()
    db = SessionLocal()
    try:
        created = seed_database(db, admin_email, admin_password)
        print(
            f"Seed complete: users={created['users']} "
            f"widgets={created['widgets']} settings={created['settings']}"
        )
        return 0
    except Exception as e:
        db.rollback()
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
