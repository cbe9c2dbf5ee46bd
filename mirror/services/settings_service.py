"""Settings service: namespaced key-value reads and writes.

Setting ids are ``"<category>.<key>"``; values are stored as JSON text.
Category reads strip the prefix so callers see plain keys.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.orm import Session

from mirror.models.setting import Setting

logger = logging.getLogger(__name__)

MASKED_VALUE = "********"

WEATHER_DEFAULTS: dict[str, str] = {
    "latitude": "41.0793",
    "longitude": "-85.1394",
    "location": "Fort Wayne, IN",
    "units": "fahrenheit",
}

AI_SUMMARY_TOGGLES: tuple[str, ...] = (
    "includeWeatherLocation",
    "includeFeelsLike",
    "includeWindSpeed",
    "includePrecipitation",
    "includeTomorrowWeather",
    "includeCalendar",
    "includeEventTimes",
    "includeTimeUntilNext",
    "includeAllDayEvents",
    "includeCommute",
    "includeCommuteDeviation",
    "includeDayDate",
    "includeWeekendDetection",
)

AI_BEHAVIOR_DEFAULTS: dict[str, Any] = {
    "model": "anthropic/claude-3-haiku",
    "temperature": 0.7,
    "maxTokens": 150,
    "topP": 1,
    "presencePenalty": 0,
    "verbosity": "medium",
    "tone": "casual",
    "userNames": [],
    "humorLevel": "subtle",
    "customInstructions": "",
    "morningTone": "energizing",
    "eveningTone": "calming",
    "stressAwareEnabled": True,
    "celebrationModeEnabled": True,
    "stopSequences": [],
}


class SettingConflictError(ValueError):
    """Raised when creating a setting whose id already exists."""


def encode_value(value: Any) -> str:
    return json.dumps(value)


def decode_value(raw: str | None) -> Any:
    """Decode stored JSON text; fall back to the raw string for legacy values."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return raw


def _strip_prefix(setting_id: str, category: str) -> str:
    prefix = f"{category}."
    return setting_id[len(prefix) :] if setting_id.startswith(prefix) else setting_id


def get_category_settings(db: Session, category: str) -> dict[str, Any]:
    """Return ``{key: value}`` for every setting in *category*, prefix stripped."""
    rows = db.query(Setting).filter(Setting.category == category).all()
    return {_strip_prefix(row.id, category): decode_value(row.value) for row in rows}


def get_with_defaults(db: Session, category: str, defaults: dict[str, Any]) -> dict[str, Any]:
    """Category read with a default for each missing or empty key."""
    stored = get_category_settings(db, category)
    result: dict[str, Any] = {}
    for key, default in defaults.items():
        value = stored.get(key)
        result[key] = default if value is None or value == "" else value
    return result


def upsert_settings(
    db: Session,
    category: str,
    values: dict[str, Any],
    user_id: int | None,
) -> None:
    """Create or update ``<category>.<key>`` for each item in *values*, then commit."""
    for key, value in values.items():
        setting_id = f"{category}.{key}"
        row = db.get(Setting, setting_id)
        if row is None:
            db.add(
                Setting(
                    id=setting_id,
                    value=encode_value(value),
                    category=category,
                    updated_by=user_id,
                )
            )
        else:
            row.value = encode_value(value)
            row.updated_by = user_id
    db.commit()


def list_settings(db: Session, category: str | None = None) -> list[Setting]:
    query = db.query(Setting)
    if category:
        query = query.filter(Setting.category == category)
    return query.order_by(Setting.category, Setting.id).all()


def serialize_setting(row: Setting) -> dict[str, Any]:
    """Admin view of a setting. Encrypted values are masked."""
    return {
        "id": row.id,
        "value": MASKED_VALUE if row.encrypted else decode_value(row.value),
        "category": row.category,
        "label": row.label,
        "encrypted": row.encrypted,
        "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
    }


def find_missing_settings(db: Session, ids: list[str]) -> list[str]:
    existing = {row.id for row in db.query(Setting.id).filter(Setting.id.in_(ids)).all()}
    return [setting_id for setting_id in ids if setting_id not in existing]


def update_settings(
    db: Session,
    updates: list[tuple[str, Any]],
    user_id: int | None,
) -> list[str] | None:
    """Update existing settings in one transaction.

    Returns None without writing if any id is unknown (caller returns 404),
    otherwise the list of updated ids.
    """
    ids = [setting_id for setting_id, _ in updates]
    if find_missing_settings(db, ids):
        return None
    for setting_id, value in updates:
        row = db.get(Setting, setting_id)
        row.value = encode_value(value)
        row.updated_by = user_id
    db.commit()
    return ids


def create_setting(
    db: Session,
    *,
    setting_id: str,
    value: Any,
    category: str,
    label: str | None = None,
    encrypted: bool = False,
    user_id: int | None = None,
) -> Setting:
    """Insert a new setting. Raises SettingConflictError if the id exists."""
    if db.get(Setting, setting_id) is not None:
        raise SettingConflictError(f"Setting {setting_id} already exists")
    row = Setting(
        id=setting_id,
        value=encode_value(value),
        category=category,
        label=label,
        encrypted=encrypted,
        updated_by=user_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


# ----------------------------------------------------------------------
# Domain views
# ----------------------------------------------------------------------


def get_weather_settings(db: Session) -> dict[str, str]:
    """Weather location and units as strings, defaults filled in."""
    values = get_with_defaults(db, "weather", WEATHER_DEFAULTS)
    return {key: str(value) for key, value in values.items()}


def get_ai_summary_settings(db: Session) -> dict[str, bool]:
    stored = get_category_settings(db, "ai-summary")
    return {key: stored.get(key, True) is not False for key in AI_SUMMARY_TOGGLES}


def get_ai_behavior_settings(db: Session) -> dict[str, Any]:
    stored = get_category_settings(db, "ai-behavior")
    result = dict(AI_BEHAVIOR_DEFAULTS)
    for key in AI_BEHAVIOR_DEFAULTS:
        if key in stored and stored[key] is not None:
            result[key] = stored[key]
    return result
