"""Admin weather location routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mirror.api.deps import get_db, require_auth, write_guard
from mirror.models.user import User
from mirror.schemas.weather import WeatherSettings, WeatherSettingsUpdate
from mirror.services.config_version import record_mutation
from mirror.services.settings_service import get_weather_settings, upsert_settings

router = APIRouter()


@router.get("", response_model=WeatherSettings)
def api_get_weather(
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    return get_weather_settings(db)


@router.put("")
def api_update_weather(
    body: WeatherSettingsUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Store the weather location and units under the ``weather.`` prefix."""
    values = body.as_settings()
    with write_guard(db, "Failed to update weather settings"):
        upsert_settings(db, "weather", values, user.id)
        record_mutation(
            db,
            action="weather.update",
            category="weather",
            user_id=user.id,
            details={"location": values["location"], "units": values["units"]},
        )
        return {"success": True}
