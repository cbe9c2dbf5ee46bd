"""Public display endpoints. No authentication; never a 5xx to the display."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mirror.adapters.liturgical import feast_day
from mirror.api.deps import get_db
from mirror.config import get_settings
from mirror.services import dashboard
from mirror.services.config_version import get_config_version
from mirror.services.summary import build_summary
from mirror.services.system_state import collect_gauges, touch_heartbeat

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/config-version")
def api_config_version(db: Session = Depends(get_db)) -> dict:
    """Current config version. Also refreshes the display heartbeat.

    Always 200: a failed read is answered with version 0. The version is read
    before the heartbeat write, and a heartbeat failure never changes the answer.
    """
    try:
        row = get_config_version(db)
        payload = (
            {"version": row.version, "updatedAt": row.updated_at.isoformat()}
            if row is not None
            else {"version": 0, "updatedAt": None}
        )
    except Exception:
        db.rollback()
        logger.exception("Failed to read config version")
        return {"version": 0, "updatedAt": None}

    try:
        touch_heartbeat(db)
    except Exception:
        db.rollback()
        logger.exception("Failed to refresh display heartbeat")
    return payload


@router.get("/version")
def api_version() -> dict:
    """Deployment identity for the display's reload check."""
    return {"buildTime": get_settings().build_time, "timestamp": int(time.time() * 1000)}


@router.post("/mirror/heartbeat")
def api_heartbeat(db: Session = Depends(get_db)) -> dict:
    """Record display liveness with process gauges."""
    try:
        touch_heartbeat(db, collect_gauges())
    except Exception:
        db.rollback()
        logger.exception("Failed to record heartbeat")
        return {"success": False}
    return {"success": True}


@router.get("/weather/settings")
def api_weather_settings(db: Session = Depends(get_db)) -> dict:
    return dashboard.read_weather_settings(db)


@router.get("/weather")
async def api_weather(db: Session = Depends(get_db)) -> dict:
    return await dashboard.load_weather(db)


@router.get("/calendar")
async def api_calendar(db: Session = Depends(get_db)) -> dict:
    return await dashboard.load_calendar(db)


@router.get("/commute")
async def api_commute(db: Session = Depends(get_db)) -> dict:
    return await dashboard.load_commute(db)


@router.get("/summary")
async def api_summary(db: Session = Depends(get_db)) -> dict:
    return await build_summary(db)


@router.get("/feast-day")
def api_feast_day() -> dict:
    return feast_day(dashboard.local_now().date())


@router.get("/news")
async def api_news() -> dict:
    return await dashboard.load_news()
