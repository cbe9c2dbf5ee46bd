"""Admin calendar feed routes."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from mirror.adapters.calendar import CalendarValidationError, validate_feed_url
from mirror.api.deps import get_db, require_auth, write_guard
from mirror.models.calendar_feed import CalendarFeed
from mirror.models.user import User
from mirror.schemas.calendar import (
    CalendarFeedBulkUpdate,
    CalendarFeedCreate,
    CalendarFeedRead,
    CalendarValidateRequest,
)
from mirror.services.config_version import record_mutation

logger = logging.getLogger(__name__)

router = APIRouter()


def _dump(feed: CalendarFeed) -> dict:
    return CalendarFeedRead.model_validate(feed).model_dump(mode="json", by_alias=True)


@router.get("")
def api_list_feeds(
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    """List calendar feeds, oldest first."""
    feeds = db.query(CalendarFeed).order_by(CalendarFeed.created_at).all()
    return {"feeds": [_dump(feed) for feed in feeds]}


@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_feed(
    body: CalendarFeedCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Add a calendar feed."""
    with write_guard(db, "Failed to create calendar feed"):
        feed = CalendarFeed(name=body.name, url=body.url, enabled=body.enabled, color=body.color)
        db.add(feed)
        db.commit()
        db.refresh(feed)
        record_mutation(
            db,
            action="calendar.create",
            category="calendar",
            user_id=user.id,
            details={"feedId": feed.id, "name": feed.name},
        )
        return {"feed": _dump(feed)}


@router.put("")
def api_update_feeds(
    body: CalendarFeedBulkUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Enable or disable several feeds at once. Unknown ids abort with 404."""
    ids = [toggle.id for toggle in body.feeds]
    with write_guard(db, "Failed to update calendar feeds"):
        feeds = {f.id: f for f in db.query(CalendarFeed).filter(CalendarFeed.id.in_(ids)).all()}
        if len(feeds) != len(set(ids)):
            raise HTTPException(status_code=404, detail="Feed not found")
        for toggle in body.feeds:
            feeds[toggle.id].enabled = toggle.enabled
        db.commit()
        record_mutation(
            db,
            action="calendar.update",
            category="calendar",
            user_id=user.id,
            details={"count": len(ids), "feedIds": ids},
        )
        return {"success": True}


@router.delete("/{feed_id}")
def api_delete_feed(
    feed_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Delete a calendar feed."""
    with write_guard(db, "Failed to delete calendar feed"):
        feed = db.get(CalendarFeed, feed_id)
        if feed is None:
            raise HTTPException(status_code=404, detail="Feed not found")
        name = feed.name
        db.delete(feed)
        db.commit()
        record_mutation(
            db,
            action="calendar.delete",
            category="calendar",
            user_id=user.id,
            details={"feedId": feed_id, "name": name},
        )
        return {"success": True}


@router.post("/validate")
async def api_validate_feed(
    body: CalendarValidateRequest,
    _user: User = Depends(require_auth),
):
    """Fetch and parse an iCal URL without saving it."""
    if not body.url:
        raise HTTPException(status_code=400, detail="URL is required")
    parsed = urlparse(body.url)
    if parsed.scheme not in ("http", "https", "webcal") or not parsed.netloc:
        raise HTTPException(status_code=400, detail="Invalid URL format")

    try:
        count = await validate_feed_url(body.url)
    except CalendarValidationError as exc:
        logger.info("Calendar validation failed (%s): %s", exc.category, exc.message)
        return JSONResponse(
            status_code=400,
            content={"valid": False, "error": exc.message, "reason": exc.category},
        )
    return {"valid": True, "eventCount": count, "message": f"Successfully parsed {count} events"}
