"""Admin mirror control: forced refresh and status overview."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from mirror.api.deps import get_db, require_auth, write_guard
from mirror.models.activity_log import ActivityLog
from mirror.models.user import User
from mirror.models.widget import Widget
from mirror.schemas.mirror import (
    ActivityEntry,
    ConfigInfo,
    MirrorState,
    MirrorStatus,
    RefreshResponse,
    WidgetCounts,
)
from mirror.services.config_version import get_config_version, record_mutation
from mirror.services.settings_service import decode_value
from mirror.services.system_state import collect_gauges, get_or_create_system_state

logger = logging.getLogger(__name__)

router = APIRouter()

RECENT_ACTIVITY_LIMIT = 10


@router.post("/refresh")
def api_refresh_mirror(
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Force every display to reload by bumping the config version."""
    with write_guard(db, "Failed to trigger mirror refresh"):
        new_version = record_mutation(
            db,
            action="mirror.refresh",
            category="system",
            user_id=user.id,
            details={"requestedBy": user.email},
        )
        logger.info("Mirror refresh requested by %s (version %d)", user.email, new_version)
        response = RefreshResponse(
            message="Refresh signal sent to mirror",
            config_version=new_version,
        )
        return response.model_dump(by_alias=True)


def _activity_user(entry: ActivityLog) -> str:
    if entry.user is None:
        return "System"
    return entry.user.display_name


@router.get("/status")
def api_mirror_status(
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    """System state, config version, widget counts and the latest activity.

    Liveness comes from the stored heartbeat; uptime, memory and load are
    measured on this server at request time.
    """
    with write_guard(db, "Failed to fetch mirror status"):
        state = get_or_create_system_state(db)
        gauges = collect_gauges()
        config = get_config_version(db)
        total = db.query(func.count(Widget.id)).scalar() or 0
        enabled = (
            db.query(func.count(Widget.id)).filter(Widget.enabled == True).scalar()  # noqa: E712
            or 0
        )
        activity = (
            db.query(ActivityLog)
            .options(joinedload(ActivityLog.user))
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
            .all()
        )
        status = MirrorStatus(
            status=MirrorState(
                online=state.online,
                last_ping=state.last_ping,
                uptime=gauges["uptime"],
                memory_usage=gauges["memory_usage"],
                cpu_usage=gauges["cpu_usage"],
            ),
            config=ConfigInfo(
                version=config.version if config else 0,
                last_updated=config.updated_at if config else None,
            ),
            widgets=WidgetCounts(enabled=enabled, total=total),
            recent_activity=[
                ActivityEntry(
                    id=entry.id,
                    action=entry.action,
                    category=entry.category,
                    details=decode_value(entry.details),
                    created_at=entry.created_at,
                    user=_activity_user(entry),
                )
                for entry in activity
            ],
        )
        return status.model_dump(mode="json", by_alias=True)
