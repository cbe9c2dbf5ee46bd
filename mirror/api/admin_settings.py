"""Admin generic settings routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from mirror.api.deps import get_db, require_auth, write_guard
from mirror.models.user import User
from mirror.schemas.settings import SettingCreate, SettingsBulkUpdate
from mirror.services.config_version import record_mutation
from mirror.services.settings_service import (
    SettingConflictError,
    create_setting,
    list_settings,
    serialize_setting,
    update_settings,
)

router = APIRouter()


@router.get("")
def api_list_settings(
    category: str | None = Query(None),
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    """List settings, optionally for one category. Encrypted values are masked."""
    return {"settings": [serialize_setting(row) for row in list_settings(db, category)]}


@router.put("")
def api_update_settings(
    body: SettingsBulkUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Update existing settings by id. Unknown ids abort the whole request."""
    with write_guard(db, "Failed to update settings"):
        updated = update_settings(
            db, [(item.id, item.value) for item in body.settings], user.id
        )
        if updated is None:
            raise HTTPException(status_code=404, detail="Setting not found")
        record_mutation(
            db,
            action="settings.update",
            category="settings",
            user_id=user.id,
            details={"count": len(updated), "settingIds": updated},
        )
        return {"success": True, "updated": len(updated)}


@router.post("")
def api_create_setting(
    body: SettingCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Create a setting. 409 if the id already exists."""
    with write_guard(db, "Failed to create setting"):
        try:
            row = create_setting(
                db,
                setting_id=body.id,
                value=body.value,
                category=body.category,
                label=body.label,
                encrypted=body.encrypted,
                user_id=user.id,
            )
        except SettingConflictError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        record_mutation(
            db,
            action="settings.create",
            category="settings",
            user_id=user.id,
            details={"settingId": row.id, "category": row.category},
        )
        return {"success": True, "setting": serialize_setting(row)}
