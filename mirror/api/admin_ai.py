"""Admin AI summary toggle and AI behavior routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mirror.api.deps import get_db, require_auth, write_guard
from mirror.models.user import User
from mirror.schemas.ai import AIBehaviorSettingsUpdate, AISummarySettingsUpdate
from mirror.services.config_version import record_mutation
from mirror.services.settings_service import (
    get_ai_behavior_settings,
    get_ai_summary_settings,
    upsert_settings,
)

router = APIRouter()


@router.get("/ai-summary")
def api_get_ai_summary(
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    """Which context sections the briefing may use. Missing toggles read as true."""
    return get_ai_summary_settings(db)


@router.put("/ai-summary")
def api_update_ai_summary(
    body: AISummarySettingsUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    values = body.model_dump(by_alias=True)
    with write_guard(db, "Failed to update AI summary settings"):
        upsert_settings(db, "ai-summary", values, user.id)
        record_mutation(
            db,
            action="ai-summary.update",
            category="ai-summary",
            user_id=user.id,
            details={"enabled": sorted(k for k, v in values.items() if v)},
        )
        return {"success": True}


@router.get("/ai-behavior")
def api_get_ai_behavior(
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    return get_ai_behavior_settings(db)


@router.put("/ai-behavior")
def api_update_ai_behavior(
    body: AIBehaviorSettingsUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Store model parameters and personality settings."""
    values = body.model_dump(by_alias=True)
    with write_guard(db, "Failed to update AI behavior settings"):
        upsert_settings(db, "ai-behavior", values, user.id)
        record_mutation(
            db,
            action="ai-behavior.update",
            category="ai-behavior",
            user_id=user.id,
            details={"model": values["model"], "tone": values["tone"]},
        )
        return {"success": True}
