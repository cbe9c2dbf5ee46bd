"""Admin widget routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mirror.api.deps import get_db, require_auth, write_guard
from mirror.models.user import User
from mirror.models.widget import Widget
from mirror.schemas.widgets import WidgetBulkUpdate
from mirror.services.config_version import record_mutation
from mirror.services.settings_service import decode_value, encode_value

router = APIRouter()


def serialize_widget(widget: Widget) -> dict:
    return {
        "id": widget.id,
        "name": widget.name,
        "description": widget.description,
        "enabled": widget.enabled,
        "order": widget.order,
        "settings": decode_value(widget.settings),
        "updatedAt": widget.updated_at.isoformat() if widget.updated_at else None,
    }


@router.get("")
def api_list_widgets(
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    """List widgets in display order."""
    widgets = db.query(Widget).order_by(Widget.order, Widget.id).all()
    return {"widgets": [serialize_widget(w) for w in widgets]}


@router.put("")
def api_update_widgets(
    body: WidgetBulkUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Apply enabled/order/settings changes. Only fields present are touched."""
    ids = [change.id for change in body.widgets]
    with write_guard(db, "Failed to update widgets"):
        widgets = {w.id: w for w in db.query(Widget).filter(Widget.id.in_(ids)).all()}
        missing = [widget_id for widget_id in ids if widget_id not in widgets]
        if missing:
            raise HTTPException(status_code=404, detail=f"Widget not found: {missing[0]}")
        for change in body.widgets:
            widget = widgets[change.id]
            if change.enabled is not None:
                widget.enabled = change.enabled
            if change.order is not None:
                widget.order = change.order
            if change.settings is not None:
                widget.settings = encode_value(change.settings)
        db.commit()
        record_mutation(
            db,
            action="widgets.update",
            category="widgets",
            user_id=user.id,
            details={"count": len(ids), "widgetIds": ids},
        )
        return {"success": True, "updated": len(ids)}
