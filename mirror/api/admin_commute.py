"""Admin commute route routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mirror.api.deps import get_db, require_auth, write_guard
from mirror.models.commute_route import CommuteRoute
from mirror.models.user import User
from mirror.schemas.commute import CommuteRouteBulkUpdate, CommuteRouteCreate, CommuteRouteRead
from mirror.services.config_version import record_mutation

router = APIRouter()


def _dump(route: CommuteRoute) -> dict:
    return CommuteRouteRead.model_validate(route).model_dump(mode="json", by_alias=True)


@router.get("")
def api_list_routes(
    db: Session = Depends(get_db),
    _user: User = Depends(require_auth),
) -> dict:
    """List commute routes, oldest first."""
    routes = db.query(CommuteRoute).order_by(CommuteRoute.created_at).all()
    return {"routes": [_dump(route) for route in routes]}


@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_route(
    body: CommuteRouteCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Add a commute route. Coordinates are inclusive of their bounds."""
    origin_lat, origin_lon, dest_lat, dest_lon = body.coordinates
    with write_guard(db, "Failed to create commute route"):
        route = CommuteRoute(
            name=body.name,
            origin_lat=origin_lat,
            origin_lon=origin_lon,
            dest_lat=dest_lat,
            dest_lon=dest_lon,
            arrival_time=body.arrival_time,
            days_active=body.days,
            enabled=body.enabled,
        )
        db.add(route)
        db.commit()
        db.refresh(route)
        record_mutation(
            db,
            action="commute.create",
            category="commute",
            user_id=user.id,
            details={"routeId": route.id, "name": route.name},
        )
        return {"route": _dump(route)}


@router.put("")
def api_update_routes(
    body: CommuteRouteBulkUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Enable or disable several routes at once. Unknown ids abort with 404."""
    ids = [toggle.id for toggle in body.routes]
    with write_guard(db, "Failed to update commute routes"):
        routes = {r.id: r for r in db.query(CommuteRoute).filter(CommuteRoute.id.in_(ids)).all()}
        if len(routes) != len(set(ids)):
            raise HTTPException(status_code=404, detail="Route not found")
        for toggle in body.routes:
            routes[toggle.id].enabled = toggle.enabled
        db.commit()
        record_mutation(
            db,
            action="commute.update",
            category="commute",
            user_id=user.id,
            details={"count": len(ids), "routeIds": ids},
        )
        return {"success": True}


@router.delete("/{route_id}")
def api_delete_route(
    route_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
) -> dict:
    """Delete a commute route."""
    with write_guard(db, "Failed to delete commute route"):
        route = db.get(CommuteRoute, route_id)
        if route is None:
            raise HTTPException(status_code=404, detail="Route not found")
        name = route.name
        db.delete(route)
        db.commit()
        record_mutation(
            db,
            action="commute.delete",
            category="commute",
            user_id=user.id,
            details={"routeId": route_id, "name": name},
        )
        return {"success": True}
