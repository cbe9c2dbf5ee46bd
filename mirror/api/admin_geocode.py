"""Admin location search for the weather and commute pickers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from mirror.adapters.geocode import search_locations, validate_query
from mirror.api.deps import require_auth
from mirror.config import get_settings
from mirror.models.user import User
from mirror.services.resilient import resilient_fetch

router = APIRouter()


@router.get("/search")
async def api_geocode_search(
    q: str | None = Query(None),
    _user: User = Depends(require_auth),
) -> dict:
    """Up to five address matches. Empty results when search is unavailable."""
    try:
        query = validate_query(q)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    settings = get_settings()
    return await resilient_fetch(
        "geocode",
        lambda: search_locations(query, settings.tomtom_api_key),
        lambda: {"results": []},
        settings.adapter_timeout,
    )
