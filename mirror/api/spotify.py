"""Spotify now-playing and the one-time refresh-token setup flow."""

from __future__ import annotations

import html
import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import HTMLResponse, RedirectResponse

from mirror.adapters import spotify as spotify_adapter
from mirror.config import get_settings
from mirror.services import dashboard

logger = logging.getLogger(__name__)

router = APIRouter()

CALLBACK_PAGE = """<!DOCTYPE html>
<html>
<head><title>Spotify connected</title></head>
<body style="font-family: sans-serif; max-width: 40em; margin: 3em auto;">
<h1>Spotify connected</h1>
<p>Add this line to the server environment and restart:</p>
<pre>SPOTIFY_REFRESH_TOKEN={token}</pre>
</body>
</html>
"""


@router.get("/now-playing")
async def api_now_playing() -> dict:
    return await dashboard.load_now_playing()


@router.get("/authorize")
def api_authorize() -> RedirectResponse:
    """Send the owner to Spotify's consent page."""
    if not get_settings().spotify_client_id:
        raise HTTPException(status_code=400, detail="SPOTIFY_CLIENT_ID not configured")
    return RedirectResponse(spotify_adapter.authorize_url())


@router.get("/callback", response_class=HTMLResponse)
async def api_callback(
    code: str | None = Query(None),
    error: str | None = Query(None),
) -> HTMLResponse:
    """Exchange the authorization code and show the refresh token once."""
    if error:
        raise HTTPException(status_code=400, detail=f"Spotify authorization failed: {error}")
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")
    try:
        tokens = await spotify_adapter.exchange_code(code)
    except spotify_adapter.SpotifyError as exc:
        logger.warning("Spotify token exchange failed: %s (%s)", exc, exc.status_code)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    refresh_token = tokens.get("refresh_token")
    if not refresh_token:
        raise HTTPException(status_code=400, detail="No refresh token returned")
    logger.info("Spotify authorization completed")
    return HTMLResponse(CALLBACK_PAGE.format(token=html.escape(refresh_token)))
