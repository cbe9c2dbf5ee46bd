"""Spotify now-playing adapter and OAuth helpers."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from mirror.config import Settings, get_settings
from mirror.services.fetcher import build_client
from mirror.services.resilient import AdapterUnavailable

logger = logging.getLogger(__name__)

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_NOW_PLAYING_URL = "https://api.spotify.com/v1/me/player/currently-playing"
SCOPES = ("user-read-currently-playing", "user-read-playback-state")

NOT_CONFIGURED = {"isPlaying": False, "configured": False, "message": "Spotify not configured"}


class SpotifyError(Exception):
    """Token exchange failed."""

    def __init__(self, message: str, status_code: int = 500, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


def is_configured(settings: Settings | None = None) -> bool:
    settings = settings or get_settings()
    return bool(
        settings.spotify_client_id
        and settings.spotify_client_secret
        and settings.spotify_refresh_token
    )


def _basic_auth(settings: Settings) -> httpx.BasicAuth:
    return httpx.BasicAuth(settings.spotify_client_id or "", settings.spotify_client_secret or "")


async def refresh_access_token(client: httpx.AsyncClient, settings: Settings) -> str:
    """Exchange the stored refresh token for an access token."""
    if not is_configured(settings):
        raise AdapterUnavailable("Spotify credentials not configured")
    response = await client.post(
        SPOTIFY_TOKEN_URL,
        data={"grant_type": "refresh_token", "refresh_token": settings.spotify_refresh_token},
        auth=_basic_auth(settings),
    )
    response.raise_for_status()
    return response.json()["access_token"]


def parse_now_playing(data: dict[str, Any]) -> dict[str, Any]:
    item = data.get("item") or {}
    if data.get("currently_playing_type") == "episode":
        show = item.get("show") or {}
        images = item.get("images") or show.get("images") or []
        return {
            "isPlaying": bool(data.get("is_playing")),
            "configured": True,
            "type": "podcast",
            "title": item.get("name") or "Unknown Episode",
            "show": show.get("name") or "Unknown Show",
            "imageUrl": images[0]["url"] if images else None,
            "progress": data.get("progress_ms"),
            "duration": item.get("duration_ms"),
        }
    album = item.get("album") or {}
    images = album.get("images") or []
    artists = ", ".join(a["name"] for a in item.get("artists") or [] if a.get("name"))
    return {
        "isPlaying": bool(data.get("is_playing")),
        "configured": True,
        "type": "track",
        "title": item.get("name") or "Unknown Track",
        "artist": artists or "Unknown Artist",
        "album": album.get("name") or "Unknown Album",
        "imageUrl": images[0]["url"] if images else None,
        "progress": data.get("progress_ms"),
        "duration": item.get("duration_ms"),
    }


async def fetch_now_playing(settings: Settings | None = None) -> dict[str, Any]:
    """Current track or episode. Raises on token or transport failure."""
    settings = settings or get_settings()
    async with build_client() as client:
        token = await refresh_access_token(client, settings)
        response = await client.get(
            SPOTIFY_NOW_PLAYING_URL, headers={"Authorization": f"Bearer {token}"}
        )
        if response.status_code == 204:
            return {"isPlaying": False, "configured": True}
        response.raise_for_status()
        return parse_now_playing(response.json())


def authorize_url(settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    query = urlencode(
        {
            "client_id": settings.spotify_client_id or "",
            "response_type": "code",
            "redirect_uri": settings.spotify_redirect_uri,
            "scope": " ".join(SCOPES),
        }
    )
    return f"{SPOTIFY_AUTHORIZE_URL}?{query}"


async def exchange_code(code: str, settings: Settings | None = None) -> dict[str, Any]:
    """Trade an authorization code for access and refresh tokens."""
    settings = settings or get_settings()
    if not (settings.spotify_client_id and settings.spotify_client_secret):
        raise SpotifyError("Spotify credentials not configured")
    async with build_client() as client:
        response = await client.post(
            SPOTIFY_TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": settings.spotify_redirect_uri,
            },
            auth=_basic_auth(settings),
        )
    if response.status_code >= 400:
        try:
            details = response.json()
        except ValueError:
            details = response.text
        raise SpotifyError("Token exchange failed", response.status_code, details)
    return response.json()
