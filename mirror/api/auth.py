"""Admin login, logout and current-user routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from mirror.api.deps import AUTH_COOKIE, get_db, require_auth
from mirror.config import get_settings
from mirror.models.user import User
from mirror.schemas.auth import AdminUser, LoginRequest, LoginResponse
from mirror.services.auth import SESSION_HOURS, authenticate_user, issue_session_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login")
def api_login(body: LoginRequest, response: Response, db: Session = Depends(get_db)) -> dict:
    """Check credentials, set the session cookie and return the token."""
    user = authenticate_user(db, body.email, body.password)
    if user is None:
        logger.warning("Failed admin login for %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = issue_session_token(user.email)
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        max_age=SESSION_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=not get_settings().debug and get_settings().site_url.startswith("https"),
        path="/",
    )
    payload = LoginResponse(token=token, user=AdminUser.model_validate(user))
    return payload.model_dump(by_alias=True)


@router.post("/logout")
def api_logout(response: Response) -> dict:
    response.delete_cookie(key=AUTH_COOKIE, path="/")
    return {"success": True}


@router.get("/me")
def api_me(user: User = Depends(require_auth)) -> dict:
    return {"user": AdminUser.model_validate(user).model_dump(by_alias=True)}
