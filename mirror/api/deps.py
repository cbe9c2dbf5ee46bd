"""Request dependencies shared by the admin routers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from mirror.db.session import get_db  # re-export
from mirror.models.user import User
from mirror.services.auth import get_user_from_token

__all__ = [
    "AUTH_COOKIE",
    "get_db",
    "get_current_user",
    "require_auth",
    "write_guard",
]

logger = logging.getLogger(__name__)

AUTH_COOKIE = "access_token"
BEARER_PREFIX = "Bearer "


def _request_token(authorization: str | None, cookie: str | None) -> str | None:
    """Bearer header wins over the session cookie."""
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX) :].strip() or None
    return cookie or None


def get_current_user(
    db: Session = Depends(get_db),
    authorization: str | None = Header(None),
    access_token: str | None = Cookie(None),
) -> User | None:
    token = _request_token(authorization, access_token)
    if token is None:
        return None
    return get_user_from_token(db, token)


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """401 for anonymous callers. Runs before the request body is validated."""
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


@contextmanager
def write_guard(db: Session, message: str) -> Iterator[None]:
    """Turn an unexpected store failure into a 500 with *message*.

    HTTPExceptions raised inside the block pass through untouched.
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception(message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=message,
        ) from None
