"""Admin accounts and session tokens.

Tokens are HS256 JWTs whose subject is the admin's normalized email. They
travel either in the ``access_token`` cookie or as a Bearer header.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from mirror.config import get_settings
from mirror.models.user import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_HOURS = 24


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str | None = None,
    role: str = "admin",
) -> User:
    user = User(email=normalize_email(email), name=name, role=role)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created %s account %s", role, user.email)
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """The matching user if *password* is right, else None."""
    user = get_user_by_email(db, email)
    if user is None or not user.verify_password(password):
        return None
    return user


def issue_session_token(email: str, lifetime: timedelta | None = None) -> str:
    """Signed token for *email*, valid for *lifetime* (default SESSION_HOURS)."""
    expires = datetime.now(UTC) + (lifetime or timedelta(hours=SESSION_HOURS))
    claims = {"sub": normalize_email(email), "exp": expires}
    return jwt.encode(claims, get_settings().secret_key, algorithm=ALGORITHM)


def read_session_token(token: str) -> str | None:
    """Email carried by *token*, or None if it is malformed, forged or expired."""
    try:
        claims = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None


def get_user_from_token(db: Session, token: str) -> User | None:
    email = read_session_token(token)
    if email is None:
        return None
    return get_user_by_email(db, email)
