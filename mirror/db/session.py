"""
Engine, session factory and declarative base for the mirror store.
"""

from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mirror.config import get_settings


def build_engine(database_url: str, *, echo: bool = False, connect_timeout: int = 10) -> Engine:
    """Create an engine with driver-appropriate connection arguments.

    In-memory SQLite shares one connection across threads so the TestClient
    thread and the test body see the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=echo,
        connect_args={
            "connect_timeout": connect_timeout,
            "options": "-c timezone=UTC",
        },
    )


settings = get_settings()
engine = build_engine(
    settings.database_url,
    echo=settings.debug,
    connect_timeout=settings.db_connect_timeout,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base for every mirror table."""


def check_db_connection() -> None:
    """
    Run SELECT 1 against the store. Raises if it is unreachable.
    Used by the lifespan hook and /health.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def create_tables() -> None:
    """Create any missing tables (SQLite deployments without Alembic)."""
    import mirror.models  # noqa: F401  (register mappers)

    Base.metadata.create_all(engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; handlers commit their own writes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
