"""Config version counter and the shared mutation commit helper.

Every admin mutation ends with exactly one ``record_mutation`` call. The
display polls the counter and reloads when it changes.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from mirror.models.activity_log import ActivityLog
from mirror.models.config_version import CONFIG_VERSION_ID, ConfigVersion

logger = logging.getLogger(__name__)


def dialect_insert(db: Session, table):
    """Return an ``INSERT`` construct that supports ``on_conflict_do_update``."""
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert(table)
    return sqlite.insert(table)


def bump_config_version(db: Session) -> int:
    """Increment the singleton counter in one statement and return the new value.

    Creates the row at version 1 if it does not exist. Does not commit.
    """
    now = datetime.now(UTC)
    stmt = dialect_insert(db, ConfigVersion).values(
        id=CONFIG_VERSION_ID, version=1, updated_at=now
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[ConfigVersion.id],
        set_={"version": ConfigVersion.version + 1, "updated_at": now},
    ).returning(ConfigVersion.version)
    version = db.execute(stmt).scalar_one()
    # The ORM identity map may hold a stale row from an earlier read
    db.expire_all()
    return version


def get_config_version(db: Session) -> ConfigVersion | None:
    return db.get(ConfigVersion, CONFIG_VERSION_ID)


def record_mutation(
    db: Session,
    *,
    action: str,
    category: str,
    user_id: int | None,
    details: dict[str, Any] | None = None,
) -> int:
    """Append an activity-log row and bump the config version, then commit.

    Call once per successful mutation, after the primary write has been
    committed. Returns the new config version. On failure the session is
    rolled back and the exception propagates.
    """
    try:
        db.add(
            ActivityLog(
                action=action,
                category=category,
                user_id=user_id,
                details=json.dumps(details) if details is not None else None,
            )
        )
        db.flush()
        version = bump_config_version(db)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to record mutation %s; config version not bumped", action)
        raise
    logger.info("Mutation %s recorded, config version now %d", action, version)
    return version
