"""Display liveness: heartbeat upserts and process gauges."""

from __future__ import annotations

import logging
import os
import time
from datetime import UTC, datetime

import psutil
from sqlalchemy.orm import Session

from mirror.models.system_state import SYSTEM_STATE_ID, SystemState
from mirror.services.config_version import dialect_insert

logger = logging.getLogger(__name__)


def collect_gauges() -> dict[str, float | int]:
    """Process uptime (s), resident memory (MB) and 1-minute load average."""
    process = psutil.Process()
    uptime = int(time.time() - process.create_time())
    memory_mb = round(process.memory_info().rss / (1024 * 1024))
    try:
        load = os.getloadavg()[0]
    except (AttributeError, OSError):
        load = psutil.cpu_percent(interval=None) / 100.0
    return {"uptime": uptime, "memory_usage": memory_mb, "cpu_usage": round(load, 2)}


def touch_heartbeat(db: Session, gauges: dict | None = None) -> None:
    """Mark the display online with last_ping=now, creating the row if absent.

    Single-statement upsert; commits.
    """
    now = datetime.now(UTC)
    values: dict = {"id": SYSTEM_STATE_ID, "online": True, "last_ping": now}
    if gauges:
        values.update(gauges)
    stmt = dialect_insert(db, SystemState).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[SystemState.id],
        set_={key: value for key, value in values.items() if key != "id"},
    )
    db.execute(stmt)
    db.commit()


def get_or_create_system_state(db: Session) -> SystemState:
    """The singleton state row. A first read creates it online with zeroed gauges."""
    state = db.get(SystemState, SYSTEM_STATE_ID)
    if state is None:
        state = SystemState(
            id=SYSTEM_STATE_ID,
            online=True,
            last_ping=datetime.now(UTC),
            uptime=0,
            memory_usage=0,
            cpu_usage=0,
        )
        db.add(state)
        db.commit()
        db.refresh(state)
    return state
