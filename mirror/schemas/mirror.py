"""Mirror status and refresh schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from mirror.schemas.base import CamelModel


class MirrorState(CamelModel):
    online: bool
    last_ping: datetime | None = None
    uptime: int
    memory_usage: int
    cpu_usage: float


class ConfigInfo(CamelModel):
    version: int
    last_updated: datetime | None = None


class WidgetCounts(CamelModel):
    enabled: int
    total: int


class ActivityEntry(CamelModel):
    id: int
    action: str
    category: str
    details: Any = None
    created_at: datetime
    user: str


class MirrorStatus(CamelModel):
    status: MirrorState
    config: ConfigInfo
    widgets: WidgetCounts
    recent_activity: list[ActivityEntry]


class RefreshResponse(CamelModel):
    success: bool = True
    message: str
    config_version: int
