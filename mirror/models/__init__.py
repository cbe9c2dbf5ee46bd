"""SQLAlchemy models."""

from mirror.models.activity_log import ActivityLog
from mirror.models.calendar_feed import CalendarFeed
from mirror.models.commute_route import CommuteRoute
from mirror.models.config_version import CONFIG_VERSION_ID, ConfigVersion
from mirror.models.setting import Setting
from mirror.models.system_state import SYSTEM_STATE_ID, SystemState
from mirror.models.user import User
from mirror.models.widget import Widget

__all__ = [
    "ActivityLog",
    "CONFIG_VERSION_ID",
    "CalendarFeed",
    "CommuteRoute",
    "ConfigVersion",
    "SYSTEM_STATE_ID",
    "Setting",
    "SystemState",
    "User",
    "Widget",
]
