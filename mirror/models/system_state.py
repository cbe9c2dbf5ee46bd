"""SystemState model."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mirror.db.session import Base

SYSTEM_STATE_ID = "mirror"


class SystemState(Base):
    """Display liveness row (id is always ``mirror``). Not a source of configuration."""

    __tablename__ = "system_state"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=SYSTEM_STATE_ID)
    online: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_ping: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    uptime: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # seconds
    memory_usage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # MB
    cpu_usage: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)  # load avg
