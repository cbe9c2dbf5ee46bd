"""CommuteRoute model."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from mirror.db.session import Base

WEEKDAYS = "1,2,3,4,5"


class CommuteRoute(Base):
    """Traffic-aware commute between two coordinates with a target arrival time."""

    __tablename__ = "commute_routes"

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    origin_lat: Mapped[float] = mapped_column(Float, nullable=False)
    origin_lon: Mapped[float] = mapped_column(Float, nullable=False)
    dest_lat: Mapped[float] = mapped_column(Float, nullable=False)
    dest_lon: Mapped[float] = mapped_column(Float, nullable=False)
    arrival_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    days_active: Mapped[str] = mapped_column(
        String(32), default=WEEKDAYS, nullable=False
    )  # 0=Sunday .. 6=Saturday
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def active_days(self) -> set[int]:
        return {int(d) for d in self.days_active.split(",") if d.strip().isdigit()}
