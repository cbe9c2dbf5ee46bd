"""ConfigVersion model."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mirror.db.session import Base

CONFIG_VERSION_ID = "current"


class ConfigVersion(Base):
    """Singleton counter bumped by every admin mutation (id is always ``current``)."""

    __tablename__ = "config_versions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=CONFIG_VERSION_ID)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), nullable=False
    )
