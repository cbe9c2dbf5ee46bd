"""Admin account."""

from datetime import UTC, datetime

import bcrypt
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mirror.db.session import Base


class User(Base):
    """Someone allowed into the admin portal. Emails are stored lowercased."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(32), default="admin", nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    def set_password(self, password: str) -> None:
        digest = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        self.password_hash = digest.decode("utf-8")

    def verify_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))

    @property
    def display_name(self) -> str:
        """Name shown in the activity feed."""
        return self.name or self.email
