"""Admin login schemas."""

from __future__ import annotations

from pydantic import Field, field_validator

from mirror.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def strip_email(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Email is required")
        return value


class AdminUser(CamelModel):
    id: int
    email: str
    name: str | None = None
    role: str


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    user: AdminUser
