"""Calendar feed schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, model_validator

from mirror.schemas.base import CamelModel


class CalendarFeedRead(CamelModel):
    id: str
    name: str
    url: str
    enabled: bool
    color: str | None = None
    created_at: datetime
    updated_at: datetime


class CalendarFeedCreate(BaseModel):
    name: str | None = None
    url: str | None = None
    enabled: bool = True
    color: str | None = None

    @model_validator(mode="after")
    def require_name_and_url(self) -> "CalendarFeedCreate":
        if not self.name or not self.url:
            raise ValueError("Name and URL are required")
        return self


class FeedToggle(BaseModel):
    id: str
    enabled: bool


class CalendarFeedBulkUpdate(BaseModel):
    feeds: list[FeedToggle] | None = None

    @model_validator(mode="after")
    def require_feeds(self) -> "CalendarFeedBulkUpdate":
        if not self.feeds:
            raise ValueError("Feeds array is required")
        return self


class CalendarValidateRequest(BaseModel):
    url: str | None = None
