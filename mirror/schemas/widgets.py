"""Widget schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator


class WidgetChange(BaseModel):
    id: str
    enabled: bool | None = None
    order: int | None = None
    settings: dict[str, Any] | None = None


class WidgetBulkUpdate(BaseModel):
    widgets: list[WidgetChange] | None = None

    @model_validator(mode="after")
    def require_widgets(self) -> "WidgetBulkUpdate":
        if self.widgets is None:
            raise ValueError("Invalid widgets format")
        return self
