"""Generic setting schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator


class SettingValue(BaseModel):
    id: str
    value: Any = None


class SettingsBulkUpdate(BaseModel):
    settings: list[SettingValue] | None = None

    @model_validator(mode="after")
    def require_settings(self) -> "SettingsBulkUpdate":
        if self.settings is None:
            raise ValueError("Invalid settings format")
        return self


class SettingCreate(BaseModel):
    id: str | None = None
    value: Any = None
    category: str | None = None
    label: str | None = None
    encrypted: bool = False

    @model_validator(mode="before")
    @classmethod
    def require_fields(cls, data: Any) -> Any:
        # value may legitimately be null, but it must be present
        if not isinstance(data, dict) or not data.get("id") or "value" not in data or not data.get(
            "category"
        ):
            raise ValueError("Missing required fields: id, value, category")
        return data
