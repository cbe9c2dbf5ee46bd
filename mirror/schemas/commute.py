"""Commute route schemas."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from mirror.models.commute_route import WEEKDAYS
from mirror.schemas.base import CamelModel, parse_coordinate

ARRIVAL_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


class CommuteRouteRead(CamelModel):
    id: str
    name: str
    origin_lat: float
    origin_lon: float
    dest_lat: float
    dest_lon: float
    arrival_time: str
    days_active: str
    enabled: bool
    created_at: datetime
    updated_at: datetime


def valid_days_active(value: str) -> bool:
    days = [d.strip() for d in value.split(",")]
    return all(d.isdigit() and 0 <= int(d) <= 6 for d in days)


class CommuteRouteCreate(CamelModel):
    name: str | None = None
    origin_lat: str | float | None = None
    origin_lon: str | float | None = None
    dest_lat: str | float | None = None
    dest_lon: str | float | None = None
    arrival_time: str | None = None
    days_active: str | None = None
    enabled: bool = True

    # Parsed coordinates, filled by the validator
    coordinates: tuple[float, float, float, float] | None = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def validate_route(self) -> "CommuteRouteCreate":
        raw = (self.origin_lat, self.origin_lon, self.dest_lat, self.dest_lon)
        if not self.name or any(v is None or v == "" for v in raw) or not self.arrival_time:
            raise ValueError(
                "Name, origin coordinates, destination coordinates, and arrival time are required"
            )
        checks = (
            (self.origin_lat, 90, "Origin latitude must be between -90 and 90"),
            (self.origin_lon, 180, "Origin longitude must be between -180 and 180"),
            (self.dest_lat, 90, "Destination latitude must be between -90 and 90"),
            (self.dest_lon, 180, "Destination longitude must be between -180 and 180"),
        )
        parsed = []
        for value, bound, message in checks:
            number = parse_coordinate(value, -bound, bound)
            if number is None:
                raise ValueError(message)
            parsed.append(number)
        if not ARRIVAL_TIME_RE.match(self.arrival_time):
            raise ValueError("Arrival time must be in HH:MM format (e.g., 08:00)")
        if self.days_active and not valid_days_active(self.days_active):
            raise ValueError(
                "Days active must be comma-separated numbers 0-6 (0=Sunday, 6=Saturday)"
            )
        self.coordinates = tuple(parsed)
        return self

    @property
    def days(self) -> str:
        return self.days_active or WEEKDAYS


class RouteToggle(BaseModel):
    id: str
    enabled: bool


class CommuteRouteBulkUpdate(BaseModel):
    routes: list[RouteToggle] | None = None

    @model_validator(mode="after")
    def require_routes(self) -> "CommuteRouteBulkUpdate":
        if not self.routes:
            raise ValueError("Routes array is required")
        return self
