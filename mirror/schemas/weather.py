"""Weather settings schemas."""

from __future__ import annotations

from pydantic import BaseModel, model_validator

from mirror.schemas.base import parse_coordinate

UNITS = ("fahrenheit", "celsius")


class WeatherSettings(BaseModel):
    latitude: str
    longitude: str
    location: str
    units: str


class WeatherSettingsUpdate(BaseModel):
    latitude: str | float | None = None
    longitude: str | float | None = None
    location: str | None = None
    units: str | None = None

    @model_validator(mode="after")
    def validate_location(self) -> "WeatherSettingsUpdate":
        values = (self.latitude, self.longitude, self.location, self.units)
        if any(v is None or v == "" for v in values):
            raise ValueError("All fields are required: latitude, longitude, location, units")
        if parse_coordinate(self.latitude, -90, 90) is None:
            raise ValueError("Latitude must be a number between -90 and 90")
        if parse_coordinate(self.longitude, -180, 180) is None:
            raise ValueError("Longitude must be a number between -180 and 180")
        if self.units not in UNITS:
            raise ValueError('Units must be either "fahrenheit" or "celsius"')
        return self

    def as_settings(self) -> dict[str, str]:
        """Stored form: coordinates kept as the strings the admin entered."""
        return {
            "latitude": str(self.latitude),
            "longitude": str(self.longitude),
            "location": self.location,
            "units": self.units,
        }
