"""AI summary toggle and AI behavior schemas."""

from __future__ import annotations

from typing import Any

from pydantic import model_validator

from mirror.schemas.base import CamelModel
from mirror.services.settings_service import AI_BEHAVIOR_DEFAULTS, AI_SUMMARY_TOGGLES

VERBOSITY = ("low", "medium", "high")
TONES = ("formal", "casual")
HUMOR_LEVELS = ("none", "subtle", "playful")
MORNING_TONES = ("energizing", "neutral", "custom")
EVENING_TONES = ("calming", "neutral", "custom")

MAX_CUSTOM_INSTRUCTIONS = 500
MAX_STOP_SEQUENCES = 10
MAX_USER_NAMES = 10


class AISummarySettingsUpdate(CamelModel):
    """All thirteen context toggles, each a JSON boolean."""

    include_weather_location: bool
    include_feels_like: bool
    include_wind_speed: bool
    include_precipitation: bool
    include_tomorrow_weather: bool
    include_calendar: bool
    include_event_times: bool
    include_time_until_next: bool
    include_all_day_events: bool
    include_commute: bool
    include_commute_deviation: bool
    include_day_date: bool
    include_weekend_detection: bool

    @model_validator(mode="before")
    @classmethod
    def require_booleans(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("Invalid AI summary settings format")
        for field in AI_SUMMARY_TOGGLES:
            if not isinstance(data.get(field), bool):
                raise ValueError(f"Missing or invalid field: {field}. All fields must be boolean.")
        return data


class AIBehaviorSettingsUpdate(CamelModel):
    model: str = AI_BEHAVIOR_DEFAULTS["model"]
    temperature: float = AI_BEHAVIOR_DEFAULTS["temperature"]
    max_tokens: int = AI_BEHAVIOR_DEFAULTS["maxTokens"]
    top_p: float = AI_BEHAVIOR_DEFAULTS["topP"]
    presence_penalty: float = AI_BEHAVIOR_DEFAULTS["presencePenalty"]
    verbosity: str = AI_BEHAVIOR_DEFAULTS["verbosity"]
    tone: str = AI_BEHAVIOR_DEFAULTS["tone"]
    user_names: list[str] = []
    humor_level: str = AI_BEHAVIOR_DEFAULTS["humorLevel"]
    custom_instructions: str = ""
    morning_tone: str = AI_BEHAVIOR_DEFAULTS["morningTone"]
    evening_tone: str = AI_BEHAVIOR_DEFAULTS["eveningTone"]
    stress_aware_enabled: bool = True
    celebration_mode_enabled: bool = True
    stop_sequences: list[str] = []

    @model_validator(mode="after")
    def check_ranges(self) -> "AIBehaviorSettingsUpdate":
        """Collect every problem so the admin sees them all at once."""
        errors: list[str] = []
        if not self.model.strip():
            errors.append("Model is required")
        if not 0 <= self.temperature <= 2:
            errors.append("Temperature must be between 0 and 2")
        if not 50 <= self.max_tokens <= 300:
            errors.append("Max tokens must be between 50 and 300")
        if not 0 <= self.top_p <= 1:
            errors.append("Top-P must be between 0 and 1")
        if not -2 <= self.presence_penalty <= 2:
            errors.append("Presence penalty must be between -2 and 2")
        if self.verbosity not in VERBOSITY:
            errors.append("Verbosity must be low, medium, or high")
        if self.tone not in TONES:
            errors.append("Tone must be formal or casual")
        if self.humor_level not in HUMOR_LEVELS:
            errors.append("Humor level must be none, subtle, or playful")
        if self.morning_tone not in MORNING_TONES:
            errors.append("Morning tone must be energizing, neutral, or custom")
        if self.evening_tone not in EVENING_TONES:
            errors.append("Evening tone must be calming, neutral, or custom")
        if len(self.custom_instructions) > MAX_CUSTOM_INSTRUCTIONS:
            errors.append("Custom instructions must be 500 characters or less")
        if len(self.stop_sequences) > MAX_STOP_SEQUENCES:
            errors.append("Maximum 10 stop sequences allowed")
        if len(self.user_names) > MAX_USER_NAMES:
            errors.append("Maximum 10 user names allowed")
        if errors:
            raise ValueError("; ".join(errors))
        return self
