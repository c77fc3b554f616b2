from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator


class SettingsSchema(BaseModel):
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    db_path: str = "workout.db"
    offline_fallback: bool = True
    suggestion_days: int = 14
    week_starts_on: int = 0
    log_level: str = "INFO"

    @field_validator("suggestion_days")
    @classmethod
    def _positive_days(cls, value: int) -> int:
        if value < 0:
            raise ValueError("suggestion_days must not be negative")
        return value

    @field_validator("week_starts_on")
    @classmethod
    def _weekday(cls, value: int) -> int:
        if not 0 <= value <= 6:
            raise ValueError("week_starts_on must be between 0 (Monday) and 6")
        return value

    @field_validator("log_level")
    @classmethod
    def _level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value}")
        return value


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
