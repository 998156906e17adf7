"""Request bodies accepted by the HTTP API."""

from datetime import datetime
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from voicefit.domain.interpretation import MealType


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_timezone(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


class InterpretEntryRequest(_RequestModel):
    """Unified entry interpretation request."""

    transcript: str = Field(min_length=1)
    source: Literal["text", "voice", "system"] | None = None
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str | None) -> str | None:
        return _check_timezone(value)


class InterpretMealRequest(_RequestModel):
    """Meal interpretation request."""

    transcript: str = Field(min_length=1)
    meal_type: MealType | None = None
    eaten_at: datetime | None = None
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str | None) -> str | None:
        return _check_timezone(value)


class InterpretWorkoutSetRequest(_RequestModel):
    """Workout set interpretation request."""

    transcript: str = Field(min_length=1)
