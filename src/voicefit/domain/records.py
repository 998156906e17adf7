"""Read-only record shapes loaded from the record store."""

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class MealRecord:
    """A previously logged meal."""

    eaten_at: datetime
    meal_type: str
    description: str
    calories: int


@dataclass(frozen=True)
class DailyMetricRecord:
    """Steps and body weight for a single day."""

    date: date
    steps: int | None
    weight_kg: float | None


@dataclass(frozen=True)
class WorkoutSetRecord:
    """A set inside a workout session."""

    exercise_name: str
    reps: int | None = None
    weight_kg: float | None = None
    duration_minutes: int | None = None


@dataclass(frozen=True)
class WorkoutSessionRecord:
    """A workout session with its sets."""

    started_at: datetime
    title: str
    sets: list[WorkoutSetRecord] = field(default_factory=list)
