"""Structured interpretation results produced from transcripts."""

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
)
from pydantic.alias_generators import to_camel

MealType = Literal["breakfast", "lunch", "dinner", "snack"]
ExerciseType = Literal["resistance", "cardio"]
Intent = Literal["meal", "workout_set", "weight", "steps", "question"]

MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack")
INTENTS: tuple[str, ...] = ("meal", "workout_set", "weight", "steps", "question")


class _CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        frozen=True,
    )


class MealInterpretation(_CamelModel):
    """Meal extracted from a transcript."""

    meal_type: MealType
    description: str
    calories: int = Field(ge=0)
    confidence: float = Field(ge=0.0, le=1.0)
    assumptions: list[str]


class WorkoutSetInterpretation(_CamelModel):
    """Single workout set extracted from a transcript."""

    exercise_name: str
    exercise_type: ExerciseType
    reps: NonNegativeInt | None
    weight_kg: NonNegativeFloat | None
    duration_minutes: NonNegativeInt | None
    notes: str | None
    confidence: float = Field(ge=0.0, le=1.0)
    assumptions: list[str]


class IntentClassification(_CamelModel):
    """Routing decision for a transcript."""

    intent: Intent
    confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    weight_kg: NonNegativeFloat | None = None
    steps: NonNegativeInt | None = None
    assumptions: list[str] = Field(default_factory=list)


class MetricValue(_CamelModel):
    """Weight or step count taken directly from the classifier."""

    value: int | float
    confidence: float
    assumptions: list[str]
    unit: Literal["kg", "steps"]


class QuestionAnswer(_CamelModel):
    """Free-form answer to a question about past logs."""

    answer: str


EntryPayload = (
    MealInterpretation
    | WorkoutSetInterpretation
    | MetricValue
    | QuestionAnswer
)


class EntryResult(_CamelModel):
    """Outcome of interpreting a single free-form entry."""

    intent: Intent
    payload: EntryPayload
    system_draft: str
