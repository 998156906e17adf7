"""Validation of model output against the interpretation contracts."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from voicefit.domain.errors import FieldViolation
from voicefit.domain.inference import OutputSchema
from voicefit.domain.interpretation import (
    INTENTS,
    MEAL_TYPES,
    IntentClassification,
    MealInterpretation,
    WorkoutSetInterpretation,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SchemaKind(StrEnum):
    """Output contracts the pipeline knows how to validate."""

    MEAL = "meal_interpretation"
    WORKOUT_SET = "workout_set_interpretation"
    INTENT = "intent_classification"


@dataclass(frozen=True)
class ValidResult(Generic[ModelT]):
    """Successful validation carrying the typed value."""

    value: ModelT


@dataclass(frozen=True)
class ValidationFailure:
    """Failed validation listing every violated field."""

    kind: SchemaKind
    violations: list[FieldViolation]


_MODELS: dict[SchemaKind, type[BaseModel]] = {
    SchemaKind.MEAL: MealInterpretation,
    SchemaKind.WORKOUT_SET: WorkoutSetInterpretation,
    SchemaKind.INTENT: IntentClassification,
}


def _nullable(schema: dict[str, object]) -> dict[str, object]:
    return {"anyOf": [schema, {"type": "null"}]}


_CONFIDENCE = {"type": "number", "minimum": 0.0, "maximum": 1.0}
_ASSUMPTIONS = {"type": "array", "items": {"type": "string"}}

MEAL_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "mealType": {"type": "string", "enum": list(MEAL_TYPES)},
        "description": {"type": "string"},
        "calories": {"type": "integer", "minimum": 0},
        "confidence": _CONFIDENCE,
        "assumptions": _ASSUMPTIONS,
    },
    "required": ["mealType", "description", "calories", "confidence", "assumptions"],
    "additionalProperties": False,
}

WORKOUT_SET_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "exerciseName": {"type": "string"},
        "exerciseType": {"type": "string", "enum": ["resistance", "cardio"]},
        "reps": _nullable({"type": "integer", "minimum": 0}),
        "weightKg": _nullable({"type": "number", "minimum": 0}),
        "durationMinutes": _nullable({"type": "integer", "minimum": 0}),
        "notes": _nullable({"type": "string"}),
        "confidence": _CONFIDENCE,
        "assumptions": _ASSUMPTIONS,
    },
    "required": [
        "exerciseName",
        "exerciseType",
        "reps",
        "weightKg",
        "durationMinutes",
        "notes",
        "confidence",
        "assumptions",
    ],
    "additionalProperties": False,
}

INTENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "intent": {"type": "string", "enum": list(INTENTS)},
        "confidence": _CONFIDENCE,
        "weightKg": _nullable({"type": "number", "minimum": 0}),
        "steps": _nullable({"type": "integer", "minimum": 0}),
        "assumptions": _ASSUMPTIONS,
    },
    "required": ["intent", "confidence", "weightKg", "steps", "assumptions"],
    "additionalProperties": False,
}

OUTPUT_SCHEMAS: dict[SchemaKind, OutputSchema] = {
    SchemaKind.MEAL: OutputSchema(name=SchemaKind.MEAL.value, schema=MEAL_SCHEMA),
    SchemaKind.WORKOUT_SET: OutputSchema(
        name=SchemaKind.WORKOUT_SET.value, schema=WORKOUT_SET_SCHEMA
    ),
    SchemaKind.INTENT: OutputSchema(name=SchemaKind.INTENT.value, schema=INTENT_SCHEMA),
}


def validate(value: object, kind: SchemaKind) -> ValidResult | ValidationFailure:
    """Validate a parsed JSON value against the contract for ``kind``.

    Field-level problems (missing keys, wrong types, enum and range errors)
    and cross-field rules are all collected; the first problem found never
    hides the rest. This function does not raise.
    """
    model = _MODELS[kind]
    if not isinstance(value, dict):
        return ValidationFailure(
            kind=kind,
            violations=[
                FieldViolation(
                    field="$", reason=f"expected an object, got {_type_name(value)}"
                )
            ],
        )
    try:
        parsed = model.model_validate(value)
    except ValidationError as exc:
        return ValidationFailure(kind=kind, violations=_from_pydantic(exc))

    violations = _consistency_violations(parsed)
    if violations:
        return ValidationFailure(kind=kind, violations=violations)
    return ValidResult(value=parsed)


def _from_pydantic(exc: ValidationError) -> list[FieldViolation]:
    violations = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"]) or "$"
        violations.append(FieldViolation(field=location, reason=error["msg"]))
    return violations


def _consistency_violations(parsed: BaseModel) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    if isinstance(parsed, WorkoutSetInterpretation):
        if parsed.exercise_type == "cardio":
            if parsed.reps is not None:
                violations.append(
                    FieldViolation("reps", "must be null for cardio exercises")
                )
            if parsed.weight_kg is not None:
                violations.append(
                    FieldViolation("weightKg", "must be null for cardio exercises")
                )
        elif parsed.duration_minutes is not None:
            violations.append(
                FieldViolation(
                    "durationMinutes", "must be null for resistance exercises"
                )
            )
    if isinstance(parsed, IntentClassification):
        if parsed.intent != "weight" and parsed.weight_kg is not None:
            violations.append(
                FieldViolation("weightKg", "must be null unless intent is 'weight'")
            )
        if parsed.intent != "steps" and parsed.steps is not None:
            violations.append(
                FieldViolation("steps", "must be null unless intent is 'steps'")
            )
    return violations


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, list):
        return "array"
    return type(value).__name__
