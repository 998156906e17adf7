"""Entry orchestration: classify a transcript, then route it."""

import logging
from dataclasses import dataclass
from uuid import UUID

from voicefit.domain.errors import (
    ExtractionIncomplete,
    InvalidTranscript,
    UnsupportedIntent,
)
from voicefit.domain.interpretation import (
    EntryResult,
    MetricValue,
    QuestionAnswer,
    WorkoutSetInterpretation,
)
from voicefit.services.history import QuestionService
from voicefit.services.intents import IntentClassifier
from voicefit.services.meals import MealInterpreter
from voicefit.services.prompts import resolve_zone
from voicefit.services.workouts import WorkoutSetInterpreter

_logger = logging.getLogger(__name__)


def format_number(value: float | int) -> str:
    """Render ``80.0`` as ``80`` and ``80.5`` as ``80.5``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def workout_draft(interpretation: WorkoutSetInterpretation) -> str:
    details = []
    if interpretation.exercise_type == "cardio":
        if interpretation.duration_minutes is not None:
            details.append(f"{interpretation.duration_minutes} min")
    else:
        if interpretation.reps is not None:
            details.append(f"{interpretation.reps} reps")
        if interpretation.weight_kg is not None:
            details.append(f"{format_number(interpretation.weight_kg)} kg")
    detail_text = f" · {' · '.join(details)}" if details else ""
    return f"Logged {interpretation.exercise_name}{detail_text}"


@dataclass
class EntryService:
    """Single entry point for free-form voice or text entries."""

    classifier: IntentClassifier
    meals: MealInterpreter
    workouts: WorkoutSetInterpreter
    questions: QuestionService

    async def interpret_entry(
        self,
        user_id: UUID,
        transcript: str,
        timezone: str | None = None,
        source: str | None = None,
    ) -> EntryResult:
        """Classify ``transcript`` and return a typed result with a draft reply.

        Nothing is persisted here; the caller confirms and saves the payload.
        """
        if not transcript or not transcript.strip():
            raise InvalidTranscript
        transcript = transcript.strip()
        timezone = resolve_zone(timezone).key
        classification = await self.classifier.classify(transcript)
        intent = classification.intent
        _logger.info(
            "Entry classified",
            extra={
                "user_id": str(user_id),
                "source": source,
                "intent": intent,
                "confidence": classification.confidence,
            },
        )

        if intent == "meal":
            meal = await self.meals.interpret(user_id, transcript, timezone=timezone)
            return EntryResult(
                intent=intent,
                payload=meal,
                system_draft=f"Logged {meal.description} · {meal.calories} kcal",
            )

        if intent == "workout_set":
            workout_set = await self.workouts.interpret(transcript)
            return EntryResult(
                intent=intent,
                payload=workout_set,
                system_draft=workout_draft(workout_set),
            )

        if intent == "weight":
            if classification.weight_kg is None:
                raise ExtractionIncomplete(
                    "Unable to extract a weight value. Please try again."
                )
            return EntryResult(
                intent=intent,
                payload=MetricValue(
                    value=classification.weight_kg,
                    confidence=classification.confidence,
                    assumptions=classification.assumptions,
                    unit="kg",
                ),
                system_draft=(
                    f"Saved weight {format_number(classification.weight_kg)} kg"
                ),
            )

        if intent == "steps":
            if classification.steps is None:
                raise ExtractionIncomplete(
                    "Unable to extract a step count. Please try again."
                )
            return EntryResult(
                intent=intent,
                payload=MetricValue(
                    value=classification.steps,
                    confidence=classification.confidence,
                    assumptions=classification.assumptions,
                    unit="steps",
                ),
                system_draft=f"Saved {classification.steps:,} steps",
            )

        if intent == "question":
            answer = await self.questions.answer(user_id, transcript, timezone)
            return EntryResult(
                intent=intent,
                payload=QuestionAnswer(answer=answer),
                system_draft=answer,
            )

        raise UnsupportedIntent(f"Unsupported entry type: {intent}")
