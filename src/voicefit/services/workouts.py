"""Workout set interpretation."""

from dataclasses import dataclass

from voicefit.domain.errors import InvalidTranscript
from voicefit.domain.inference import UserTurn
from voicefit.domain.interpretation import WorkoutSetInterpretation
from voicefit.services.exercises import normalize_exercise_name
from voicefit.services.inference import InferenceClient, parse_structured
from voicefit.services.prompts import build_workout_prompt
from voicefit.services.schema_validation import OUTPUT_SCHEMAS, SchemaKind

_EMPTY_OUTPUT_MESSAGE = "Failed to interpret workout set. Please try again."


@dataclass
class WorkoutSetInterpreter:
    """Turns a workout transcript into a single validated set."""

    client: InferenceClient
    model: str
    reasoning_effort: str | None = None

    async def interpret(self, transcript: str) -> WorkoutSetInterpretation:
        if not transcript or not transcript.strip():
            raise InvalidTranscript
        prompt = build_workout_prompt(transcript.strip())
        response = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            system=prompt.system,
            turns=[UserTurn(prompt.user)],
            schema=OUTPUT_SCHEMAS[SchemaKind.WORKOUT_SET],
        )
        interpretation = parse_structured(
            response.text, SchemaKind.WORKOUT_SET, _EMPTY_OUTPUT_MESSAGE
        )
        if interpretation.exercise_type == "resistance":
            # Cardio names are free-form and stay as the model wrote them.
            return interpretation.model_copy(
                update={
                    "exercise_name": normalize_exercise_name(
                        interpretation.exercise_name
                    )
                }
            )
        return interpretation
