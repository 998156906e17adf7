"""Meal interpretation with one optional previous-meal lookup."""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from voicefit.domain.errors import InvalidTranscript
from voicefit.domain.inference import (
    InferenceResponse,
    ToolCallTurn,
    ToolResultTurn,
    Turn,
    UserTurn,
)
from voicefit.domain.interpretation import MealInterpretation
from voicefit.services.inference import InferenceClient, parse_structured
from voicefit.services.prompts import InterpretationContext, build_meal_prompt
from voicefit.services.schema_validation import OUTPUT_SCHEMAS, SchemaKind
from voicefit.services.tools import SEARCH_PREVIOUS_MEALS_TOOL, ToolExecutor

SMALL_MEAL_CALORIES = 500

_EMPTY_OUTPUT_MESSAGE = "Failed to interpret meal. Please try again."

_logger = logging.getLogger(__name__)


def round_calories(calories: int) -> int:
    """Snap to the nearest 10 below 500 kcal and the nearest 50 otherwise."""
    if calories < SMALL_MEAL_CALORIES:
        return (calories + 5) // 10 * 10
    return (calories + 25) // 50 * 50


@dataclass
class MealInterpreter:
    """Turns a meal transcript into a validated interpretation."""

    client: InferenceClient
    tool_executor: ToolExecutor
    model: str
    reasoning_effort: str | None = None

    async def interpret(  # noqa: PLR0913
        self,
        user_id: UUID,
        transcript: str,
        meal_type: str | None = None,
        eaten_at: datetime | None = None,
        timezone: str | None = None,
    ) -> MealInterpretation:
        """Interpret ``transcript``, resolving at most one tool call."""
        if not transcript or not transcript.strip():
            raise InvalidTranscript
        context = InterpretationContext.create(
            reference_time=eaten_at, meal_type=meal_type, timezone=timezone
        )
        prompt = build_meal_prompt(transcript.strip(), context)
        turns: list[Turn] = [UserTurn(prompt.user)]
        response = await self._complete(prompt.system, turns)

        if response.tool_calls:
            call = response.tool_calls[0]
            if len(response.tool_calls) > 1:
                _logger.info(
                    "Model requested %d tool calls; using the first",
                    len(response.tool_calls),
                )
            result = await self.tool_executor.execute(
                call, user_id=user_id, context=context
            )
            turns = [
                *turns,
                ToolCallTurn(call),
                ToolResultTurn(call_id=call.call_id, output=result.to_json()),
            ]
            response = await self._complete(prompt.system, turns)
            if response.tool_calls:
                _logger.warning(
                    "Ignoring tool request after the lookup round-trip",
                    extra={"tool": response.tool_calls[0].name},
                )

        interpretation = parse_structured(
            response.text, SchemaKind.MEAL, _EMPTY_OUTPUT_MESSAGE
        )
        return interpretation.model_copy(
            update={"calories": round_calories(interpretation.calories)}
        )

    async def _complete(self, system: str, turns: list[Turn]) -> InferenceResponse:
        return await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            system=system,
            turns=turns,
            schema=OUTPUT_SCHEMAS[SchemaKind.MEAL],
            tools=[SEARCH_PREVIOUS_MEALS_TOOL],
        )
