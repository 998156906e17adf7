"""Tools the meal interpreter may call to look up earlier records."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from uuid import UUID

from voicefit.domain.errors import ToolExecutionFailure
from voicefit.domain.inference import ToolCallRequest, ToolDefinition
from voicefit.domain.interpretation import MEAL_TYPES
from voicefit.domain.records import MealRecord
from voicefit.services.history import HistoryRepository
from voicefit.services.prompts import InterpretationContext, format_clock

SEARCH_PREVIOUS_MEALS = "searchPreviousMeals"
DEFAULT_DAYS_AGO = 1

SEARCH_PREVIOUS_MEALS_TOOL = ToolDefinition(
    name=SEARCH_PREVIOUS_MEALS,
    description=(
        "Search for the user's previous meals to reference when they mention "
        "eating the same thing as before. Returns meals from a single past day."
    ),
    parameters={
        "type": "object",
        "properties": {
            "daysAgo": {
                "type": "integer",
                "description": (
                    "Number of days in the past to search (1 for yesterday, "
                    "2 for day before, etc.). Defaults to 1."
                ),
            },
            "mealType": {
                "type": "string",
                "description": (
                    "Filter by meal type: breakfast, lunch, dinner, or snack. "
                    "Optional."
                ),
                "enum": list(MEAL_TYPES),
            },
        },
        "required": [],
    },
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MealSummary:
    """Prior meal as shown to the model."""

    date: str
    time: str
    meal_type: str
    description: str
    calories: int

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date,
            "time": self.time,
            "mealType": self.meal_type,
            "description": self.description,
            "calories": self.calories,
        }


@dataclass(frozen=True)
class ToolResult:
    """Output of one tool execution, fed back to the model."""

    call_id: str
    meals: list[MealSummary] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps({"meals": [meal.to_dict() for meal in self.meals]})


@dataclass
class ToolExecutor:
    """Executes model-requested tools against the record store."""

    repository: HistoryRepository

    async def execute(
        self,
        request: ToolCallRequest,
        *,
        user_id: UUID,
        context: InterpretationContext,
    ) -> ToolResult:
        if request.name != SEARCH_PREVIOUS_MEALS:
            raise ToolExecutionFailure(f"Unknown tool requested: {request.name}")

        days_ago = _days_ago(request.arguments.get("daysAgo"))
        meal_type = _meal_type_filter(request.arguments.get("mealType"))
        target = (context.local_time - timedelta(days=days_ago)).date()
        start = datetime.combine(target, time.min, tzinfo=context.zone)
        end = datetime.combine(target, time.max, tzinfo=context.zone)
        _logger.info(
            "Searching previous meals",
            extra={
                "user_id": str(user_id),
                "days_ago": days_ago,
                "meal_type": meal_type,
            },
        )
        try:
            meals = await asyncio.to_thread(
                self.repository.list_meals, user_id, start, end, meal_type
            )
        except Exception as exc:
            _logger.exception(
                "Previous meal lookup failed", extra={"user_id": str(user_id)}
            )
            raise ToolExecutionFailure from exc
        return ToolResult(
            call_id=request.call_id,
            meals=[_summarize(meal, context) for meal in meals],
        )


def _days_ago(value: object) -> int:
    """Return a positive day offset, falling back to yesterday."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_DAYS_AGO
    return value


def _meal_type_filter(value: object) -> str | None:
    if value is None:
        return None
    if value not in MEAL_TYPES:
        _logger.warning("Ignoring unknown mealType filter: %r", value)
        return None
    return str(value)


def _summarize(meal: MealRecord, context: InterpretationContext) -> MealSummary:
    local = meal.eaten_at.astimezone(context.zone)
    return MealSummary(
        date=f"{local:%a}, {local:%b} {local.day}",
        time=format_clock(local),
        meal_type=meal.meal_type,
        description=meal.description,
        calories=meal.calories,
    )
