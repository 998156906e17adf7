"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID, uuid4

import pytest

from voicefit.config import Settings
from voicefit.containers import AppContainer
from voicefit.domain.errors import TranscriptionUnavailable
from voicefit.domain.inference import (
    InferenceResponse,
    OutputSchema,
    ToolCallRequest,
    ToolDefinition,
    Turn,
)
from voicefit.domain.records import (
    DailyMetricRecord,
    MealRecord,
    WorkoutSessionRecord,
)
from voicefit.services.entries import EntryService
from voicefit.services.history import HistoryRepository, QuestionService
from voicefit.services.inference import InferenceClient
from voicefit.services.intents import IntentClassifier
from voicefit.services.meals import MealInterpreter
from voicefit.services.tools import ToolExecutor
from voicefit.services.transcription import TranscriptionClient, TranscriptionService
from voicefit.services.workouts import WorkoutSetInterpreter

# Unsigned JWT-shaped key; the Supabase client only checks the format.
FAKE_SUPABASE_KEY = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
    "c2lnbmF0dXJl"
)


def text_response(payload: object) -> InferenceResponse:
    """Model reply carrying ``payload`` serialized as JSON text."""
    return InferenceResponse(text=json.dumps(payload))


def tool_response(
    name: str = "searchPreviousMeals",
    arguments: dict[str, object] | None = None,
    call_id: str = "call-1",
) -> InferenceResponse:
    """Model reply that only requests a tool call."""
    return InferenceResponse(
        text=None,
        tool_calls=[
            ToolCallRequest(call_id=call_id, name=name, arguments=arguments or {})
        ],
    )


def meal_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "mealType": "lunch",
        "description": "Turkey sandwich with chips",
        "calories": 650,
        "confidence": 0.8,
        "assumptions": ["Standard deli portion"],
    }
    payload.update(overrides)
    return payload


def workout_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "exerciseName": "Bench Press",
        "exerciseType": "resistance",
        "reps": 8,
        "weightKg": 80.0,
        "durationMinutes": None,
        "notes": None,
        "confidence": 0.9,
        "assumptions": [],
    }
    payload.update(overrides)
    return payload


def intent_payload(intent: str, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "intent": intent,
        "confidence": 0.9,
        "weightKg": None,
        "steps": None,
        "assumptions": [],
    }
    payload.update(overrides)
    return payload


@dataclass
class FakeInferenceClient(InferenceClient):
    """Fake inference client that replays scripted responses."""

    responses: list[InferenceResponse] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    def queue(self, *responses: InferenceResponse) -> None:
        self.responses.extend(responses)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        system: str | None,
        turns: list[Turn],
        schema: OutputSchema | None = None,
        tools: list[ToolDefinition] | None = None,
    ) -> InferenceResponse:
        self.calls.append(
            {
                "model": model,
                "reasoning_effort": reasoning_effort,
                "system": system,
                "turns": list(turns),
                "schema": schema,
                "tools": tools,
            }
        )
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise AssertionError("No scripted inference response left")
        return self.responses.pop(0)


@dataclass
class InMemoryHistoryRepository(HistoryRepository):
    """In-memory history repository for tests."""

    meals: list[MealRecord] = field(default_factory=list)
    metrics: list[DailyMetricRecord] = field(default_factory=list)
    workouts: list[WorkoutSessionRecord] = field(default_factory=list)
    meal_queries: list[tuple[datetime, datetime, str | None]] = field(
        default_factory=list
    )
    error: Exception | None = None

    def list_meals(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
        meal_type: str | None = None,
    ) -> list[MealRecord]:
        self.meal_queries.append((start, end, meal_type))
        if self.error is not None:
            raise self.error
        meals = [
            meal
            for meal in self.meals
            if start <= meal.eaten_at <= end
            and (meal_type is None or meal.meal_type == meal_type)
        ]
        return sorted(meals, key=lambda meal: meal.eaten_at, reverse=True)

    def list_daily_metrics(
        self, user_id: UUID, dates: list[date]
    ) -> list[DailyMetricRecord]:
        if self.error is not None:
            raise self.error
        wanted = set(dates)
        metrics = [metric for metric in self.metrics if metric.date in wanted]
        return sorted(metrics, key=lambda metric: metric.date)

    def list_workout_sessions(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[WorkoutSessionRecord]:
        if self.error is not None:
            raise self.error
        sessions = [
            session
            for session in self.workouts
            if start <= session.started_at <= end
        ]
        return sorted(sessions, key=lambda session: session.started_at, reverse=True)


@dataclass
class FakeTranscriptionClient(TranscriptionClient):
    """Fake transcription client returning a fixed transcript."""

    transcript: str = "two eggs and toast"
    fail: bool = False
    received: list[tuple[bytes, str]] = field(default_factory=list)

    async def transcribe(self, audio: bytes, filename: str) -> str:
        self.received.append((audio, filename))
        if self.fail:
            raise TranscriptionUnavailable
        return self.transcript


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=FAKE_SUPABASE_KEY,
        api_token="api-token",
        openai_api_key="openai-key",
        environment="test",
    )


@pytest.fixture
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def history_repository() -> InMemoryHistoryRepository:
    return InMemoryHistoryRepository()


@pytest.fixture
def transcription_client() -> FakeTranscriptionClient:
    return FakeTranscriptionClient()


@pytest.fixture
def container(
    settings: Settings,
    inference_client: FakeInferenceClient,
    history_repository: InMemoryHistoryRepository,
    transcription_client: FakeTranscriptionClient,
) -> AppContainer:
    meal_interpreter = MealInterpreter(
        client=inference_client,
        tool_executor=ToolExecutor(history_repository),
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
    )
    workout_interpreter = WorkoutSetInterpreter(
        client=inference_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
    )
    entry_service = EntryService(
        classifier=IntentClassifier(
            client=inference_client, model=settings.openai_fast_model
        ),
        meals=meal_interpreter,
        workouts=workout_interpreter,
        questions=QuestionService(
            client=inference_client,
            repository=history_repository,
            model=settings.openai_fast_model,
        ),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        entry_service=entry_service,
        meal_interpreter=meal_interpreter,
        workout_interpreter=workout_interpreter,
        transcription_service=TranscriptionService(transcription_client),
        close_resources=close_resources,
    )
