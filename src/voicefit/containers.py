"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from voicefit.adapters.openai_inference_client import OpenAIInferenceClient
from voicefit.adapters.openai_transcription_client import OpenAITranscriptionClient
from voicefit.adapters.supabase_history_repository import SupabaseHistoryRepository
from voicefit.config import Settings
from voicefit.services.entries import EntryService
from voicefit.services.history import QuestionService
from voicefit.services.intents import IntentClassifier
from voicefit.services.meals import MealInterpreter
from voicefit.services.tools import ToolExecutor
from voicefit.services.transcription import TranscriptionService
from voicefit.services.workouts import WorkoutSetInterpreter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    entry_service: EntryService
    meal_interpreter: MealInterpreter
    workout_interpreter: WorkoutSetInterpreter
    transcription_service: TranscriptionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    history_repository = SupabaseHistoryRepository(supabase_client)
    inference_client = OpenAIInferenceClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
        store=resolved_settings.openai_store,
    )
    transcription_client = OpenAITranscriptionClient(
        client=inference_client.client,
        model=resolved_settings.openai_transcription_model,
    )
    meal_interpreter = MealInterpreter(
        client=inference_client,
        tool_executor=ToolExecutor(history_repository),
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
    )
    workout_interpreter = WorkoutSetInterpreter(
        client=inference_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
    )
    classifier = IntentClassifier(
        client=inference_client,
        model=resolved_settings.openai_fast_model,
        reasoning_effort=resolved_settings.openai_fast_reasoning_effort,
    )
    question_service = QuestionService(
        client=inference_client,
        repository=history_repository,
        model=resolved_settings.openai_fast_model,
        reasoning_effort=resolved_settings.openai_fast_reasoning_effort,
    )
    entry_service = EntryService(
        classifier=classifier,
        meals=meal_interpreter,
        workouts=workout_interpreter,
        questions=question_service,
    )

    async def close_resources() -> None:
        await inference_client.close()

    return AppContainer(
        settings=resolved_settings,
        entry_service=entry_service,
        meal_interpreter=meal_interpreter,
        workout_interpreter=workout_interpreter,
        transcription_service=TranscriptionService(transcription_client),
        close_resources=close_resources,
    )
