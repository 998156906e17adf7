"""Tests for entry orchestration."""

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import UUID

import pytest

from voicefit.containers import AppContainer
from voicefit.domain.errors import (
    ExtractionIncomplete,
    InvalidTimezone,
    InvalidTranscript,
    MalformedOutput,
    UnsupportedIntent,
)
from voicefit.domain.inference import InferenceResponse
from voicefit.domain.interpretation import (
    IntentClassification,
    MealInterpretation,
    MetricValue,
    QuestionAnswer,
    WorkoutSetInterpretation,
)
from voicefit.services.entries import EntryService, format_number, workout_draft
from tests.conftest import (
    FakeInferenceClient,
    intent_payload,
    meal_payload,
    text_response,
    workout_payload,
)


def _interpret(container: AppContainer, user_id: UUID, transcript: str):
    return asyncio.run(
        container.entry_service.interpret_entry(user_id, transcript, timezone="UTC")
    )


def test_meal_entry_routes_to_meal_interpreter(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    inference_client.queue(
        text_response(intent_payload("meal")),
        text_response(meal_payload()),
    )

    result = _interpret(container, user_id, "turkey sandwich and chips for lunch")

    assert result.intent == "meal"
    assert isinstance(result.payload, MealInterpretation)
    assert result.system_draft == "Logged Turkey sandwich with chips · 650 kcal"
    assert inference_client.calls[0]["model"] == "gpt-5-mini"
    assert inference_client.calls[1]["model"] == "gpt-5.2"


def test_workout_entry_builds_resistance_draft(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    inference_client.queue(
        text_response(intent_payload("workout_set")),
        text_response(workout_payload()),
    )

    result = _interpret(container, user_id, "bench press 8 reps 80 kilos")

    assert isinstance(result.payload, WorkoutSetInterpretation)
    assert result.system_draft == "Logged Bench Press · 8 reps · 80 kg"


def test_weight_entry_uses_classifier_value(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    inference_client.queue(
        text_response(
            intent_payload("weight", weightKg=68.0, assumptions=["150 lb"])
        )
    )

    result = _interpret(container, user_id, "weighed in at 150 pounds")

    assert result.intent == "weight"
    assert result.payload == MetricValue(
        value=68.0, confidence=0.9, assumptions=["150 lb"], unit="kg"
    )
    assert result.system_draft == "Saved weight 68 kg"
    assert len(inference_client.calls) == 1


def test_steps_entry_formats_thousands(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    inference_client.queue(text_response(intent_payload("steps", steps=10000)))

    result = _interpret(container, user_id, "10k steps")

    assert result.payload.value == 10000
    assert result.payload.unit == "steps"
    assert result.system_draft == "Saved 10,000 steps"


@pytest.mark.parametrize("intent", ["weight", "steps"])
def test_metric_without_value_is_incomplete(
    container: AppContainer,
    inference_client: FakeInferenceClient,
    user_id: UUID,
    intent: str,
) -> None:
    inference_client.queue(text_response(intent_payload(intent)))

    with pytest.raises(ExtractionIncomplete):
        _interpret(container, user_id, "log my numbers")


def test_question_entry_answers_from_history(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    inference_client.queue(
        text_response(intent_payload("question")),
        InferenceResponse(text="You haven't logged any meals this week yet."),
    )

    result = _interpret(container, user_id, "how much did I eat this week?")

    assert result.intent == "question"
    assert result.payload == QuestionAnswer(
        answer="You haven't logged any meals this week yet."
    )
    assert result.system_draft == result.payload.answer
    question_call = inference_client.calls[1]
    assert "how much did I eat this week?" in question_call["turns"][0].text
    assert question_call["schema"] is None


def test_serialized_result_uses_camel_case(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    inference_client.queue(text_response(intent_payload("steps", steps=4200)))

    data = _interpret(container, user_id, "4200 steps").model_dump(
        by_alias=True, mode="json"
    )

    assert data == {
        "intent": "steps",
        "payload": {
            "value": 4200,
            "confidence": 0.9,
            "assumptions": [],
            "unit": "steps",
        },
        "systemDraft": "Saved 4,200 steps",
    }


def test_malformed_classifier_output_propagates(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    inference_client.queue(InferenceResponse(text="not json"))

    with pytest.raises(MalformedOutput):
        _interpret(container, user_id, "something")

    assert len(inference_client.calls) == 1


def test_blank_transcript_is_rejected(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    with pytest.raises(InvalidTranscript):
        _interpret(container, user_id, "\n  ")

    assert inference_client.calls == []


def test_cardio_draft_shows_minutes_only() -> None:
    interpretation = WorkoutSetInterpretation.model_validate(
        workout_payload(
            exerciseName="Running",
            exerciseType="cardio",
            reps=None,
            weightKg=None,
            durationMinutes=30,
        )
    )

    assert workout_draft(interpretation) == "Logged Running · 30 min"


def test_draft_without_details() -> None:
    interpretation = WorkoutSetInterpretation.model_validate(
        workout_payload(exerciseName="Plank", reps=None, weightKg=None)
    )

    assert workout_draft(interpretation) == "Logged Plank"


def test_format_number_drops_trailing_zero() -> None:
    assert format_number(80.0) == "80"
    assert format_number(82.5) == "82.5"
    assert format_number(10) == "10"


def test_unknown_timezone_is_rejected_before_classification(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    with pytest.raises(InvalidTimezone):
        asyncio.run(
            container.entry_service.interpret_entry(
                user_id, "10k steps", timezone="Mars/Base"
            )
        )

    assert inference_client.calls == []


@dataclass
class _FixedClassifier:
    classification: IntentClassification
    transcripts: list[str] = field(default_factory=list)

    async def classify(self, transcript: str) -> IntentClassification:
        self.transcripts.append(transcript)
        return self.classification


def test_unrouted_intent_raises_unsupported(
    container: AppContainer, inference_client: FakeInferenceClient, user_id: UUID
) -> None:
    classifier = _FixedClassifier(
        IntentClassification.model_construct(
            intent="sleep",
            confidence=0.9,
            weight_kg=None,
            steps=None,
            assumptions=[],
        )
    )
    service = EntryService(
        classifier=classifier,
        meals=container.entry_service.meals,
        workouts=container.entry_service.workouts,
        questions=container.entry_service.questions,
    )

    with pytest.raises(UnsupportedIntent) as exc_info:
        asyncio.run(service.interpret_entry(user_id, " slept 8 hours ", "UTC"))

    assert classifier.transcripts == ["slept 8 hours"]
    assert inference_client.calls == []
    assert "sleep" in exc_info.value.message


def test_entry_source_is_logged(
    container: AppContainer,
    inference_client: FakeInferenceClient,
    user_id: UUID,
    caplog: pytest.LogCaptureFixture,
) -> None:
    inference_client.queue(text_response(intent_payload("steps", steps=5000)))
    logger = logging.getLogger("voicefit.services.entries")
    previous_level = logger.level
    logger.addHandler(caplog.handler)
    logger.setLevel(logging.INFO)
    try:
        asyncio.run(
            container.entry_service.interpret_entry(
                user_id, "5000 steps", timezone="UTC", source="voice"
            )
        )
    finally:
        logger.removeHandler(caplog.handler)
        logger.setLevel(previous_level)

    records = [
        record
        for record in caplog.records
        if record.getMessage() == "Entry classified"
    ]
    assert len(records) == 1
    assert records[0].source == "voice"
    assert records[0].intent == "steps"
