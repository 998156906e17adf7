"""Tests for prompt assembly."""

from datetime import UTC, datetime

import pytest

from voicefit.domain.errors import InvalidTimezone
from voicefit.services.exercises import EXERCISES
from voicefit.services.prompts import (
    InterpretationContext,
    build_classifier_prompt,
    build_meal_prompt,
    build_question_prompt,
    build_workout_prompt,
    format_clock,
    resolve_zone,
)


def test_meal_prompt_prefixes_time_and_meal_type() -> None:
    context = InterpretationContext.create(
        reference_time=datetime(2025, 10, 18, 12, 30, tzinfo=UTC),
        meal_type="lunch",
    )

    prompt = build_meal_prompt("turkey sandwich", context)

    assert prompt.user == (
        "[Time: Saturday, October 18 at 12:30 PM, Meal type: lunch] turkey sandwich"
    )
    assert "nearest 10" in prompt.system
    assert "nearest 50" in prompt.system


def test_meal_prompt_omits_missing_meal_type_and_uses_timezone() -> None:
    context = InterpretationContext.create(
        reference_time=datetime(2025, 10, 18, 3, 5, tzinfo=UTC),
        timezone="America/New_York",
    )

    prompt = build_meal_prompt("oatmeal", context)

    assert prompt.user == "[Time: Friday, October 17 at 11:05 PM] oatmeal"


def test_naive_reference_time_is_treated_as_utc() -> None:
    context = InterpretationContext.create(reference_time=datetime(2025, 1, 1, 8))

    assert context.reference_time.tzinfo is UTC
    assert context.timezone == "UTC"


def test_format_clock_handles_midnight_and_noon() -> None:
    assert format_clock(datetime(2025, 1, 1, 0, 7)) == "12:07 AM"
    assert format_clock(datetime(2025, 1, 1, 12, 0)) == "12:00 PM"


def test_workout_prompt_lists_every_exercise_and_conversions() -> None:
    prompt = build_workout_prompt("bench 3x8 at 185 lbs")

    assert prompt.user == "bench 3x8 at 185 lbs"
    for name in EXERCISES:
        assert name in prompt.system
    assert "0.453592" in prompt.system
    assert "20 kg" in prompt.system


def test_classifier_prompt_mentions_every_intent() -> None:
    prompt = build_classifier_prompt("walked 10k steps")

    for intent in ("meal", "workout_set", "weight", "steps", "question"):
        assert f'"{intent}"' in prompt.system
    assert "10k" in prompt.system
    assert prompt.user == "walked 10k steps"


def test_question_prompt_includes_blocks_and_optional_patterns() -> None:
    prompt = build_question_prompt(
        "how many calories yesterday?",
        start="2025-10-12",
        end="2025-10-18",
        totals="calories 1200",
        meals="Oct 17 8:00 AM · breakfast · Eggs (300 kcal)",
        metrics="No daily metrics logged.",
        workouts="No workouts logged.",
    )

    assert "User question: how many calories yesterday?" in prompt.user
    assert "Period: 2025-10-12 to 2025-10-18" in prompt.user
    assert "Eggs (300 kcal)" in prompt.user
    assert "Workout patterns" not in prompt.user
    assert "Do not invent values." in prompt.system

    with_patterns = build_question_prompt(
        "what do I train on monday?",
        start="2025-09-21",
        end="2025-10-18",
        totals="",
        meals="",
        metrics="",
        workouts="",
        patterns="Workout patterns for Monday (last 4 weeks):\n- Squat (2 sessions)",
    )

    assert "- Squat (2 sessions)" in with_patterns.user


def test_resolve_zone_defaults_to_utc() -> None:
    assert resolve_zone(None).key == "UTC"
    assert resolve_zone("").key == "UTC"
    assert resolve_zone("Europe/Berlin").key == "Europe/Berlin"


@pytest.mark.parametrize("name", ["Mars/Base", "../etc/passwd"])
def test_unknown_timezone_is_rejected(name: str) -> None:
    with pytest.raises(InvalidTimezone):
        InterpretationContext.create(
            reference_time=datetime(2025, 1, 1, tzinfo=UTC), timezone=name
        )
