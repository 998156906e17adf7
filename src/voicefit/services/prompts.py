"""Prompt assembly for every interpretation task.

All builders are pure: they take the transcript plus context and return the
system instructions and user content to send to the inference service.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from voicefit.domain.errors import InvalidTimezone
from voicefit.services.exercises import EXERCISES

POUNDS_TO_KG = 0.453592
EMPTY_BARBELL_KG = 20
NOON = 12


def resolve_zone(timezone: str | None) -> ZoneInfo:
    """Return the zone for an IANA name, defaulting to UTC."""
    name = timezone or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezone(f"Unknown timezone: {name}") from exc


@dataclass(frozen=True)
class Prompt:
    """System instructions and user content for one inference call."""

    system: str
    user: str


@dataclass(frozen=True)
class InterpretationContext:
    """Per-request context used only for prompt building."""

    reference_time: datetime
    meal_type: str | None = None
    timezone: str = "UTC"

    @classmethod
    def create(
        cls,
        reference_time: datetime | None = None,
        meal_type: str | None = None,
        timezone: str | None = None,
    ) -> "InterpretationContext":
        """Build a context, defaulting the timestamp to now in UTC."""
        zone = resolve_zone(timezone)
        resolved = reference_time or datetime.now(tz=UTC)
        if resolved.tzinfo is None:
            resolved = resolved.replace(tzinfo=UTC)
        return cls(reference_time=resolved, meal_type=meal_type, timezone=zone.key)

    @property
    def zone(self) -> ZoneInfo:
        return resolve_zone(self.timezone)

    @property
    def local_time(self) -> datetime:
        return self.reference_time.astimezone(self.zone)


MEAL_SYSTEM_PROMPT = """You are a nutrition expert assistant. Your task is to analyze meal descriptions and provide calorie estimates.

Given a meal description (which may be a transcript from voice input), you must:
1. Clean up and summarize the meal description
2. Estimate the total calories for the meal
3. Determine the meal type (breakfast, lunch, dinner, or snack) based on context, typical meal patterns, and timestamp if provided
4. Provide a confidence score (0-1) for your estimate
5. List any assumptions you made

Guidelines for calorie estimation:
- Use standard portion sizes unless specified
- Be conservative with estimates (prefer slightly lower if unsure)
- Consider typical restaurant vs home-cooked portions
- Round calories to nearest 10 for estimates under 500, nearest 50 for larger meals

If the user refers to something they ate before ("same as yesterday", "the usual lunch"), call the searchPreviousMeals tool and base the description and calories on the meal it returns.

You MUST respond with valid JSON matching this exact schema:
{
  "mealType": "breakfast" | "lunch" | "dinner" | "snack",
  "description": "cleaned up meal description",
  "calories": integer (estimated total calories),
  "confidence": number between 0 and 1,
  "assumptions": ["array of assumptions made"]
}

Only output the JSON object, no other text."""

WORKOUT_SYSTEM_PROMPT = f"""You are a fitness coach assistant. Your task is to parse workout descriptions from voice input. You handle both resistance training (sets with reps and weight) and cardio/freeform exercises (duration-based activities).

Given a workout description, extract:
1. Exercise name - For resistance training, MUST map to one of the approved exercises. For cardio, use descriptive names like "Running", "Cycling", "Dancing", "Walking", etc.
2. Exercise type - "resistance" for weight/rep-based exercises, "cardio" for duration-based activities
3. For RESISTANCE exercises: number of repetitions (reps) and weight in kilograms
4. For CARDIO exercises: duration in minutes
5. Any relevant notes
6. Confidence score (0-1) for your interpretation
7. Assumptions made during interpretation

APPROVED RESISTANCE EXERCISES:
{", ".join(EXERCISES)}

CARDIO/FREEFORM EXERCISES (examples - not limited to):
Running, Walking, Jogging, Cycling, Swimming, Dancing, Hiking, Jump Rope, Rowing (cardio), Elliptical, Stair Climbing, Boxing, Kickboxing, Yoga, Pilates, Stretching, etc.

Guidelines:
- First determine if this is resistance training (reps/sets/weight) or cardio (duration-based)
- For resistance: Map to closest approved exercise name. Common mappings: "bench" -> "Bench Press", "squats" -> "Squat"
- For cardio: Use clear, descriptive names (capitalize first letters)
- If weight is in pounds, convert to kg (1 lb = {POUNDS_TO_KG} kg, round to nearest 0.5 kg)
- "Empty barbell" typically means {EMPTY_BARBELL_KG} kg - note in assumptions
- For resistance: If reps not mentioned, set to null. If weight not mentioned, set to null. Set durationMinutes to null.
- For cardio: Set reps and weightKg to null. Extract duration (convert hours to minutes if needed)

You MUST respond with valid JSON matching this exact schema:
{{
  "exerciseName": "exercise name string",
  "exerciseType": "resistance" or "cardio",
  "reps": integer or null (for resistance only),
  "weightKg": number or null (for resistance only),
  "durationMinutes": integer or null (for cardio only),
  "notes": "any relevant notes" or null,
  "confidence": number between 0 and 1,
  "assumptions": ["array of assumptions made"]
}}

Only output the JSON object, no other text."""

CLASSIFIER_SYSTEM_PROMPT = f"""You are an intent classifier for a health tracking app.

Classify the user's message into exactly one intent:
- "meal": logging food or drinks eaten
- "workout_set": logging an exercise set or cardio activity
- "weight": logging body weight
- "steps": logging step count
- "question": asking a question about past logs or metrics

Return valid JSON in this format:
{{
  "intent": "meal" | "workout_set" | "weight" | "steps" | "question",
  "confidence": number between 0 and 1,
  "weightKg": number or null,
  "steps": integer or null,
  "assumptions": ["array of assumptions made"]
}}

Rules:
- If intent is "weight", extract the body weight value. Convert pounds to kg (1 lb = {POUNDS_TO_KG}). Round to 1 decimal.
- If intent is "steps", extract the step count. Support shorthand like "10k" or "10,000".
- For other intents, set weightKg and steps to null.
- Only output the JSON object and nothing else."""

QUESTION_SYSTEM_PROMPT = """You are a health tracking assistant. Answer the user's question using only the provided data.
- Be concise (1-3 sentences).
- If the answer isn't available, say you don't have enough data yet.
- Do not invent values.
- Never claim you logged or updated anything."""

QUESTION_TEMPLATE = """User question: {question}

Period: {start} to {end}
Totals: {totals}

Meals (most recent first):
{meals}

Daily metrics (oldest first):
{metrics}

Workouts (most recent first):
{workouts}
{patterns}
Answer:"""


def format_day_label(moment: datetime) -> str:
    """Return e.g. ``Saturday, October 18``."""
    return f"{moment:%A}, {moment:%B} {moment.day}"


def format_short_date(moment: datetime) -> str:
    """Return e.g. ``Oct 18``."""
    return f"{moment:%b} {moment.day}"


def format_clock(moment: datetime) -> str:
    """Return a 12-hour clock label like ``8:15 AM``."""
    hour = moment.hour % NOON or NOON
    suffix = "AM" if moment.hour < NOON else "PM"
    return f"{hour}:{moment:%M} {suffix}"


def build_meal_prompt(transcript: str, context: InterpretationContext) -> Prompt:
    """Build the meal interpretation prompt with a bracketed context prefix."""
    local = context.local_time
    parts = [f"Time: {format_day_label(local)} at {format_clock(local)}"]
    if context.meal_type:
        parts.append(f"Meal type: {context.meal_type}")
    return Prompt(
        system=MEAL_SYSTEM_PROMPT, user=f"[{', '.join(parts)}] {transcript}"
    )


def build_workout_prompt(transcript: str) -> Prompt:
    """Build the workout-set interpretation prompt."""
    return Prompt(system=WORKOUT_SYSTEM_PROMPT, user=transcript)


def build_classifier_prompt(transcript: str) -> Prompt:
    """Build the intent classification prompt."""
    return Prompt(system=CLASSIFIER_SYSTEM_PROMPT, user=transcript)


def build_question_prompt(  # noqa: PLR0913
    question: str,
    *,
    start: str,
    end: str,
    totals: str,
    meals: str,
    metrics: str,
    workouts: str,
    patterns: str | None = None,
) -> Prompt:
    """Fill the answer template with the rendered history blocks."""
    pattern_block = f"\n{patterns}\n" if patterns else ""
    return Prompt(
        system=QUESTION_SYSTEM_PROMPT,
        user=QUESTION_TEMPLATE.format(
            question=question,
            start=start,
            end=end,
            totals=totals,
            meals=meals,
            metrics=metrics,
            workouts=workouts,
            patterns=pattern_block,
        ),
    )
