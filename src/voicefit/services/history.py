"""Question answering grounded in a bounded window of past records."""

import asyncio
import logging
import re
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from voicefit.domain.errors import MalformedOutput, RecordStoreUnavailable
from voicefit.domain.inference import UserTurn
from voicefit.domain.records import (
    DailyMetricRecord,
    MealRecord,
    WorkoutSessionRecord,
)
from voicefit.services.inference import InferenceClient
from voicefit.services.prompts import (
    build_question_prompt,
    format_clock,
    format_short_date,
    resolve_zone,
)

DEFAULT_WINDOW_DAYS = 7
EXTENDED_WINDOW_DAYS = 28
MAX_EXERCISES_PER_WORKOUT = 5

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_RELATIVE_DATE_PATTERN = re.compile(
    r"\b(tomorrow|next|" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE
)
_WEEKDAY_PATTERN = re.compile(r"\b(" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE)
_TOMORROW_PATTERN = re.compile(r"\btomorrow\b", re.IGNORECASE)

_logger = logging.getLogger(__name__)


class HistoryRepository(Protocol):
    """Read-only access to a user's logged records."""

    def list_meals(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
        meal_type: str | None = None,
    ) -> list[MealRecord]:
        """Return meals eaten within [start, end], most recent first."""

    def list_daily_metrics(
        self, user_id: UUID, dates: list[date]
    ) -> list[DailyMetricRecord]:
        """Return daily metrics for the given dates, oldest first."""

    def list_workout_sessions(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[WorkoutSessionRecord]:
        """Return workout sessions started within [start, end], most recent first."""


@dataclass(frozen=True)
class HistoryWindow:
    """Records for the last ``days`` days in the user's timezone."""

    dates: list[date]
    timezone: str
    meals: list[MealRecord]
    metrics: list[DailyMetricRecord]
    workouts: list[WorkoutSessionRecord]

    @property
    def days(self) -> int:
        return len(self.dates)

    @property
    def start(self) -> date:
        return self.dates[0]

    @property
    def end(self) -> date:
        return self.dates[-1]


@dataclass(frozen=True)
class WindowTotals:
    """Aggregates over a history window."""

    calories: int
    steps: int | None
    workouts: int
    weight_avg_kg: float | None
    weight_change_kg: float | None


def window_days_for(question: str) -> int:
    """Return 28 days for weekday or relative-date questions, else 7."""
    if _RELATIVE_DATE_PATTERN.search(question):
        return EXTENDED_WINDOW_DAYS
    return DEFAULT_WINDOW_DAYS


def target_weekday(question: str, today: date) -> str | None:
    """Return the weekday a question is about, if it names one."""
    match = _WEEKDAY_PATTERN.search(question)
    if match:
        return match.group(1).capitalize()
    if _TOMORROW_PATTERN.search(question):
        return f"{today + timedelta(days=1):%A}"
    return None


def window_dates(days: int, today: date) -> list[date]:
    """Return the ``days`` calendar days ending today, oldest first."""
    return [today - timedelta(days=offset) for offset in reversed(range(days))]


def compute_totals(window: HistoryWindow) -> WindowTotals:
    """Sum calories and steps, count workouts, summarize weight."""
    steps_values = [m.steps for m in window.metrics if m.steps is not None]
    weights = [m.weight_kg for m in window.metrics if m.weight_kg is not None]
    weight_change = weights[-1] - weights[0] if len(weights) > 1 else None
    return WindowTotals(
        calories=sum(meal.calories for meal in window.meals),
        steps=sum(steps_values) if steps_values else None,
        workouts=len(window.workouts),
        weight_avg_kg=sum(weights) / len(weights) if weights else None,
        weight_change_kg=weight_change,
    )


def render_totals(totals: WindowTotals) -> str:
    steps = totals.steps if totals.steps is not None else "n/a"
    weight_avg = (
        f"{totals.weight_avg_kg:.1f} kg" if totals.weight_avg_kg is not None else "n/a"
    )
    weight_change = (
        f"{totals.weight_change_kg:+.1f} kg"
        if totals.weight_change_kg is not None
        else "n/a"
    )
    return (
        f"calories {totals.calories}, steps {steps}, workouts {totals.workouts}, "
        f"avg weight {weight_avg}, weight change {weight_change}"
    )


def render_meals(meals: list[MealRecord], zone: ZoneInfo, limit: int) -> str:
    if not meals:
        return "No meals logged."
    lines = []
    for meal in meals[:limit]:
        local = meal.eaten_at.astimezone(zone)
        lines.append(
            f"{format_short_date(local)} {format_clock(local)} · {meal.meal_type} · "
            f"{meal.description} ({meal.calories} kcal)"
        )
    return "\n".join(lines)


def render_metrics(metrics: list[DailyMetricRecord]) -> str:
    if not metrics:
        return "No daily metrics logged."
    lines = []
    for metric in metrics:
        steps = metric.steps if metric.steps is not None else "n/a"
        weight = f"{metric.weight_kg} kg" if metric.weight_kg is not None else "n/a"
        lines.append(f"{metric.date.isoformat()} · steps {steps} · weight {weight}")
    return "\n".join(lines)


def render_workouts(
    workouts: list[WorkoutSessionRecord], zone: ZoneInfo, limit: int
) -> str:
    if not workouts:
        return "No workouts logged."
    lines = []
    for session in workouts[:limit]:
        local = session.started_at.astimezone(zone)
        names = _exercise_names(session)[:MAX_EXERCISES_PER_WORKOUT]
        exercises = f" · {', '.join(names)}" if names else ""
        lines.append(
            f"{format_short_date(local)} {format_clock(local)} · {session.title} · "
            f"{len(session.sets)} sets{exercises}"
        )
    return "\n".join(lines)


def render_weekday_patterns(
    workouts: list[WorkoutSessionRecord], weekday: str, zone: ZoneInfo, days: int
) -> str:
    """Group sessions on ``weekday`` by the set of exercises performed."""
    heading = f"Workout patterns for {weekday} (last {max(days // 7, 1)} weeks):"
    counts: Counter[str] = Counter()
    labels: dict[str, str] = {}
    for session in workouts:
        if f"{session.started_at.astimezone(zone):%A}" != weekday:
            continue
        names = sorted(_exercise_names(session))
        label = " / ".join(names) if names else session.title
        key = label.lower()
        labels.setdefault(key, label)
        counts[key] += 1
    if not counts:
        return f"{heading}\nNo workouts logged for that weekday."
    lines = [heading]
    for key, count in counts.items():
        lines.append(f"- {labels[key]} ({count} session{'' if count == 1 else 's'})")
    return "\n".join(lines)


def _exercise_names(session: WorkoutSessionRecord) -> list[str]:
    seen: dict[str, None] = {}
    for workout_set in session.sets:
        if workout_set.exercise_name:
            seen.setdefault(workout_set.exercise_name, None)
    return list(seen)


@dataclass
class QuestionService:
    """Answers free-text questions using only recent records."""

    client: InferenceClient
    repository: HistoryRepository
    model: str
    reasoning_effort: str | None = None
    max_meals: int = 20
    max_workouts: int = 15

    async def load_window(
        self,
        user_id: UUID,
        question: str,
        timezone: str | None = None,
        now: datetime | None = None,
    ) -> HistoryWindow:
        """Fetch meals, metrics and workouts for the question's window."""
        zone = resolve_zone(timezone)
        today = (now or datetime.now(tz=UTC)).astimezone(zone).date()
        dates = window_dates(window_days_for(question), today)
        start = datetime.combine(dates[0], time.min, tzinfo=zone)
        end = datetime.combine(dates[-1], time.max, tzinfo=zone)
        try:
            meals, metrics, workouts = await asyncio.gather(
                asyncio.to_thread(self.repository.list_meals, user_id, start, end),
                asyncio.to_thread(self.repository.list_daily_metrics, user_id, dates),
                asyncio.to_thread(
                    self.repository.list_workout_sessions, user_id, start, end
                ),
            )
        except Exception as exc:
            _logger.exception(
                "Failed to load history window", extra={"user_id": str(user_id)}
            )
            raise RecordStoreUnavailable from exc
        return HistoryWindow(
            dates=dates,
            timezone=zone.key,
            meals=meals,
            metrics=metrics,
            workouts=workouts,
        )

    async def answer(
        self,
        user_id: UUID,
        question: str,
        timezone: str | None = None,
        now: datetime | None = None,
    ) -> str:
        """Answer ``question`` in one to three sentences."""
        window = await self.load_window(user_id, question, timezone, now)
        zone = resolve_zone(window.timezone)
        weekday = target_weekday(question, window.end)
        prompt = build_question_prompt(
            question,
            start=window.start.isoformat(),
            end=window.end.isoformat(),
            totals=render_totals(compute_totals(window)),
            meals=render_meals(window.meals, zone, self.max_meals),
            metrics=render_metrics(window.metrics),
            workouts=render_workouts(window.workouts, zone, self.max_workouts),
            patterns=(
                render_weekday_patterns(window.workouts, weekday, zone, window.days)
                if weekday
                else None
            ),
        )
        response = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            system=prompt.system,
            turns=[UserTurn(prompt.user)],
        )
        answer = (response.text or "").strip()
        if not answer:
            raise MalformedOutput("Failed to answer question. Please try again.")
        return answer
