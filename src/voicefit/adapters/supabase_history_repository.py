"""Supabase repository for logged meals, daily metrics and workouts."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from voicefit.domain.records import (
    DailyMetricRecord,
    MealRecord,
    WorkoutSessionRecord,
    WorkoutSetRecord,
)
from voicefit.services.history import HistoryRepository


@dataclass
class SupabaseHistoryRepository(HistoryRepository):
    """Supabase implementation for history reads."""

    client: Client

    def list_meals(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
        meal_type: str | None = None,
    ) -> list[MealRecord]:
        """Return meals eaten in the time range, most recent first."""
        query = (
            self.client.table("meal_logs")
            .select("eaten_at, meal_type, description, calories")
            .eq("user_id", str(user_id))
            .gte("eaten_at", start.isoformat())
            .lte("eaten_at", end.isoformat())
        )
        if meal_type:
            query = query.eq("meal_type", meal_type)
        response = query.order("eaten_at", desc=True).execute()
        return [_parse_meal(row) for row in response.data or []]

    def list_daily_metrics(
        self, user_id: UUID, dates: list[date]
    ) -> list[DailyMetricRecord]:
        """Return daily metrics for the given dates, oldest first."""
        if not dates:
            return []
        response = (
            self.client.table("daily_metrics")
            .select("date, steps, weight_kg")
            .eq("user_id", str(user_id))
            .in_("date", [day.isoformat() for day in dates])
            .order("date", desc=False)
            .execute()
        )
        return [_parse_metric(row) for row in response.data or []]

    def list_workout_sessions(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[WorkoutSessionRecord]:
        """Return workout sessions with their sets, most recent first."""
        response = (
            self.client.table("workout_sessions")
            .select(
                "started_at, title, "
                "workout_sets(exercise_name, reps, weight_kg, duration_minutes)"
            )
            .eq("user_id", str(user_id))
            .gte("started_at", start.isoformat())
            .lte("started_at", end.isoformat())
            .order("started_at", desc=True)
            .execute()
        )
        return [_parse_session(row) for row in response.data or []]


def _parse_meal(row: dict[str, object]) -> MealRecord:
    return MealRecord(
        eaten_at=datetime.fromisoformat(str(row["eaten_at"])),
        meal_type=str(row.get("meal_type") or "snack"),
        description=str(row.get("description") or ""),
        calories=int(row.get("calories") or 0),
    )


def _parse_metric(row: dict[str, object]) -> DailyMetricRecord:
    steps = row.get("steps")
    weight_kg = row.get("weight_kg")
    return DailyMetricRecord(
        date=date.fromisoformat(str(row["date"])[:10]),
        steps=int(steps) if steps is not None else None,
        weight_kg=float(weight_kg) if weight_kg is not None else None,
    )


def _parse_session(row: dict[str, object]) -> WorkoutSessionRecord:
    raw_sets = row.get("workout_sets")
    sets = [
        _parse_set(item)
        for item in (raw_sets if isinstance(raw_sets, list) else [])
        if isinstance(item, dict)
    ]
    return WorkoutSessionRecord(
        started_at=datetime.fromisoformat(str(row["started_at"])),
        title=str(row.get("title") or "Workout"),
        sets=sets,
    )


def _parse_set(row: dict[str, object]) -> WorkoutSetRecord:
    reps = row.get("reps")
    weight_kg = row.get("weight_kg")
    duration = row.get("duration_minutes")
    return WorkoutSetRecord(
        exercise_name=str(row.get("exercise_name") or ""),
        reps=int(reps) if reps is not None else None,
        weight_kg=float(weight_kg) if weight_kg is not None else None,
        duration_minutes=int(duration) if duration is not None else None,
    )
