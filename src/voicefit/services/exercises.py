"""Canonical resistance exercise names and fuzzy normalization."""

EXERCISES: tuple[str, ...] = (
    # Chest
    "Bench Press",
    "Incline Bench Press",
    "Decline Bench Press",
    "Dumbbell Bench Press",
    "Incline Dumbbell Press",
    "Dumbbell Fly",
    "Cable Fly",
    "Push-Up",
    "Chest Dip",
    "Floor Press",
    # Back
    "Deadlift",
    "Barbell Row",
    "Dumbbell Row",
    "Pull-Up",
    "Chin-Up",
    "Lat Pulldown",
    "Seated Cable Row",
    "T-Bar Row",
    "Face Pull",
    # Shoulders
    "Overhead Press",
    "Dumbbell Shoulder Press",
    "Arnold Press",
    "Lateral Raise",
    "Front Raise",
    "Rear Delt Fly",
    "Upright Row",
    "Shrug",
    # Legs
    "Squat",
    "Front Squat",
    "Leg Press",
    "Lunge",
    "Bulgarian Split Squat",
    "Romanian Deadlift",
    "Leg Curl",
    "Leg Extension",
    "Calf Raise",
    "Hip Thrust",
    "Goblet Squat",
    # Arms
    "Bicep Curl",
    "Hammer Curl",
    "Preacher Curl",
    "Tricep Pushdown",
    "Tricep Extension",
    "Skull Crusher",
    "Close-Grip Bench Press",
    "Dip",
    # Core
    "Plank",
    "Crunch",
    "Leg Raise",
    "Russian Twist",
    "Ab Wheel Rollout",
    "Cable Crunch",
    # Conditioning
    "Kettlebell Swing",
    "Clean",
    "Snatch",
    "Thruster",
    "Burpee",
)

_FOLDED = tuple((name.casefold(), name) for name in EXERCISES)


def normalize_exercise_name(candidate: str) -> str:
    """Map free text to the closest canonical exercise name.

    Exact matches win. Otherwise the first canonical name (in list order)
    that contains the candidate, or is contained by it, is returned. When
    nothing matches the candidate is title-cased word by word.
    """
    words = candidate.split()
    if not words:
        return ""
    folded = " ".join(words).casefold()

    for key, name in _FOLDED:
        if key == folded:
            return name

    for key, name in _FOLDED:
        if folded in key or key in folded:
            return name

    return " ".join(word.capitalize() for word in words)
