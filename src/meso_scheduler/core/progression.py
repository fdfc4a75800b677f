"""
Progression calculator.

Turns what was actually lifted in a completed workout into next week's
targets: the average completed weight scaled by a difficulty-dependent
modifier, the average completed reps, and an unchanged set count.
"""

import logging
from decimal import Decimal

from .engine.config_loader import DEFAULT_SETTINGS, ProgressionSettings
from .metrics import is_numeric, parse_number, round_half_up
from .models import ExerciseInstance, SetRecord, Suggestion, WorkoutSession

logger = logging.getLogger(__name__)


def normalize_difficulty(value: str | None) -> str:
    """
    Map a difficulty label to its canonical value.

    "Too Hard", "too-hard" and "too_hard" all become "too_hard". Unknown
    labels are returned normalized; they receive the default modifier.
    """
    if not value:
        return ""
    return "_".join(str(value).strip().lower().replace("-", " ").split())


def weight_modifier(difficulty: str, settings: ProgressionSettings | None = None) -> float:
    """Multiplier applied to the average completed weight."""
    settings = settings or DEFAULT_SETTINGS
    return settings.modifier_for(normalize_difficulty(difficulty))


def suggest(
    exercise: ExerciseInstance,
    completed_sets: list[SetRecord] | None = None,
    difficulty: str = "",
    settings: ProgressionSettings | None = None,
) -> Suggestion | None:
    """
    Compute next week's target for one exercise.

    Args:
        exercise: Exercise as performed this week
        completed_sets: Sets to average; defaults to the exercise's sets
            marked completed
        difficulty: Workout-level difficulty (too_easy, just_right, too_hard)
        settings: Modifier/keyword settings, DEFAULT_SETTINGS if None

    Returns:
        Suggestion, or None when no set was completed or the average
        completed weight is not positive
    """
    if completed_sets is None:
        completed_sets = [s for s in exercise.generated_sets if s.completed]
    if not completed_sets:
        return None

    n = len(completed_sets)
    weights = [parse_number(s.completed_weight) for s in completed_sets]
    reps = [
        parse_number(s.completed_reps) if is_numeric(s.completed_reps) else s.target_reps
        for s in completed_sets
    ]
    # Decimal keeps 100 x 1.025 at exactly 102.5 so it rounds up
    avg_weight = sum(Decimal(str(w)) for w in weights) / n
    avg_reps = sum(Decimal(str(r)) for r in reps) / n

    if avg_weight <= 0:
        logger.debug("No positive completed weight for %s; no suggestion", exercise.id)
        return None

    modifier = Decimal(str(weight_modifier(difficulty, settings)))
    return Suggestion(
        exercise_id=exercise.id,
        exercise_name=exercise.name,
        base_exercise_id=exercise.base_exercise_id,
        weight=round_half_up(avg_weight * modifier),
        reps=round_half_up(avg_reps),
        sets=len(exercise.generated_sets),
    )


def compute_suggestions(
    workout: WorkoutSession,
    difficulty: str,
    settings: ProgressionSettings | None = None,
) -> dict[str, Suggestion]:
    """
    Suggestions for every exercise of a workout with at least one completed set.

    Returns:
        Dict exercise id -> Suggestion, in exercise order
    """
    suggestions: dict[str, Suggestion] = {}
    for exercise in workout.exercises:
        result = suggest(exercise, difficulty=difficulty, settings=settings)
        if result is not None:
            suggestions[exercise.id] = result
    return suggestions
