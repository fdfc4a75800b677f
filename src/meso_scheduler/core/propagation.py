"""
Progression propagator.

Writes suggestions into the matched exercises of next week's workout.
Only target fields change: completed values belong to the athlete and
the set count is never altered. Applying the same suggestions twice
leaves the document unchanged after the first time.
"""

import copy
import logging

from .matcher import NextWeekTarget
from .metrics import format_weight
from .models import ExerciseInstance, Mesocycle, Suggestion

logger = logging.getLogger(__name__)


def apply_suggestion(exercise: ExerciseInstance, suggestion: Suggestion) -> ExerciseInstance:
    """Return a copy of ``exercise`` carrying the suggested weight and reps."""
    updated = copy.deepcopy(exercise)
    weight = format_weight(suggestion.weight)
    updated.weight = weight
    updated.reps = str(suggestion.reps)
    updated.target_reps = suggestion.reps
    for s in updated.generated_sets:
        s.target_weight = weight
        s.target_reps = suggestion.reps
    return updated


def apply_progression(
    mesocycle: Mesocycle,
    target: NextWeekTarget,
    suggestions: dict[str, Suggestion],
) -> Mesocycle:
    """
    Apply suggestions to the exercises matched in ``target``.

    Args:
        mesocycle: Document to update (not modified)
        target: Resolved next-week workout and exercise matches
        suggestions: Dict source exercise id -> Suggestion

    Returns:
        New Mesocycle with the matched exercises updated
    """
    updated = copy.deepcopy(mesocycle)
    workout = updated.workout_at(target.week_key, target.workout_index)

    for match in target.matches:
        suggestion = suggestions.get(match.source_exercise_id)
        if suggestion is None:
            continue
        index = match.coord.exercise_index
        workout.exercises[index] = apply_suggestion(workout.exercises[index], suggestion)
        logger.info(
            "Progressed %s -> %s: %s x %d",
            match.source_exercise_id,
            workout.exercises[index].id,
            workout.exercises[index].weight,
            suggestion.reps,
        )

    return updated
