"""
Manual edits to a generated mesocycle.

Adding and removing exercises, and overriding an exercise's working
targets by hand. All edits return a new Mesocycle.
"""

import copy
import logging

from .generator import build_exercise
from .metrics import is_numeric, parse_number, round_half_up
from .models import ExerciseCoord, Mesocycle
from .templates.base import ExerciseTemplate

logger = logging.getLogger(__name__)


def add_exercise(
    mesocycle: Mesocycle,
    week_key: str,
    workout_index: int,
    template: ExerciseTemplate,
) -> Mesocycle:
    """
    Append an exercise built from ``template`` to one workout.

    Raises:
        ValueError: If the workout already contains that exercise
    """
    updated = copy.deepcopy(mesocycle)
    workout = updated.workout_at(week_key, workout_index)
    exercise = build_exercise(template, workout.id)
    if any(e.id == exercise.id for e in workout.exercises):
        raise ValueError(f"{template.name} is already part of {workout.name}")
    workout.exercises.append(exercise)
    return updated


def remove_exercise(mesocycle: Mesocycle, coord: ExerciseCoord) -> Mesocycle:
    """Remove one exercise from one workout."""
    updated = copy.deepcopy(mesocycle)
    updated.exercise_at(coord)
    workout = updated.workout_at(coord.week_key, coord.workout_index)
    del workout.exercises[coord.exercise_index]
    return updated


def remove_exercise_everywhere(
    mesocycle: Mesocycle,
    base_exercise_id: str,
) -> tuple[Mesocycle, int]:
    """
    Remove every instance of a template exercise from the whole mesocycle.

    Returns:
        (new mesocycle, number of exercises removed)
    """
    updated = copy.deepcopy(mesocycle)
    removed = 0
    for sessions in updated.workouts.values():
        for workout in sessions:
            kept = [e for e in workout.exercises if e.base_exercise_id != base_exercise_id]
            removed += len(workout.exercises) - len(kept)
            workout.exercises = kept
    if removed == 0:
        logger.warning("No exercise %r found in mesocycle %s", base_exercise_id, mesocycle.id)
    return updated, removed


def set_exercise_targets(
    mesocycle: Mesocycle,
    coord: ExerciseCoord,
    weight: str,
    reps: str,
) -> Mesocycle:
    """
    Override an exercise's working weight and reps.

    Every generated set's targets are updated too; completed values stay.

    Raises:
        ValueError: If weight or reps is empty, or reps is not a number
    """
    weight = str(weight).strip()
    reps = str(reps).strip()
    if not weight or not reps:
        raise ValueError("Both weight and reps are required")
    if not is_numeric(reps):
        raise ValueError(f"Reps must be a number, got {reps!r}")

    updated = copy.deepcopy(mesocycle)
    exercise = updated.exercise_at(coord)
    target_reps = max(0, round_half_up(parse_number(reps)))
    exercise.weight = weight
    exercise.reps = reps
    exercise.target_reps = target_reps
    for s in exercise.generated_sets:
        s.target_weight = weight
        s.target_reps = target_reps
    return updated
