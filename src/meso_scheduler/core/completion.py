"""
Set logging, feedback and workout completion.

Every function takes a Mesocycle and returns a new one; the input is
never modified. complete_and_persist is the only function here that
touches storage.
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal

from .config import WEIGHT_FEELINGS
from .engine.config_loader import ProgressionSettings
from .errors import IncompleteWorkoutError
from .matcher import ExerciseMatch, ExerciseMatcher, find_next_week_target
from .models import (
    ExerciseCoord,
    ExerciseState,
    FeedbackRecord,
    Mesocycle,
    SetCoord,
    Suggestion,
    WorkoutFeedback,
    WorkoutSession,
    parse_week_number,
)
from .progression import compute_suggestions, normalize_difficulty
from .propagation import apply_progression

if TYPE_CHECKING:
    from ..io.mesocycle_store import MesocycleStore

logger = logging.getLogger(__name__)

PropagationStatus = Literal[
    "applied", "no_next_week", "no_target_workout", "no_suggestions", "no_matches"
]


@dataclass
class SetOutcome:
    """Result of logging one set."""

    mesocycle: Mesocycle
    state: ExerciseState
    prompt_feedback: bool = False


@dataclass
class PropagationResult:
    """Where (and whether) progression was carried into the next week."""

    status: PropagationStatus
    week_key: str | None = None
    workout_index: int | None = None
    applied: list[ExerciseMatch] = field(default_factory=list)


@dataclass
class CompletionResult:
    """Outcome of completing a workout."""

    mesocycle: Mesocycle
    workout: WorkoutSession
    suggestions: dict[str, Suggestion]
    propagation: PropagationResult


def record_set(
    mesocycle: Mesocycle,
    coord: SetCoord,
    completed_reps: str,
    completed_weight: str,
) -> SetOutcome:
    """
    Mark a set completed with the values actually performed.

    An empty weight falls back to the set's target weight, then to the
    exercise's working weight; empty reps fall back to the set's target
    reps. The exercise's working weight/reps follow the latest logged set.
    ``prompt_feedback`` is True only on the transition into the completed
    state, once per exercise, and never when feedback is already recorded.

    Raises:
        ValueError: If no weight was entered and none can be inferred
    """
    updated = copy.deepcopy(mesocycle)
    exercise = updated.exercise_at(coord.exercise)
    target = updated.set_at(coord)
    before = exercise.state

    reps = str(completed_reps).strip() or str(target.target_reps)
    weight = (
        str(completed_weight).strip()
        or target.target_weight.strip()
        or exercise.weight.strip()
    )
    if not weight:
        raise ValueError(
            f"No weight for set {target.number} of {exercise.name}: "
            "enter the weight used or set a target first"
        )
    target.completed_reps = reps
    target.completed_weight = weight
    target.completed = True

    exercise.reps = reps
    exercise.weight = weight

    state = exercise.state
    prompt = (
        state == "completed"
        and before != "completed"
        and not exercise.feedback_prompted
        and not exercise.feedback.recorded
    )
    if prompt:
        exercise.feedback_prompted = True
    if state == "completed":
        exercise.completed = True

    return SetOutcome(mesocycle=updated, state=state, prompt_feedback=prompt)


def undo_set(mesocycle: Mesocycle, coord: SetCoord) -> Mesocycle:
    """Mark a logged set as not completed again, clearing what was performed."""
    updated = copy.deepcopy(mesocycle)
    exercise = updated.exercise_at(coord.exercise)
    target = updated.set_at(coord)
    target.completed = False
    target.completed_reps = ""
    target.completed_weight = ""
    if exercise.state != "completed":
        exercise.completed = False
    return updated


def record_exercise_feedback(
    mesocycle: Mesocycle,
    coord: ExerciseCoord,
    weight_feeling: str,
    notes: str = "",
    muscle_activation: str = "",
    performance_rating: str = "",
    timestamp: str | None = None,
) -> Mesocycle:
    """
    Store the weight-feeling survey for one exercise.

    Raises:
        ValueError: If weight_feeling is not one of WEIGHT_FEELINGS
    """
    if weight_feeling not in WEIGHT_FEELINGS:
        raise ValueError(
            f"Invalid weight feeling: {weight_feeling!r}. Must be one of {WEIGHT_FEELINGS}"
        )
    updated = copy.deepcopy(mesocycle)
    exercise = updated.exercise_at(coord)
    exercise.feedback = FeedbackRecord(
        weight_feeling=weight_feeling,
        muscle_activation=muscle_activation,
        performance_rating=performance_rating,
        notes=notes,
        timestamp=timestamp or datetime.now().isoformat(timespec="seconds"),
    )
    exercise.weight_feeling = weight_feeling
    exercise.feedback_prompted = True
    return updated


def record_workout_feedback(
    mesocycle: Mesocycle,
    week_key: str,
    workout_index: int,
    feedback: WorkoutFeedback,
) -> Mesocycle:
    """Attach the session-level survey to a workout."""
    updated = copy.deepcopy(mesocycle)
    workout = updated.workout_at(week_key, workout_index)
    workout.feedback = copy.deepcopy(feedback)
    workout.feedback.difficulty = normalize_difficulty(feedback.difficulty)
    return updated


def missing_values(workout: WorkoutSession) -> list[str]:
    """Names of exercises without a working weight or reps."""
    return [
        e.name for e in workout.exercises if not e.weight.strip() or not e.reps.strip()
    ]


def can_complete(workout: WorkoutSession) -> bool:
    """True if every exercise has a non-empty weight and reps."""
    return not missing_values(workout)


def complete_workout(
    mesocycle: Mesocycle,
    week_key: str,
    workout_index: int,
    difficulty: str,
    settings: ProgressionSettings | None = None,
    matcher: ExerciseMatcher | None = None,
) -> CompletionResult:
    """
    Complete a workout and carry its progression into the next week.

    Args:
        mesocycle: Document holding the workout (not modified)
        week_key: Week of the workout
        workout_index: Index within that week
        difficulty: Workout-level difficulty rating
        settings: Progression settings; defaults apply if None
        matcher: Matching strategy; built from settings if None

    Returns:
        CompletionResult with the updated document. A workout with no
        later week completes normally with status ``no_next_week``.

    Raises:
        IncompleteWorkoutError: If an exercise lacks weight or reps
    """
    workout = mesocycle.workout_at(week_key, workout_index)
    missing = missing_values(workout)
    if missing:
        raise IncompleteWorkoutError(
            f"Workout {workout.id} has exercises without weight or reps: {', '.join(missing)}",
            missing=missing,
        )

    if matcher is None and settings is not None:
        matcher = ExerciseMatcher.from_settings(settings)

    updated = copy.deepcopy(mesocycle)
    done = updated.workout_at(week_key, workout_index)
    done.completed = True
    difficulty = normalize_difficulty(difficulty)
    if done.feedback is None:
        done.feedback = WorkoutFeedback(difficulty=difficulty)
    else:
        done.feedback.difficulty = difficulty

    suggestions = compute_suggestions(done, difficulty, settings)
    current_week = done.week_number or parse_week_number(week_key) or 1
    target = find_next_week_target(done, current_week, updated, suggestions, matcher)

    if target is None:
        if any(
            (parse_week_number(k) or 0) > current_week for k in updated.workouts
        ):
            propagation = PropagationResult(status="no_target_workout")
        else:
            propagation = PropagationResult(status="no_next_week")
    elif not suggestions:
        propagation = PropagationResult(
            status="no_suggestions",
            week_key=target.week_key,
            workout_index=target.workout_index,
        )
    elif not target.matches:
        propagation = PropagationResult(
            status="no_matches",
            week_key=target.week_key,
            workout_index=target.workout_index,
        )
    else:
        updated = apply_progression(updated, target, suggestions)
        propagation = PropagationResult(
            status="applied",
            week_key=target.week_key,
            workout_index=target.workout_index,
            applied=list(target.matches),
        )

    logger.info(
        "Completed %s (%s): %d suggestion(s), propagation %s",
        done.id, difficulty or "unrated", len(suggestions), propagation.status,
    )
    return CompletionResult(
        mesocycle=updated,
        workout=updated.workout_at(week_key, workout_index),
        suggestions=suggestions,
        propagation=propagation,
    )


def complete_and_persist(
    store: "MesocycleStore",
    mesocycle_id: str,
    week_key: str,
    workout_index: int,
    difficulty: str,
    settings: ProgressionSettings | None = None,
    matcher: ExerciseMatcher | None = None,
    feedback: WorkoutFeedback | None = None,
) -> CompletionResult:
    """
    Load, complete, save, and log a workout in one step.

    ``feedback`` (soreness, pump, exertion, notes) is attached before
    completing; ``difficulty`` always wins over ``feedback.difficulty``.

    The save is last-write-wins: a concurrent writer between load and save
    can lose its update. The document is saved before the history line is
    appended, so a StorageError from the append leaves the completed
    workout saved but missing from the history log.

    Raises:
        StorageError: If the document cannot be loaded or saved, or the
            history line cannot be appended
        IncompleteWorkoutError: If the workout cannot be completed
    """
    mesocycle = store.load(mesocycle_id)
    if feedback is not None:
        mesocycle = record_workout_feedback(mesocycle, week_key, workout_index, feedback)
    result = complete_workout(
        mesocycle, week_key, workout_index, difficulty, settings=settings, matcher=matcher
    )
    store.save(result.mesocycle)
    store.append_history(mesocycle_id, result.workout)
    return result
