"""Workout commands: log-set, undo-set, feedback, suggest, complete, and exercise edits."""

from typing import Annotated, Optional

import typer

from ...core.completion import (
    complete_and_persist,
    record_exercise_feedback,
    record_set,
    undo_set,
)
from ...core.config import (
    DIFFICULTY_VALUES,
    EXERTION_LEVELS,
    PUMP_QUALITIES,
    SORENESS_MAX,
    SORENESS_MIN,
    WEIGHT_FEELINGS,
)
from ...core.editing import add_exercise, remove_exercise, set_exercise_targets
from ...core.engine.config_loader import load_progression_settings
from ...core.errors import IncompleteWorkoutError, StorageError
from ...core.models import ExerciseCoord, Mesocycle, SetCoord, WorkoutFeedback, week_key
from ...core.progression import compute_suggestions, normalize_difficulty
from ...core.templates import find_catalog_exercise
from .. import views
from ..app import StoreDirOption, app, get_store

MesocycleArg = Annotated[str, typer.Argument(help="Mesocycle id")]
WeekArg = Annotated[int, typer.Argument(help="Week number (1-based)")]
WorkoutArg = Annotated[int, typer.Argument(help="Workout number within the week (1-based)")]
ExerciseArg = Annotated[int, typer.Argument(help="Exercise number within the workout (1-based)")]
SetArg = Annotated[int, typer.Argument(help="Set number (1-based)")]

DifficultyOption = Annotated[
    str,
    typer.Option("--difficulty", help="too_easy | just_right | too_hard"),
]


def _load(store, mesocycle_id: str) -> Mesocycle:
    try:
        return store.load(mesocycle_id)
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _save(store, mesocycle: Mesocycle) -> None:
    try:
        store.save(mesocycle)
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _check_difficulty(difficulty: str) -> str:
    value = normalize_difficulty(difficulty)
    if value not in DIFFICULTY_VALUES:
        views.print_error(f"Difficulty must be one of: {', '.join(DIFFICULTY_VALUES)}")
        raise typer.Exit(1)
    return value


@app.command("log-set")
def log_set(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    exercise: ExerciseArg,
    set_number: SetArg,
    reps: Annotated[
        Optional[str],
        typer.Option("--reps", "-r", help="Reps performed (default: target reps)"),
    ] = None,
    weight: Annotated[
        Optional[str],
        typer.Option("--weight", "-w", help="Weight used (default: target weight)"),
    ] = None,
    feeling: Annotated[
        Optional[str],
        typer.Option("--feeling", help="Record how the weight felt once the exercise is done"),
    ] = None,
    store_dir: StoreDirOption = None,
) -> None:
    """
    Log one performed set.

      meso-scheduler log-set abc123 1 1 1 1 --reps 10 --weight 60
    """
    store = get_store(store_dir)
    mesocycle = _load(store, mesocycle_id)
    coord = SetCoord(week_key(week), workout - 1, exercise - 1, set_number - 1)

    try:
        outcome = record_set(mesocycle, coord, reps or "", weight or "")
    except (KeyError, IndexError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    updated = outcome.mesocycle
    logged = updated.set_at(coord)
    name = updated.exercise_at(coord.exercise).name

    if feeling is not None:
        try:
            updated = record_exercise_feedback(updated, coord.exercise, feeling)
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

    _save(store, updated)
    views.print_success(
        f"Logged {name} set {set_number}: "
        f"{logged.completed_weight or '-'} x {logged.completed_reps} ({outcome.state})"
    )
    if outcome.prompt_feedback and feeling is None:
        views.print_info(
            f"{name} is done. How did the weight feel? "
            f"meso-scheduler feedback {mesocycle_id} {week} {workout} {exercise} "
            f"--feeling [{'|'.join(WEIGHT_FEELINGS)}]"
        )


@app.command("undo-set")
def undo_set_command(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    exercise: ExerciseArg,
    set_number: SetArg,
    store_dir: StoreDirOption = None,
) -> None:
    """
    Mark a logged set as not done.
    """
    store = get_store(store_dir)
    mesocycle = _load(store, mesocycle_id)
    coord = SetCoord(week_key(week), workout - 1, exercise - 1, set_number - 1)

    try:
        updated = undo_set(mesocycle, coord)
    except (KeyError, IndexError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    _save(store, updated)
    views.print_success(f"Set {set_number} marked as not done")


@app.command()
def feedback(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    exercise: ExerciseArg,
    feeling: Annotated[
        str,
        typer.Option("--feeling", help=" | ".join(WEIGHT_FEELINGS)),
    ],
    notes: Annotated[
        str,
        typer.Option("--notes", "-n", help="Free-text notes"),
    ] = "",
    store_dir: StoreDirOption = None,
) -> None:
    """
    Record how the weight of an exercise felt.
    """
    store = get_store(store_dir)
    mesocycle = _load(store, mesocycle_id)
    coord = ExerciseCoord(week_key(week), workout - 1, exercise - 1)

    try:
        updated = record_exercise_feedback(mesocycle, coord, feeling, notes=notes)
    except (KeyError, IndexError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    _save(store, updated)
    views.print_success(f"Feedback saved for {updated.exercise_at(coord).name}")


@app.command()
def suggest(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    difficulty: DifficultyOption = "just_right",
    store_dir: StoreDirOption = None,
) -> None:
    """
    Preview next week's targets for a workout without saving anything.
    """
    store = get_store(store_dir)
    mesocycle = _load(store, mesocycle_id)
    value = _check_difficulty(difficulty)

    try:
        session = mesocycle.workout_at(week_key(week), workout - 1)
    except (KeyError, IndexError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    suggestions = compute_suggestions(session, value, load_progression_settings())
    if not suggestions:
        views.print_info("No completed sets with a weight yet.")
        return
    views.console.print(views.format_suggestion_table(list(suggestions.values())))


def _parse_ratings(values: Optional[list[str]], option: str) -> dict[str, str]:
    """Turn ``muscle=value`` pairs into a dict."""
    ratings: dict[str, str] = {}
    for item in values or []:
        group, sep, value = item.partition("=")
        if not sep or not group.strip() or not value.strip():
            views.print_error(f"{option} expects muscle=value, got {item!r}")
            raise typer.Exit(1)
        ratings[group.strip().lower()] = value.strip()
    return ratings


def _workout_feedback(
    difficulty: str,
    soreness: Optional[list[str]],
    pump: Optional[list[str]],
    exertion: Optional[str],
    notes: str,
) -> WorkoutFeedback | None:
    if not (soreness or pump or exertion or notes):
        return None
    sore = _parse_ratings(soreness, "--soreness")
    pumps = _parse_ratings(pump, "--pump")
    try:
        return WorkoutFeedback(
            difficulty=difficulty,
            soreness={group: int(value) for group, value in sore.items()},
            pump_quality={group: value.capitalize() for group, value in pumps.items()},
            exertion_level=(exertion or "").strip().title(),
            notes=notes,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


@app.command()
def complete(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    difficulty: DifficultyOption = "just_right",
    soreness: Annotated[
        Optional[list[str]],
        typer.Option(
            "--soreness",
            help=f"muscle=N, N in {SORENESS_MIN}..{SORENESS_MAX} (repeatable)",
        ),
    ] = None,
    pump: Annotated[
        Optional[list[str]],
        typer.Option("--pump", help=f"muscle={'|'.join(PUMP_QUALITIES)} (repeatable)"),
    ] = None,
    exertion: Annotated[
        Optional[str],
        typer.Option("--exertion", help=" | ".join(EXERTION_LEVELS)),
    ] = None,
    notes: Annotated[
        str,
        typer.Option("--notes", "-n", help="Free-text notes for the session"),
    ] = "",
    store_dir: StoreDirOption = None,
) -> None:
    """
    Complete a workout and carry its progression into next week.

      meso-scheduler complete abc123 1 2 --difficulty too_easy --soreness chest=3 --pump chest=good
    """
    store = get_store(store_dir)
    value = _check_difficulty(difficulty)
    session_feedback = _workout_feedback(value, soreness, pump, exertion, notes)

    try:
        result = complete_and_persist(
            store,
            mesocycle_id,
            week_key(week),
            workout - 1,
            value,
            settings=load_progression_settings(),
            feedback=session_feedback,
        )
    except IncompleteWorkoutError as e:
        views.print_error(str(e))
        views.print_info("Log at least one set (or set targets) for every exercise first.")
        raise typer.Exit(1)
    except (StorageError, KeyError, IndexError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Completed {result.workout.name}")
    views.print_completion(result)


@app.command("add-exercise")
def add_exercise_command(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    exercise_id: Annotated[str, typer.Argument(help="Catalog exercise id, e.g. bench-press")],
    store_dir: StoreDirOption = None,
) -> None:
    """
    Add a catalog exercise to a workout.
    """
    template = find_catalog_exercise(exercise_id)
    if template is None:
        views.print_error(f"Unknown catalog exercise '{exercise_id}'")
        raise typer.Exit(1)

    store = get_store(store_dir)
    mesocycle = _load(store, mesocycle_id)
    try:
        updated = add_exercise(mesocycle, week_key(week), workout - 1, template)
    except (KeyError, IndexError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    _save(store, updated)
    views.print_success(f"Added {template.name}")


@app.command("remove-exercise")
def remove_exercise_command(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    exercise: ExerciseArg,
    store_dir: StoreDirOption = None,
) -> None:
    """
    Remove an exercise from a workout.
    """
    store = get_store(store_dir)
    mesocycle = _load(store, mesocycle_id)
    coord = ExerciseCoord(week_key(week), workout - 1, exercise - 1)
    try:
        name = mesocycle.exercise_at(coord).name
        updated = remove_exercise(mesocycle, coord)
    except (KeyError, IndexError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    _save(store, updated)
    views.print_success(f"Removed {name}")


@app.command("set-target")
def set_target(
    mesocycle_id: MesocycleArg,
    week: WeekArg,
    workout: WorkoutArg,
    exercise: ExerciseArg,
    weight: Annotated[str, typer.Option("--weight", "-w", help="Target weight")],
    reps: Annotated[str, typer.Option("--reps", "-r", help="Target reps")],
    store_dir: StoreDirOption = None,
) -> None:
    """
    Set an exercise's working weight and reps by hand.
    """
    store = get_store(store_dir)
    mesocycle = _load(store, mesocycle_id)
    coord = ExerciseCoord(week_key(week), workout - 1, exercise - 1)
    try:
        updated = set_exercise_targets(mesocycle, coord, weight, reps)
    except (KeyError, IndexError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    _save(store, updated)
    views.print_success(f"Target set: {weight} x {reps}")
