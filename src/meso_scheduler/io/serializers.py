"""
JSON serialization for mesocycle documents.

Handles conversion between the dataclasses and JSON-compatible dicts.
The persisted shape uses camelCase keys, e.g.
``workouts["week3"][1]["exercises"][0]["generatedSets"][2]``.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.models import (
    ExerciseInstance,
    FeedbackRecord,
    IntensityBand,
    Mesocycle,
    SetRecord,
    WorkoutFeedback,
    WorkoutSession,
)


class ValidationError(Exception):
    """Raised when a stored document fails validation."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate date string is ISO format YYYY-MM-DD.

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def _require(data: dict[str, Any], *keys: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    missing = [k for k in keys if k not in data]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def _text(value: Any) -> str:
    """Stored weights/reps may be numbers in hand-edited files."""
    return "" if value is None else str(value)


def set_record_to_dict(s: SetRecord) -> dict[str, Any]:
    return {
        "id": s.id,
        "setNumber": s.number,
        "targetReps": s.target_reps,
        "targetWeight": s.target_weight,
        "completedReps": s.completed_reps,
        "completedWeight": s.completed_weight,
        "completed": s.completed,
    }


def dict_to_set_record(data: dict[str, Any]) -> SetRecord:
    _require(data, "id", "setNumber")
    try:
        return SetRecord(
            id=str(data["id"]),
            number=int(data["setNumber"]),
            target_reps=int(data.get("targetReps") or 0),
            target_weight=_text(data.get("targetWeight")),
            completed_reps=_text(data.get("completedReps")),
            completed_weight=_text(data.get("completedWeight")),
            completed=bool(data.get("completed", False)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set {data.get('id')!r}: {e}") from e


def feedback_to_dict(f: FeedbackRecord) -> dict[str, Any]:
    return {
        "weightFeeling": f.weight_feeling,
        "muscleActivation": f.muscle_activation,
        "performanceRating": f.performance_rating,
        "notes": f.notes,
        "timestamp": f.timestamp,
    }


def dict_to_feedback(data: dict[str, Any] | None) -> FeedbackRecord:
    if not data:
        return FeedbackRecord()
    try:
        return FeedbackRecord(
            weight_feeling=data.get("weightFeeling") or "",
            muscle_activation=_text(data.get("muscleActivation")),
            performance_rating=_text(data.get("performanceRating")),
            notes=_text(data.get("notes")),
            timestamp=_text(data.get("timestamp")),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def exercise_to_dict(e: ExerciseInstance) -> dict[str, Any]:
    return {
        "id": e.id,
        "name": e.name,
        "muscleGroup": e.muscle_group,
        "targetSets": e.target_sets,
        "targetReps": e.target_reps,
        "weight": e.weight,
        "reps": e.reps,
        "notes": e.notes,
        "generatedSets": [set_record_to_dict(s) for s in e.generated_sets],
        "baseExerciseId": e.base_exercise_id,
        "completed": e.completed,
        "weightFeeling": e.weight_feeling,
        "feedback": feedback_to_dict(e.feedback),
        "feedbackPrompted": e.feedback_prompted,
        "exerciseType": e.exercise_type,
        "durationMinutes": e.duration_minutes,
    }


def dict_to_exercise(data: dict[str, Any]) -> ExerciseInstance:
    _require(data, "id", "name")
    try:
        return ExerciseInstance(
            id=str(data["id"]),
            name=str(data["name"]),
            muscle_group=str(data.get("muscleGroup") or ""),
            target_sets=int(data.get("targetSets") or 0),
            target_reps=int(data.get("targetReps") or 0),
            weight=_text(data.get("weight")),
            reps=_text(data.get("reps")),
            notes=_text(data.get("notes")),
            generated_sets=[dict_to_set_record(s) for s in data.get("generatedSets") or []],
            base_exercise_id=str(data.get("baseExerciseId") or ""),
            completed=bool(data.get("completed", False)),
            weight_feeling=data.get("weightFeeling") or "",
            feedback=dict_to_feedback(data.get("feedback")),
            feedback_prompted=bool(data.get("feedbackPrompted", False)),
            exercise_type=data.get("exerciseType") or "strength",
            duration_minutes=int(data.get("durationMinutes") or 0),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid exercise {data.get('id')!r}: {e}") from e


def intensity_band_to_dict(band: IntensityBand) -> dict[str, Any]:
    return {
        "week": band.week,
        "minEffort": band.min_effort,
        "maxEffort": band.max_effort,
        "label": band.label,
    }


def dict_to_intensity_band(data: dict[str, Any]) -> IntensityBand:
    _require(data, "week", "minEffort", "maxEffort")
    try:
        return IntensityBand(
            week=int(data["week"]),
            min_effort=int(data["minEffort"]),
            max_effort=int(data["maxEffort"]),
            label=str(data.get("label") or ""),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid intensity band: {e}") from e


def workout_feedback_to_dict(f: WorkoutFeedback) -> dict[str, Any]:
    return {
        "difficulty": f.difficulty,
        "soreness": dict(f.soreness),
        "pumpQuality": dict(f.pump_quality),
        "exertionLevel": f.exertion_level,
        "notes": f.notes,
    }


def dict_to_workout_feedback(data: dict[str, Any]) -> WorkoutFeedback:
    if not isinstance(data, dict):
        raise ValidationError("Workout feedback must be an object")
    try:
        soreness = {str(k): int(v) for k, v in (data.get("soreness") or {}).items()}
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid soreness rating: {e}") from e
    try:
        return WorkoutFeedback(
            difficulty=data.get("difficulty") or "",
            soreness=soreness,
            pump_quality={str(k): str(v) for k, v in (data.get("pumpQuality") or {}).items()},
            exertion_level=_text(data.get("exertionLevel")),
            notes=_text(data.get("notes")),
        )
    except ValueError as e:
        raise ValidationError(f"Invalid workout feedback: {e}") from e


def workout_to_dict(w: WorkoutSession) -> dict[str, Any]:
    result: dict[str, Any] = {
        "id": w.id,
        "name": w.name,
        "date": w.date,
        "weekNumber": w.week_number,
        "completed": w.completed,
        "isDeload": w.is_deload,
        "exercises": [exercise_to_dict(e) for e in w.exercises],
    }
    if w.intensity_band is not None:
        result["intensityBand"] = intensity_band_to_dict(w.intensity_band)
    if w.feedback is not None:
        result["feedback"] = workout_feedback_to_dict(w.feedback)
    return result


def dict_to_workout(data: dict[str, Any]) -> WorkoutSession:
    _require(data, "id", "name", "date", "weekNumber")
    validate_date(data["date"])
    band = data.get("intensityBand")
    feedback = data.get("feedback")
    try:
        return WorkoutSession(
            id=str(data["id"]),
            name=str(data["name"]),
            date=data["date"],
            week_number=int(data["weekNumber"]),
            completed=bool(data.get("completed", False)),
            exercises=[dict_to_exercise(e) for e in data.get("exercises") or []],
            intensity_band=dict_to_intensity_band(band) if band else None,
            feedback=dict_to_workout_feedback(feedback) if feedback else None,
            is_deload=bool(data.get("isDeload", False)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid workout {data.get('id')!r}: {e}") from e


def mesocycle_to_dict(m: Mesocycle) -> dict[str, Any]:
    return {
        "id": m.id,
        "name": m.name,
        "startDate": m.start_date,
        "endDate": m.end_date,
        "weekCount": m.week_count,
        "weeklyProgressionPct": m.weekly_progression_pct,
        "includeDeload": m.include_deload,
        "splitName": m.split_name,
        "workouts": {
            key: [workout_to_dict(w) for w in sessions]
            for key, sessions in m.workouts.items()
        },
    }


def dict_to_mesocycle(data: dict[str, Any]) -> Mesocycle:
    """
    Convert a stored document to a Mesocycle.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    _require(data, "id", "name", "startDate", "endDate", "weekCount")
    validate_date(data["startDate"])
    validate_date(data["endDate"])

    raw_workouts = data.get("workouts") or {}
    if not isinstance(raw_workouts, dict):
        raise ValidationError("'workouts' must map week keys to workout lists")

    workouts: dict[str, list[WorkoutSession]] = {}
    for key, sessions in raw_workouts.items():
        if not isinstance(sessions, list):
            raise ValidationError(f"Week {key!r} must be a list of workouts")
        workouts[str(key)] = [dict_to_workout(w) for w in sessions]

    try:
        return Mesocycle(
            id=str(data["id"]),
            name=str(data["name"]),
            start_date=data["startDate"],
            end_date=data["endDate"],
            week_count=int(data["weekCount"]),
            weekly_progression_pct=float(data.get("weeklyProgressionPct", 5.0)),
            include_deload=bool(data.get("includeDeload", False)),
            split_name=str(data.get("splitName") or ""),
            workouts=workouts,
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid mesocycle {data.get('id')!r}: {e}") from e


def workout_to_json_line(mesocycle_id: str, workout: WorkoutSession) -> str:
    """Serialize a completed workout as one history-log line."""
    record = {"mesocycleId": mesocycle_id, **workout_to_dict(workout)}
    return json.dumps(record, separators=(",", ":"))


def json_line_to_workout(line: str) -> tuple[str, WorkoutSession]:
    """
    Parse one history-log line.

    Returns:
        (mesocycle id, workout)

    Raises:
        ValidationError: If the line is not valid JSON or not a workout
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("History line must be a JSON object")
    return str(data.get("mesocycleId") or ""), dict_to_workout(data)
