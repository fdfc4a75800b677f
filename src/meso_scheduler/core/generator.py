"""
Schedule generation for meso-scheduler.

Expands a weekly SplitTemplate into dated workout sessions for every
week of a mesocycle. Generation is deterministic: the same split, start
date and week count always produce the same ids, dates and sets.
"""

import logging
import uuid
from datetime import datetime, timedelta

from .config import (
    DEFAULT_PROGRESSION_PCT,
    MAX_PROGRESSION_PCT,
    MAX_WEEKS,
    MIN_PROGRESSION_PCT,
    MIN_WEEKS,
)
from .intensity import get_intensity_band
from .models import (
    ExerciseInstance,
    Mesocycle,
    SetRecord,
    WorkoutSession,
    validate_iso_date,
    week_key,
)
from .templates.base import ExerciseTemplate, SplitTemplate, WorkoutTemplate

logger = logging.getLogger(__name__)


def workout_id(week: int, template_index: int, day_index: int) -> str:
    return f"workout-w{week}-{template_index}-{day_index}"


def session_date(anchor: datetime, weekday: int) -> datetime:
    """
    Date of the first ``weekday`` (0 = Sunday) on or after ``anchor``.

    An anchor that already falls on the weekday is returned unchanged.
    """
    anchor_weekday = (anchor.weekday() + 1) % 7
    return anchor + timedelta(days=(weekday - anchor_weekday) % 7)


def build_exercise(template: ExerciseTemplate, workout_id_: str) -> ExerciseInstance:
    """Materialize one template exercise, with one empty set per prescribed set."""
    exercise_id = f"{workout_id_}-{template.id}"
    sets = [
        SetRecord(
            id=f"{exercise_id}-set-{n}",
            number=n,
            target_reps=template.reps,
        )
        for n in range(1, template.sets + 1)
    ]
    return ExerciseInstance(
        id=exercise_id,
        name=template.name,
        muscle_group=template.muscle_group,
        target_sets=template.sets,
        target_reps=template.reps,
        notes=template.notes,
        generated_sets=sets,
        base_exercise_id=template.id,
        exercise_type=template.exercise_type,
        duration_minutes=template.duration_minutes,
    )


def _week_sessions(
    workouts: tuple[WorkoutTemplate, ...],
    week: int,
    anchor: datetime,
    is_deload: bool,
) -> list[WorkoutSession]:
    band = get_intensity_band(week, is_deload)
    sessions: list[WorkoutSession] = []

    for t_idx, template in enumerate(workouts):
        groups = " & ".join(template.muscle_groups)
        for d_idx, weekday in enumerate(template.weekdays):
            if isinstance(weekday, int) and not isinstance(weekday, bool) and 0 <= weekday <= 6:
                date = session_date(anchor, weekday)
            else:
                logger.warning(
                    "Workout %r week %d has invalid weekday %r; using week start",
                    template.name, week, weekday,
                )
                date = anchor

            wid = workout_id(week, t_idx, d_idx)
            sessions.append(
                WorkoutSession(
                    id=wid,
                    name=f"{template.name} ({groups}) (Week {week})",
                    date=date.strftime("%Y-%m-%d"),
                    week_number=week,
                    exercises=[build_exercise(e, wid) for e in template.exercises],
                    intensity_band=band,
                    is_deload=is_deload,
                )
            )

    return sessions


def generate_workouts(
    split: SplitTemplate,
    start_date: str,
    week_count: int,
    include_deload: bool = False,
) -> dict[str, list[WorkoutSession]]:
    """
    Generate every week of a mesocycle from a split template.

    Args:
        split: Weekly template to expand
        start_date: ISO date of the first day of week 1
        week_count: Number of weeks (keys week1..weekN are always present)
        include_deload: Make the last week a deload week

    Returns:
        Dict week key -> sessions of that week. The deload week holds only
        the split's deload workouts, or nothing if it has none.
    """
    validate_iso_date(start_date)
    start = datetime.strptime(start_date, "%Y-%m-%d")
    deload_week = week_count if include_deload else None

    result: dict[str, list[WorkoutSession]] = {}
    for week in range(1, week_count + 1):
        anchor = start + timedelta(days=(week - 1) * 7)
        if week == deload_week:
            result[week_key(week)] = _week_sessions(
                split.deload_workouts, week, anchor, is_deload=True
            )
        else:
            result[week_key(week)] = _week_sessions(
                split.workouts, week, anchor, is_deload=False
            )

    logger.debug(
        "Generated %d sessions over %d weeks from split %r",
        sum(len(s) for s in result.values()), week_count, split.name,
    )
    return result


def create_mesocycle(
    name: str,
    split: SplitTemplate,
    start_date: str,
    week_count: int,
    weekly_progression_pct: float = DEFAULT_PROGRESSION_PCT,
    include_deload: bool = False,
    mesocycle_id: str | None = None,
) -> Mesocycle:
    """
    Build a new Mesocycle document with its full generated schedule.

    Raises:
        ValueError: On empty name, week count outside the allowed range,
            progression outside the allowed range, or a malformed date
    """
    if not name or not name.strip():
        raise ValueError("Mesocycle name must not be empty")
    if not MIN_WEEKS <= week_count <= MAX_WEEKS:
        raise ValueError(f"week_count must be between {MIN_WEEKS} and {MAX_WEEKS}")
    if not MIN_PROGRESSION_PCT <= weekly_progression_pct <= MAX_PROGRESSION_PCT:
        raise ValueError(
            f"weekly_progression_pct must be between {MIN_PROGRESSION_PCT:g} "
            f"and {MAX_PROGRESSION_PCT:g}"
        )
    validate_iso_date(start_date)

    start = datetime.strptime(start_date, "%Y-%m-%d")
    end = start + timedelta(days=week_count * 7 - 1)

    return Mesocycle(
        id=mesocycle_id or uuid.uuid4().hex[:12],
        name=name.strip(),
        start_date=start_date,
        end_date=end.strftime("%Y-%m-%d"),
        week_count=week_count,
        weekly_progression_pct=float(weekly_progression_pct),
        include_deload=include_deload,
        split_name=split.name,
        workouts=generate_workouts(split, start_date, week_count, include_deload),
    )
