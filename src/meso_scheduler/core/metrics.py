"""
Numeric helpers and progress metrics.

Weights and reps are stored as entered text; everything numeric goes
through parse_number so malformed input counts as zero instead of failing.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .models import Mesocycle, WorkoutSession, parse_week_number


def parse_number(value: object) -> float:
    """
    Parse entered text (or a number) as a float.

    Empty, non-numeric, NaN and infinite values return 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return number


def is_numeric(value: object) -> bool:
    """True if value is a number or text that parses as a finite number."""
    if isinstance(value, bool) or value is None:
        return False
    try:
        number = float(str(value).strip().replace(",", "."))
    except ValueError:
        return False
    return number == number and number not in (float("inf"), float("-inf"))


def round_half_up(value: float | Decimal) -> int:
    """Round to the nearest integer with halves away from zero (2.5 → 3)."""
    exact = value if isinstance(value, Decimal) else Decimal(str(value))
    try:
        return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return 0


def format_weight(value: float) -> str:
    """Whole numbers without decimals, otherwise up to two decimals."""
    rounded = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded == rounded.to_integral_value():
        return str(int(rounded))
    return format(rounded.normalize(), "f")


def workout_volume(workout: WorkoutSession) -> float:
    """Total completed load: sum of weight × reps over completed sets."""
    total = 0.0
    for exercise in workout.exercises:
        for s in exercise.generated_sets:
            if s.completed:
                total += parse_number(s.completed_weight) * parse_number(s.completed_reps)
    return total


def current_week(mesocycle: Mesocycle, today: str) -> int:
    """1-based week containing ``today``, clamped to the mesocycle's range."""
    start = datetime.strptime(mesocycle.start_date, "%Y-%m-%d")
    now = datetime.strptime(today, "%Y-%m-%d")
    week = (now - start).days // 7 + 1
    return max(1, min(week, mesocycle.week_count))


@dataclass(frozen=True)
class MesocycleProgress:
    """Completion summary of a mesocycle at a given date."""

    completed_workouts: int
    total_workouts: int
    percent_complete: float
    current_week: int
    next_workout: tuple[str, int] | None  # (week_key, workout_index)


def mesocycle_progress(mesocycle: Mesocycle, today: str) -> MesocycleProgress:
    """Count completed sessions and locate the first one still open."""
    total = 0
    done = 0
    next_workout: tuple[str, int] | None = None

    for key in sorted(mesocycle.workouts, key=lambda k: parse_week_number(k) or 0):
        for i, session in enumerate(mesocycle.workouts[key]):
            total += 1
            if session.completed:
                done += 1
            elif next_workout is None:
                next_workout = (key, i)

    percent = round(100.0 * done / total, 1) if total else 0.0
    return MesocycleProgress(
        completed_workouts=done,
        total_workouts=total,
        percent_complete=percent,
        current_week=current_week(mesocycle, today),
        next_workout=next_workout,
    )
