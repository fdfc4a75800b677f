"""
Data models for meso-scheduler.

All core dataclasses representing a mesocycle document: weeks of workout
sessions, their exercises and sets, feedback records, progression
suggestions, and the typed coordinates used to address them.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, NamedTuple

from .config import (
    EXERTION_LEVELS,
    MAX_PROGRESSION_PCT,
    MAX_WEEKS,
    MIN_PROGRESSION_PCT,
    MIN_WEEKS,
    PUMP_QUALITIES,
    SORENESS_MAX,
    SORENESS_MIN,
    WEIGHT_FEELINGS,
)

WeightFeeling = Literal["too_light", "just_right", "too_heavy", "extremely_heavy", ""]
Difficulty = Literal["too_easy", "just_right", "too_hard", ""]
ExerciseType = Literal["strength", "cardio"]
ExerciseState = Literal["pending", "in_progress", "completed"]

_WEEK_KEY_PREFIX = "week"
_NUMERAL_RE = re.compile(r"\d+")


def week_key(week_number: int) -> str:
    """Return the document key for a 1-based week number, e.g. ``week3``."""
    return f"{_WEEK_KEY_PREFIX}{week_number}"


def parse_week_number(key: str) -> int | None:
    """
    Extract the week number carried by a week key.

    ``"week3"`` → 3. Keys without a numeral return None and are never
    treated as eligible weeks.
    """
    if not isinstance(key, str):
        return None
    match = _NUMERAL_RE.search(key)
    return int(match.group()) if match else None


def validate_iso_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Invalid date format: {date_str!r}. Expected YYYY-MM-DD")
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


class ExerciseCoord(NamedTuple):
    """Address of one exercise inside a mesocycle document."""

    week_key: str
    workout_index: int
    exercise_index: int


class SetCoord(NamedTuple):
    """Address of one generated set inside a mesocycle document."""

    week_key: str
    workout_index: int
    exercise_index: int
    set_index: int

    @property
    def exercise(self) -> ExerciseCoord:
        return ExerciseCoord(self.week_key, self.workout_index, self.exercise_index)


@dataclass(frozen=True)
class IntensityBand:
    """Target effort range (RPE) for one week of the mesocycle."""

    week: int
    min_effort: int
    max_effort: int
    label: str

    def __post_init__(self) -> None:
        if self.min_effort > self.max_effort:
            raise ValueError("min_effort must not exceed max_effort")


@dataclass
class SetRecord:
    """
    One pre-materialized set of an exercise.

    Target fields are written by the generator and the propagator; the
    completed fields belong to the athlete and are only written when the
    set is logged. Weights are kept as entered text.
    """

    id: str
    number: int
    target_reps: int
    target_weight: str = ""
    completed_reps: str = ""
    completed_weight: str = ""
    completed: bool = False

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError("number must be 1-based")
        if self.target_reps < 0:
            raise ValueError("target_reps must be non-negative")


@dataclass
class FeedbackRecord:
    """Per-exercise feedback captured by the weight-feeling survey."""

    weight_feeling: WeightFeeling = ""
    muscle_activation: str = ""
    performance_rating: str = ""
    notes: str = ""
    timestamp: str = ""

    def __post_init__(self) -> None:
        if self.weight_feeling and self.weight_feeling not in WEIGHT_FEELINGS:
            raise ValueError(
                f"Invalid weight_feeling: {self.weight_feeling!r}. "
                f"Must be one of {WEIGHT_FEELINGS}"
            )

    @property
    def recorded(self) -> bool:
        return bool(self.weight_feeling)


@dataclass
class ExerciseInstance:
    """
    An exercise scheduled inside one workout session.

    ``id`` is ``"{workout_id}-{base_exercise_id}"``: unique within its
    session, but different for the same movement in another week.
    ``base_exercise_id`` is the template id and stays the same across weeks.
    """

    id: str
    name: str
    muscle_group: str
    target_sets: int
    target_reps: int
    weight: str = ""
    reps: str = ""
    notes: str = ""
    generated_sets: list[SetRecord] = field(default_factory=list)
    base_exercise_id: str = ""
    completed: bool = False
    weight_feeling: WeightFeeling = ""
    feedback: FeedbackRecord = field(default_factory=FeedbackRecord)
    feedback_prompted: bool = False
    exercise_type: ExerciseType = "strength"
    duration_minutes: int = 0

    def __post_init__(self) -> None:
        if self.target_sets < 0:
            raise ValueError("target_sets must be non-negative")
        if self.target_reps < 0:
            raise ValueError("target_reps must be non-negative")
        if self.exercise_type not in ("strength", "cardio"):
            raise ValueError(f"Invalid exercise_type: {self.exercise_type}")

    @property
    def completed_set_count(self) -> int:
        return sum(1 for s in self.generated_sets if s.completed)

    @property
    def state(self) -> ExerciseState:
        """Pending → in_progress (≥1 set logged) → completed (all target sets logged)."""
        done = self.completed_set_count
        if done == 0:
            return "pending"
        if done >= max(self.target_sets, len(self.generated_sets)):
            return "completed"
        return "in_progress"


@dataclass
class WorkoutFeedback:
    """Session-level survey filled in when a workout is finished."""

    difficulty: Difficulty = ""
    soreness: dict[str, int] = field(default_factory=dict)  # muscle group -> 1..5
    pump_quality: dict[str, str] = field(default_factory=dict)  # Poor | Good | Excellent
    exertion_level: str = ""
    notes: str = ""

    def __post_init__(self) -> None:
        for group, rating in self.soreness.items():
            if isinstance(rating, bool) or not isinstance(rating, int):
                raise ValueError(f"Soreness for {group!r} must be an integer, got {rating!r}")
            if not SORENESS_MIN <= rating <= SORENESS_MAX:
                raise ValueError(
                    f"Soreness for {group!r} must be between {SORENESS_MIN} and {SORENESS_MAX}"
                )
        for group, quality in self.pump_quality.items():
            if quality not in PUMP_QUALITIES:
                raise ValueError(
                    f"Invalid pump quality for {group!r}: {quality!r}. "
                    f"Must be one of {PUMP_QUALITIES}"
                )
        if self.exertion_level and self.exertion_level not in EXERTION_LEVELS:
            raise ValueError(
                f"Invalid exertion_level: {self.exertion_level!r}. "
                f"Must be one of {EXERTION_LEVELS}"
            )


@dataclass
class WorkoutSession:
    """
    One dated workout in a mesocycle week.

    ``id`` is derived from week/template/day indices at generation time and
    must never change afterwards; lookups recompute it.
    """

    id: str
    name: str
    date: str  # ISO format: YYYY-MM-DD
    week_number: int
    completed: bool = False
    exercises: list[ExerciseInstance] = field(default_factory=list)
    intensity_band: IntensityBand | None = None
    feedback: WorkoutFeedback | None = None
    is_deload: bool = False

    def __post_init__(self) -> None:
        validate_iso_date(self.date)
        if self.week_number < 1:
            raise ValueError("week_number must be 1-based")

    @property
    def weekday(self) -> int:
        """Day of week of the session date, 0 = Sunday … 6 = Saturday."""
        return (datetime.strptime(self.date, "%Y-%m-%d").weekday() + 1) % 7


@dataclass
class Mesocycle:
    """
    A multi-week training block owned by one athlete.

    ``workouts`` maps ``week<N>`` keys to that week's sessions. A deload
    week may hold no sessions at all.
    """

    id: str
    name: str
    start_date: str  # ISO format: YYYY-MM-DD
    end_date: str
    week_count: int
    weekly_progression_pct: float = 5.0
    include_deload: bool = False
    split_name: str = ""
    workouts: dict[str, list[WorkoutSession]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_iso_date(self.start_date)
        validate_iso_date(self.end_date)
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        if not MIN_WEEKS <= self.week_count <= MAX_WEEKS:
            raise ValueError(f"week_count must be between {MIN_WEEKS} and {MAX_WEEKS}")
        if not MIN_PROGRESSION_PCT <= self.weekly_progression_pct <= MAX_PROGRESSION_PCT:
            raise ValueError(
                f"weekly_progression_pct must be between {MIN_PROGRESSION_PCT:g} "
                f"and {MAX_PROGRESSION_PCT:g}"
            )
        for key in self.workouts:
            n = parse_week_number(key)
            if n is None or not 1 <= n <= self.week_count:
                raise ValueError(f"Week key {key!r} outside 1..{self.week_count}")

    @property
    def deload_week(self) -> int | None:
        return self.week_count if self.include_deload else None

    def week(self, key: str) -> list[WorkoutSession]:
        """Sessions of a week; an absent week is an empty list."""
        return self.workouts.get(key, [])

    def workout_at(self, key: str, workout_index: int) -> WorkoutSession:
        """Resolve (week_key, workout_index). Raises KeyError / IndexError."""
        if key not in self.workouts:
            raise KeyError(f"Week {key!r} not in mesocycle {self.id}")
        sessions = self.workouts[key]
        if not 0 <= workout_index < len(sessions):
            raise IndexError(f"Workout index {workout_index} out of range for {key}")
        return sessions[workout_index]

    def exercise_at(self, coord: ExerciseCoord) -> ExerciseInstance:
        workout = self.workout_at(coord.week_key, coord.workout_index)
        if not 0 <= coord.exercise_index < len(workout.exercises):
            raise IndexError(
                f"Exercise index {coord.exercise_index} out of range for {workout.id}"
            )
        return workout.exercises[coord.exercise_index]

    def set_at(self, coord: SetCoord) -> SetRecord:
        exercise = self.exercise_at(coord.exercise)
        if not 0 <= coord.set_index < len(exercise.generated_sets):
            raise IndexError(f"Set index {coord.set_index} out of range for {exercise.id}")
        return exercise.generated_sets[coord.set_index]

    def all_workouts(self) -> list[WorkoutSession]:
        """Every session in week order, then list order."""
        ordered = sorted(self.workouts, key=lambda k: parse_week_number(k) or 0)
        return [w for key in ordered for w in self.workouts[key]]


@dataclass(frozen=True)
class Suggestion:
    """Next-week target computed from one completed exercise."""

    exercise_id: str
    exercise_name: str
    base_exercise_id: str
    weight: int
    reps: int
    sets: int
