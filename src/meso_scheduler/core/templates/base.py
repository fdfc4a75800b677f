"""
Base types for the template library.

ExerciseTemplate is one catalog entry; WorkoutTemplate groups exercises
under a name and the weekdays it is trained on; SplitTemplate is a named
weekly pattern of workouts, optionally with a dedicated deload week.
All are immutable.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExerciseTemplate:
    """One catalog exercise with its default prescription."""

    id: str                   # e.g. "bench-press-chest"
    name: str                 # e.g. "Barbell Bench Press"
    muscle_group: str         # e.g. "chest"
    sets: int
    reps: int
    notes: str = ""
    exercise_type: str = "strength"   # "strength" | "cardio"
    duration_minutes: int = 0         # cardio only

    def __post_init__(self) -> None:
        if self.sets < 1:
            raise ValueError(f"{self.id}: sets must be positive")
        if self.reps < 0:
            raise ValueError(f"{self.id}: reps must be non-negative")
        if self.exercise_type not in ("strength", "cardio"):
            raise ValueError(f"{self.id}: invalid exercise_type {self.exercise_type!r}")


@dataclass(frozen=True)
class WorkoutTemplate:
    """A named workout trained on the given weekdays (0 = Sunday … 6 = Saturday)."""

    name: str
    weekdays: tuple[int, ...]
    exercises: tuple[ExerciseTemplate, ...]

    @property
    def muscle_groups(self) -> list[str]:
        """Unique muscle groups in exercise order."""
        return list(dict.fromkeys(e.muscle_group for e in self.exercises))


@dataclass(frozen=True)
class SplitTemplate:
    """
    A named weekly training split.

    ``deload_workouts`` are only used for the deload week of a mesocycle
    that includes one; standard weeks use ``workouts``.
    """

    name: str
    workouts: tuple[WorkoutTemplate, ...]
    deload_workouts: tuple[WorkoutTemplate, ...] = field(default_factory=tuple)
    description: str = ""

    @property
    def sessions_per_week(self) -> int:
        return sum(len(w.weekdays) for w in self.workouts)
