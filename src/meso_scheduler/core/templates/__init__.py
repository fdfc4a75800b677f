"""
Template library for meso-scheduler.

Exercise catalog entries and weekly split templates are loaded from the
bundled YAML files in ``src/meso_scheduler/library/``.
"""

from .base import ExerciseTemplate, SplitTemplate, WorkoutTemplate
from .registry import (
    EXERCISE_CATALOG,
    SPLIT_REGISTRY,
    find_catalog_exercise,
    get_muscle_group_exercises,
    get_split,
    list_split_names,
)

__all__ = [
    "ExerciseTemplate",
    "WorkoutTemplate",
    "SplitTemplate",
    "EXERCISE_CATALOG",
    "SPLIT_REGISTRY",
    "find_catalog_exercise",
    "get_muscle_group_exercises",
    "get_split",
    "list_split_names",
]
