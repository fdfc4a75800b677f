"""
Template registry.

The exercise catalog and all split templates are loaded from the bundled
YAML files at import time. If no split can be loaded a RuntimeError is
raised.

User overrides: place split files in ``~/.meso-scheduler/splits/``.
"""

from .base import ExerciseTemplate, SplitTemplate
from .loader import load_catalog, load_splits, scheduled_exercise


def _build_registry() -> tuple[dict[str, list[ExerciseTemplate]], dict[str, SplitTemplate]]:
    catalog = load_catalog()
    splits = load_splits(catalog)
    if not splits:
        raise RuntimeError(
            "meso-scheduler: no split templates could be loaded from YAML. "
            "Check that src/meso_scheduler/library/splits/*.yaml files are present and valid."
        )
    return catalog, splits


EXERCISE_CATALOG, SPLIT_REGISTRY = _build_registry()


def get_split(name: str) -> SplitTemplate:
    """
    Return the SplitTemplate registered under ``name``.

    Raises:
        ValueError: If no split has that name
    """
    if name not in SPLIT_REGISTRY:
        valid = ", ".join(SPLIT_REGISTRY)
        raise ValueError(f"Unknown split template '{name}'. Valid names: {valid}")
    return SPLIT_REGISTRY[name]


def list_split_names() -> list[str]:
    """Names of all registered splits, in load order."""
    return list(SPLIT_REGISTRY)


def get_muscle_group_exercises(muscle_group: str) -> list[ExerciseTemplate]:
    """Catalog entries for a muscle group (empty list if unknown)."""
    return list(EXERCISE_CATALOG.get(muscle_group, []))


def find_catalog_exercise(exercise_id: str) -> ExerciseTemplate | None:
    """
    Look up a catalog exercise by id across all muscle groups.

    Accepts the bare catalog id (``lateral-raise``) or the scheduled id
    (``lateral-raise-shoulders``) and returns the entry as scheduled, so an
    exercise added by hand carries the same id as one generated by a split.
    """
    for group, entries in EXERCISE_CATALOG.items():
        for entry in entries:
            if exercise_id in (entry.id, f"{entry.id}-{group}"):
                return scheduled_exercise(entry, group)
    return None
