"""
YAML → template loader.

Loads the exercise catalog (``library/exercises.yaml``) and one split per
file from ``library/splits/``. A split workout either lists its exercises
explicitly or names muscle groups, in which case the first
EXERCISES_PER_MUSCLE_GROUP catalog entries of each group are used.

User overrides: place split files in ``~/.meso-scheduler/splits/``.
A user file replaces the bundled split with the same file stem; a user
file with a new stem adds a split.

Usage (internal, called by registry.py):
    from .loader import load_catalog, load_splits
    catalog = load_catalog()
    splits = load_splits(catalog)   # dict or None on failure
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

import yaml

from ..config import EXERCISES_PER_MUSCLE_GROUP, WEEKDAY_NAMES
from .base import ExerciseTemplate, SplitTemplate, WorkoutTemplate

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset({"id", "name", "sets", "reps"})

_WEEKDAY_LOOKUP: dict[str, int] = {name.lower(): i for i, name in enumerate(WEEKDAY_NAMES)}


def parse_weekday(value: int | str) -> int:
    """
    Convert a weekday name ("Monday") or number (0–6) to the 0 = Sunday index.

    Raises ValueError for unknown names. Integers are passed through unchanged;
    the generator handles out-of-range values.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid weekday: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text in _WEEKDAY_LOOKUP:
        return _WEEKDAY_LOOKUP[text]
    if text.isdigit():
        return int(text)
    raise ValueError(f"Invalid weekday: {value!r}")


def exercise_from_dict(d: dict, muscle_group: str | None = None) -> ExerciseTemplate:
    """Convert a raw dict (from YAML) to an ExerciseTemplate.

    Raises ValueError if any required field is absent.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if muscle_group is None and "muscle_group" not in d:
        missing = missing | {"muscle_group"}
    if missing:
        raise ValueError(f"ExerciseTemplate missing fields: {sorted(missing)}")

    return ExerciseTemplate(
        id=str(d["id"]),
        name=str(d["name"]),
        muscle_group=str(d.get("muscle_group", muscle_group)),
        sets=int(d["sets"]),
        reps=int(d["reps"]),
        notes=str(d.get("notes") or ""),
        exercise_type=str(d.get("exercise_type", "strength")),
        duration_minutes=int(d.get("duration_minutes", 0)),
    )


def catalog_from_dict(d: dict) -> dict[str, list[ExerciseTemplate]]:
    """Convert the raw catalog mapping {muscle_group: [entries]} to templates."""
    catalog: dict[str, list[ExerciseTemplate]] = {}
    for group, entries in d.items():
        if not isinstance(entries, list):
            raise ValueError(f"Catalog group {group!r} must be a list")
        catalog[str(group)] = [exercise_from_dict(e, str(group)) for e in entries]
    return catalog


def scheduled_exercise(entry: ExerciseTemplate, group: str) -> ExerciseTemplate:
    """Catalog entry as scheduled in a workout, id ``"{catalog_id}-{group}"``."""
    return ExerciseTemplate(
        id=f"{entry.id}-{group}",
        name=entry.name,
        muscle_group=group,
        sets=entry.sets,
        reps=entry.reps,
        notes=entry.notes,
        exercise_type=entry.exercise_type,
        duration_minutes=entry.duration_minutes,
    )


def workout_from_dict(
    d: dict,
    catalog: dict[str, list[ExerciseTemplate]],
) -> WorkoutTemplate:
    """
    Convert a raw split-day dict to a WorkoutTemplate.

    Explicit ``exercises`` win over ``muscle_groups``. Catalog exercises get
    the id ``"{catalog_id}-{muscle_group}"`` so the same movement keeps one
    id wherever it is scheduled.
    """
    if "name" not in d:
        raise ValueError("Workout template missing 'name'")
    raw_days = d.get("weekdays", d.get("days"))
    if not raw_days:
        raise ValueError(f"Workout {d['name']!r} has no weekdays")
    if not isinstance(raw_days, list):
        raw_days = [raw_days]
    weekdays = tuple(parse_weekday(v) for v in raw_days)

    if "exercises" in d:
        exercises = tuple(exercise_from_dict(e) for e in d["exercises"])
    else:
        groups = d.get("muscle_groups") or []
        selected: list[ExerciseTemplate] = []
        for group in groups:
            if group not in catalog:
                raise ValueError(f"Unknown muscle group {group!r} in {d['name']!r}")
            for entry in catalog[group][:EXERCISES_PER_MUSCLE_GROUP]:
                selected.append(scheduled_exercise(entry, group))
        exercises = tuple(selected)

    if not exercises:
        raise ValueError(f"Workout {d['name']!r} has no exercises")
    return WorkoutTemplate(name=str(d["name"]), weekdays=weekdays, exercises=exercises)


def split_from_dict(d: dict, catalog: dict[str, list[ExerciseTemplate]]) -> SplitTemplate:
    """Convert a raw split dict (from YAML) to a SplitTemplate."""
    if "name" not in d or "workouts" not in d:
        raise ValueError("SplitTemplate requires 'name' and 'workouts'")
    return SplitTemplate(
        name=str(d["name"]),
        workouts=tuple(workout_from_dict(w, catalog) for w in d["workouts"]),
        deload_workouts=tuple(
            workout_from_dict(w, catalog) for w in d.get("deload_workouts") or []
        ),
        description=str(d.get("description") or ""),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} on any parse or read error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _get_bundled_library_dir() -> Path | None:
    """Return path to the bundled library/ data directory, or None if not found."""
    # loader.py lives at src/meso_scheduler/core/templates/loader.py
    # three levels up → src/meso_scheduler/
    candidate = Path(__file__).parent.parent.parent / "library"
    return candidate if candidate.is_dir() else None


def _get_user_splits_dir() -> Path | None:
    """Return ~/.meso-scheduler/splits/ if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".meso-scheduler" / "splits"
    return p if p.is_dir() else None


def load_catalog() -> dict[str, list[ExerciseTemplate]]:
    """Return {muscle_group: [ExerciseTemplate]} from the bundled catalog.

    Returns an empty dict when the catalog file is missing or invalid.
    """
    library = _get_bundled_library_dir()
    if library is None:
        return {}
    raw = _load_yaml_file(library / "exercises.yaml")
    try:
        return catalog_from_dict(raw)
    except (ValueError, TypeError) as exc:
        warnings.warn(f"meso-scheduler: invalid exercise catalog ({exc})", stacklevel=2)
        return {}


def load_splits(
    catalog: dict[str, list[ExerciseTemplate]],
) -> dict[str, SplitTemplate] | None:
    """Return {split name: SplitTemplate} from bundled and user split files.

    Files are processed in sorted stem order, bundled first; a user file
    with a bundled stem replaces it. Invalid files are skipped with a
    warning. Returns None when nothing could be loaded.
    """
    sources: dict[str, Path] = {}
    bundled = _get_bundled_library_dir()
    if bundled is not None and (bundled / "splits").is_dir():
        for p in sorted((bundled / "splits").glob("*.yaml")):
            sources[p.stem] = p
    user_dir = _get_user_splits_dir()
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            sources[p.stem] = p

    result: dict[str, SplitTemplate] = {}
    for stem, path in sources.items():
        raw = _load_yaml_file(path)
        if not raw:
            warnings.warn(f"meso-scheduler: skipping empty split file '{path}'", stacklevel=2)
            continue
        try:
            split = split_from_dict(raw, catalog)
        except (ValueError, TypeError, KeyError) as exc:
            warnings.warn(f"meso-scheduler: skipping split '{stem}' ({exc})", stacklevel=2)
            continue
        result[split.name] = split

    return result if result else None
