"""
JSON-file storage for mesocycle documents.

Each mesocycle is one ``<id>.json`` file under ``<base_dir>/mesocycles/``;
completed workouts are appended to ``<base_dir>/history.jsonl``.

Writes are last-write-wins: there is no version token and no lock held
between load and save.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path

from ..core.errors import MesocycleNotFoundError, StorageError
from ..core.models import Mesocycle, WorkoutSession
from .serializers import (
    ValidationError,
    dict_to_mesocycle,
    json_line_to_workout,
    mesocycle_to_dict,
    workout_to_json_line,
)

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


class MesocycleStore:
    """
    Manages mesocycle documents stored as JSON files.

    Layout:
    - ``mesocycles/<id>.json``: one document per mesocycle
    - ``history.jsonl``: one completed workout per line
    """

    def __init__(self, base_dir: str | Path):
        """
        Initialize the store.

        Args:
            base_dir: Directory holding all store files
        """
        self.base_dir = Path(base_dir)
        self.documents_dir = self.base_dir / "mesocycles"
        self.history_path = self.base_dir / "history.jsonl"

    def _document_path(self, mesocycle_id: str) -> Path:
        if not mesocycle_id or not _SAFE_ID.match(mesocycle_id) or mesocycle_id in (".", ".."):
            raise StorageError(f"Invalid mesocycle id: {mesocycle_id!r}", mesocycle_id)
        return self.documents_dir / f"{mesocycle_id}.json"

    def exists(self, mesocycle_id: str) -> bool:
        """Check if a document exists for the id."""
        return self._document_path(mesocycle_id).exists()

    def list_ids(self) -> list[str]:
        """Ids of all stored mesocycles, sorted."""
        if not self.documents_dir.is_dir():
            return []
        return sorted(p.stem for p in self.documents_dir.glob("*.json"))

    def load(self, mesocycle_id: str) -> Mesocycle:
        """
        Load one mesocycle.

        Raises:
            MesocycleNotFoundError: If no document exists for the id
            StorageError: If the file cannot be read or is invalid
        """
        path = self._document_path(mesocycle_id)
        if not path.exists():
            raise MesocycleNotFoundError(f"Mesocycle not found: {mesocycle_id}", mesocycle_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return dict_to_mesocycle(data)
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}", mesocycle_id) from e
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Invalid mesocycle file {path}: {e}", mesocycle_id) from e

    def load_all(self) -> list[Mesocycle]:
        """Load every stored mesocycle, ordered by start date."""
        mesocycles = [self.load(mid) for mid in self.list_ids()]
        mesocycles.sort(key=lambda m: (m.start_date, m.id))
        return mesocycles

    def save(self, mesocycle: Mesocycle) -> None:
        """
        Write a mesocycle, replacing any stored version.

        The file is written to a temporary file first and then moved into
        place, so readers never see a half-written document.

        Raises:
            StorageError: If the file cannot be written
        """
        path = self._document_path(mesocycle.id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{mesocycle.id}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(mesocycle_to_dict(mesocycle), f, indent=2)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}", mesocycle.id) from e
        logger.debug("Saved mesocycle %s to %s", mesocycle.id, path)

    def delete(self, mesocycle_id: str) -> None:
        """
        Delete a stored mesocycle. History lines are kept.

        Raises:
            MesocycleNotFoundError: If no document exists for the id
        """
        path = self._document_path(mesocycle_id)
        if not path.exists():
            raise MesocycleNotFoundError(f"Mesocycle not found: {mesocycle_id}", mesocycle_id)
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Cannot delete {path}: {e}", mesocycle_id) from e

    def append_history(self, mesocycle_id: str, workout: WorkoutSession) -> None:
        """Append a completed workout to the history log."""
        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.history_path, "a", encoding="utf-8") as f:
                f.write(workout_to_json_line(mesocycle_id, workout) + "\n")
        except OSError as e:
            raise StorageError(f"Cannot append to {self.history_path}: {e}", mesocycle_id) from e

    def load_history(self, mesocycle_id: str | None = None) -> list[tuple[str, WorkoutSession]]:
        """
        Load the history log.

        Args:
            mesocycle_id: Only return entries of this mesocycle if given

        Returns:
            List of (mesocycle id, workout) in log order; empty if no log

        Raises:
            StorageError: If a line cannot be parsed
        """
        if not self.history_path.exists():
            return []

        entries: list[tuple[str, WorkoutSession]] = []
        try:
            with open(self.history_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entry = json_line_to_workout(line)
                    except ValidationError as e:
                        raise StorageError(
                            f"Error parsing line {line_num} in {self.history_path}: {e}"
                        ) from e
                    if mesocycle_id is None or entry[0] == mesocycle_id:
                        entries.append(entry)
        except OSError as e:
            raise StorageError(f"Cannot read {self.history_path}: {e}") from e

        return entries


def get_default_store_dir() -> Path:
    """Default store directory, ``~/.meso-scheduler``."""
    return Path.home() / ".meso-scheduler"


def get_default_store() -> MesocycleStore:
    """
    Get a MesocycleStore at the default location.

    Returns:
        MesocycleStore instance
    """
    return MesocycleStore(get_default_store_dir())
