"""meso-scheduler exceptions."""


class MesoSchedulerError(Exception):
    """Base exception for meso-scheduler errors."""
    pass


class StorageError(MesoSchedulerError):
    """Raised when the mesocycle store cannot be read or written."""

    def __init__(self, message: str, mesocycle_id: str | None = None):
        super().__init__(message)
        self.mesocycle_id = mesocycle_id


class MesocycleNotFoundError(StorageError):
    """Raised when a mesocycle document does not exist in the store."""
    pass


class IncompleteWorkoutError(MesoSchedulerError, ValueError):
    """Raised when a workout is completed while exercises lack weight or reps."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []
