"""
CLI entry point using Typer.

Provides commands for mesocycle management:
- templates: List available split templates
- create: Generate a new mesocycle from a split
- list / show / delete: Browse and remove stored mesocycles
- log-set / undo-set: Record performed sets
- feedback: Record the weight-feeling survey for an exercise
- suggest: Preview next week's targets for a workout
- complete: Complete a workout and carry progression forward
"""

from .app import app
from .commands import mesocycle, workouts  # noqa: F401  (registers commands)

__all__ = ["app"]


if __name__ == "__main__":
    app()
