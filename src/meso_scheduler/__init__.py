"""meso-scheduler: mesocycle planning and week-to-week progression."""

__version__ = "0.1.0"
