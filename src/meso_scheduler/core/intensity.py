"""
Weekly intensity table.

Maps a mesocycle week to its target RPE band. Weeks past the table's
peak week hold the peak band; the deload week always gets the deload
band, which reuses week 1's effort range.
"""

from .config import DELOAD_BAND_WEEK, PEAK_BAND_WEEK, WEEKLY_INTENSITY
from .models import IntensityBand


def get_intensity_band(week: int, is_deload: bool = False) -> IntensityBand:
    """
    Return the intensity band for a 1-based week number.

    Args:
        week: Week number in the mesocycle (1-based)
        is_deload: True for the mesocycle's deload week

    Returns:
        IntensityBand tagged with the requested week number

    Raises:
        ValueError: If week < 1
    """
    if week < 1:
        raise ValueError(f"week must be 1-based, got {week}")
    table_week = DELOAD_BAND_WEEK if is_deload else min(week, PEAK_BAND_WEEK)
    min_effort, max_effort, label = WEEKLY_INTENSITY[table_week]
    return IntensityBand(week=week, min_effort=min_effort, max_effort=max_effort, label=label)


def intensity_table() -> list[IntensityBand]:
    """All bands of the table, week 1 through the deload band."""
    return [
        IntensityBand(week=w, min_effort=lo, max_effort=hi, label=label)
        for w, (lo, hi, label) in sorted(WEEKLY_INTENSITY.items())
    ]
