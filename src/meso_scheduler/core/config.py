"""
Configuration constants for the mesocycle planning engine.

All adjustable parameters are centralized here for easy tuning.
Progression modifiers and matcher keywords can be overridden from YAML
through core.engine.config_loader; everything else is fixed.
"""

from typing import Final

# =============================================================================
# MESOCYCLE BOUNDS
# =============================================================================

MIN_WEEKS: Final[int] = 1
MAX_WEEKS: Final[int] = 12
DEFAULT_WEEKS: Final[int] = 4

MIN_PROGRESSION_PCT: Final[float] = 0.0
MAX_PROGRESSION_PCT: Final[float] = 20.0
DEFAULT_PROGRESSION_PCT: Final[float] = 5.0

DEFAULT_MESOCYCLE_NAME: Final[str] = "4-Week Hypertrophy Block"
DEFAULT_SPLIT: Final[str] = "Push/Pull/Legs"

# =============================================================================
# TEMPLATE LIBRARY
# =============================================================================

# Muscle-group based split days take this many catalog entries per group
EXERCISES_PER_MUSCLE_GROUP: Final[int] = 2

# 0 = Sunday … 6 = Saturday (template weekday convention)
WEEKDAY_NAMES: Final[tuple[str, ...]] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

# =============================================================================
# WEEKLY INTENSITY (RPE bands)
# =============================================================================

DELOAD_BAND_WEEK: Final[int] = 5
PEAK_BAND_WEEK: Final[int] = 4

# week -> (min_effort, max_effort, label)
WEEKLY_INTENSITY: Final[dict[int, tuple[int, int, str]]] = {
    1: (6, 7, "MEV Introduction (3-4 RIR) - Focus on technique and form"),
    2: (7, 8, "Volume Accumulation (2-3 RIR) - Progressive overload begins"),
    3: (8, 9, "MAV Optimization (1-2 RIR) - Higher intensity week"),
    4: (9, 10, "MRV Peaking (0-1 RIR) - Maximum recoverable volume"),
    5: (6, 7, "Deload week (3-4 RIR) - Reduced volume and intensity"),
}

# =============================================================================
# PROGRESSION
# =============================================================================

# Workout-level difficulty -> weight multiplier for next week's target
DIFFICULTY_WEIGHT_MODIFIERS: Final[dict[str, float]] = {
    "too_hard": 1.025,
    "too_easy": 1.075,
}
DEFAULT_WEIGHT_MODIFIER: Final[float] = 1.05

DIFFICULTY_VALUES: Final[tuple[str, ...]] = ("too_easy", "just_right", "too_hard")

# =============================================================================
# FEEDBACK
# =============================================================================

WEIGHT_FEELINGS: Final[tuple[str, ...]] = (
    "too_light",
    "just_right",
    "too_heavy",
    "extremely_heavy",
)
PUMP_QUALITIES: Final[tuple[str, ...]] = ("Poor", "Good", "Excellent")
EXERTION_LEVELS: Final[tuple[str, ...]] = ("Light", "Moderate", "Hard", "Very Hard")
SORENESS_MIN: Final[int] = 1
SORENESS_MAX: Final[int] = 5

# =============================================================================
# CROSS-WEEK MATCHING
# =============================================================================

FUZZY_KEYWORDS: Final[tuple[str, ...]] = (
    "squat",
    "bench",
    "press",
    "row",
    "curl",
    "deadlift",
    "fly",
)
