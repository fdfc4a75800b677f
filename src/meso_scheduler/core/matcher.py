"""
Cross-week exercise matcher.

Finds where a completed workout's progression should land in the
following week: first the week, then the workout inside it, then one
target exercise per carried-forward exercise.

Exercise matching runs in four tiers, strongest first:

  1. IDENTITY    same exercise id, or same non-empty base exercise id
  2. EXACT_NAME  case-insensitive name equality
  3. FUZZY_NAME  one name contains the other, or both share a keyword
  4. POSITION    same index within the workout

Each tier is applied to all exercises before the next one starts, and a
target exercise is claimed by at most one source.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable

from .engine.config_loader import DEFAULT_SETTINGS, ProgressionSettings
from .models import (
    ExerciseCoord,
    ExerciseInstance,
    Mesocycle,
    Suggestion,
    WorkoutSession,
    parse_week_number,
    week_key,
)

logger = logging.getLogger(__name__)


class MatchTier(IntEnum):
    IDENTITY = 1
    EXACT_NAME = 2
    FUZZY_NAME = 3
    POSITION = 4


@dataclass(frozen=True)
class ExerciseMatch:
    """One source exercise paired with its target in the next week."""

    source_exercise_id: str
    coord: ExerciseCoord
    tier: MatchTier


@dataclass
class NextWeekTarget:
    """Resolved target workout plus the exercise pairs found in it."""

    week_key: str
    workout_index: int
    matches: list[ExerciseMatch] = field(default_factory=list)


# Picks one candidate index out of several equally good ones
TieBreak = Callable[[list[int]], int]


def first_candidate(candidates: list[int]) -> int:
    return candidates[0]


def resolve_next_week_key(mesocycle: Mesocycle, current_week: int) -> str | None:
    """
    Key of the week after ``current_week``.

    Prefers the canonical ``week{N+1}`` key, then any key whose numeral is
    N+1, then the smallest numbered week after N. Keys without a numeral
    are never chosen.
    """
    wanted = current_week + 1
    canonical = week_key(wanted)
    if canonical in mesocycle.workouts:
        return canonical

    numbered: list[tuple[int, str]] = []
    for key in mesocycle.workouts:
        n = parse_week_number(key)
        if n is not None and n > current_week:
            numbered.append((n, key))
    for n, key in numbered:
        if n == wanted:
            return key
    if numbered:
        return min(numbered, key=lambda item: item[0])[1]
    return None


class ExerciseMatcher:
    """
    Matching strategy for carrying progression into the next week.

    Args:
        keywords: Movement keywords for the fuzzy tier
        tie_break: Chooses among equally ranked workout candidates
    """

    def __init__(
        self,
        keywords: tuple[str, ...] | None = None,
        tie_break: TieBreak = first_candidate,
    ):
        self.keywords = tuple(k.lower() for k in (keywords or DEFAULT_SETTINGS.fuzzy_keywords))
        self.tie_break = tie_break

    @classmethod
    def from_settings(cls, settings: ProgressionSettings) -> "ExerciseMatcher":
        return cls(keywords=settings.fuzzy_keywords)

    # ---- workout selection ------------------------------------------------

    def select_workout(
        self,
        current: WorkoutSession,
        candidates: list[WorkoutSession],
    ) -> int | None:
        """
        Index of the workout in ``candidates`` that continues ``current``.

        Same weekday wins; otherwise the largest exact-name exercise overlap;
        otherwise the first workout. None if there are no candidates.
        """
        if not candidates:
            return None

        same_day = [i for i, w in enumerate(candidates) if w.weekday == current.weekday]
        if same_day:
            return self.tie_break(same_day)

        names = {e.name.strip().lower() for e in current.exercises}
        overlaps = [
            len(names & {e.name.strip().lower() for e in w.exercises}) for w in candidates
        ]
        best = max(overlaps)
        if best > 0:
            return self.tie_break([i for i, o in enumerate(overlaps) if o == best])

        return 0

    # ---- exercise tiers ---------------------------------------------------

    def _shares_keyword(self, a: str, b: str) -> bool:
        return any(k in a and k in b for k in self.keywords)

    def tier_matches(
        self,
        tier: MatchTier,
        source: ExerciseInstance,
        source_index: int,
        target: ExerciseInstance,
        target_index: int,
    ) -> bool:
        """True if ``target`` matches ``source`` at the given tier."""
        if tier is MatchTier.IDENTITY:
            if source.id == target.id:
                return True
            base = source.base_exercise_id
            return bool(base) and base == target.base_exercise_id
        a = source.name.strip().lower()
        b = target.name.strip().lower()
        if tier is MatchTier.EXACT_NAME:
            return a == b
        if tier is MatchTier.FUZZY_NAME:
            if a and b and (a in b or b in a):
                return True
            return self._shares_keyword(a, b)
        return source_index == target_index

    def match_exercises(
        self,
        sources: list[ExerciseInstance],
        targets: list[ExerciseInstance],
        positions: list[int] | None = None,
    ) -> list[tuple[int, int, MatchTier]]:
        """
        Pair source exercises with target exercises.

        ``positions`` gives each source's index in its own workout for the
        positional tier; list order is used when omitted.

        Returns:
            (source_index, target_index, tier) triples in source order.
            Sources without a match are omitted.
        """
        claimed_targets: set[int] = set()
        paired: dict[int, tuple[int, MatchTier]] = {}

        for tier in MatchTier:
            for s_idx, source in enumerate(sources):
                if s_idx in paired:
                    continue
                for t_idx, target in enumerate(targets):
                    if t_idx in claimed_targets:
                        continue
                    position = positions[s_idx] if positions is not None else s_idx
                    if self.tier_matches(tier, source, position, target, t_idx):
                        paired[s_idx] = (t_idx, tier)
                        claimed_targets.add(t_idx)
                        logger.debug(
                            "Matched %s -> %s (tier %s)", source.id, target.id, tier.name
                        )
                        break

        return [(s, t, tier) for s, (t, tier) in sorted(paired.items())]


def find_next_week_target(
    current_workout: WorkoutSession,
    current_week: int,
    mesocycle: Mesocycle,
    suggestions: dict[str, Suggestion] | None = None,
    matcher: ExerciseMatcher | None = None,
) -> NextWeekTarget | None:
    """
    Locate next week's counterpart of ``current_workout`` and its exercises.

    Args:
        current_workout: The workout just completed
        current_week: Its 1-based week number
        mesocycle: Document to search
        suggestions: Restrict matching to exercises with a suggestion
            (keyed by exercise id); all exercises if None
        matcher: Matching strategy; a default ExerciseMatcher if None

    Returns:
        NextWeekTarget, or None when there is no later week or the week
        has no workouts
    """
    matcher = matcher or ExerciseMatcher()

    key = resolve_next_week_key(mesocycle, current_week)
    if key is None:
        logger.debug("No week after week %d in mesocycle %s", current_week, mesocycle.id)
        return None

    candidates = mesocycle.week(key)
    index = matcher.select_workout(current_workout, candidates)
    if index is None:
        logger.warning("Week %s of mesocycle %s has no workouts", key, mesocycle.id)
        return None

    positions = [
        i for i, e in enumerate(current_workout.exercises)
        if suggestions is None or e.id in suggestions
    ]
    sources = [current_workout.exercises[i] for i in positions]
    pairs = matcher.match_exercises(sources, candidates[index].exercises, positions)
    matches = [
        ExerciseMatch(
            source_exercise_id=sources[s_idx].id,
            coord=ExerciseCoord(key, index, t_idx),
            tier=tier,
        )
        for s_idx, t_idx, tier in pairs
    ]
    return NextWeekTarget(week_key=key, workout_index=index, matches=matches)
