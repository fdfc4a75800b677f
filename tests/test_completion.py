"""
Tests for set logging, feedback, workout completion, and manual edits.

The split used throughout: Push on Monday (bench 3x8, fly 2x12) and
Legs on Thursday (squat 3x5), starting Monday 2024-01-01.
"""

import copy

import pytest

from meso_scheduler.core.completion import (
    can_complete,
    complete_workout,
    record_exercise_feedback,
    record_set,
    record_workout_feedback,
    undo_set,
)
from meso_scheduler.core.editing import (
    add_exercise,
    remove_exercise,
    remove_exercise_everywhere,
    set_exercise_targets,
)
from meso_scheduler.core.errors import IncompleteWorkoutError
from meso_scheduler.core.generator import create_mesocycle
from meso_scheduler.core.matcher import MatchTier
from meso_scheduler.core.metrics import (
    current_week,
    mesocycle_progress,
    parse_number,
    workout_volume,
)
from meso_scheduler.core.models import ExerciseCoord, Mesocycle, SetCoord, WorkoutFeedback
from meso_scheduler.core.templates import find_catalog_exercise, get_split
from meso_scheduler.core.templates.base import (
    ExerciseTemplate,
    SplitTemplate,
    WorkoutTemplate,
)


# ===========================================================================
# Helpers
# ===========================================================================

BENCH = ExerciseTemplate(id="bench", name="Bench Press", muscle_group="chest", sets=3, reps=8)
FLY = ExerciseTemplate(id="fly", name="Cable Fly", muscle_group="chest", sets=2, reps=12)
SQUAT = ExerciseTemplate(id="squat", name="Back Squat", muscle_group="legs", sets=3, reps=5)


def _make_split() -> SplitTemplate:
    return SplitTemplate(
        name="Test Split",
        workouts=(
            WorkoutTemplate(name="Push", weekdays=(1,), exercises=(BENCH, FLY)),
            WorkoutTemplate(name="Legs", weekdays=(4,), exercises=(SQUAT,)),
        ),
    )


def _make_mesocycle(weeks: int = 3, include_deload: bool = False) -> Mesocycle:
    return create_mesocycle(
        "Block", _make_split(), "2024-01-01", weeks,
        include_deload=include_deload, mesocycle_id="m1",
    )


def _log_exercise(
    meso: Mesocycle,
    week: str,
    workout: int,
    exercise: int,
    weight: str,
    reps: str,
) -> Mesocycle:
    """Log every set of one exercise with the same values."""
    n = len(meso.exercise_at(ExerciseCoord(week, workout, exercise)).generated_sets)
    for i in range(n):
        meso = record_set(meso, SetCoord(week, workout, exercise, i), reps, weight).mesocycle
    return meso


def _log_workout(meso: Mesocycle, week: str = "week1", workout: int = 0) -> Mesocycle:
    """Push day: bench 100 x 8, fly 20 x 12."""
    meso = _log_exercise(meso, week, workout, 0, "100", "8")
    return _log_exercise(meso, week, workout, 1, "20", "12")


# ===========================================================================
# Set logging
# ===========================================================================

class TestRecordSet:
    """Exercise state machine and the one-time feedback prompt."""

    def test_first_set_in_progress(self):
        outcome = record_set(_make_mesocycle(), SetCoord("week1", 0, 0, 0), "8", "100")
        ex = outcome.mesocycle.exercise_at(ExerciseCoord("week1", 0, 0))

        assert outcome.state == "in_progress"
        assert outcome.prompt_feedback is False
        assert ex.generated_sets[0].completed
        assert (ex.weight, ex.reps) == ("100", "8")

    def test_last_set_completes_and_prompts_once(self):
        meso = _make_mesocycle()
        prompts = []
        for i in range(3):
            outcome = record_set(meso, SetCoord("week1", 0, 0, i), "8", "100")
            meso = outcome.mesocycle
            prompts.append(outcome.prompt_feedback)

        assert prompts == [False, False, True]
        assert outcome.state == "completed"
        assert meso.exercise_at(ExerciseCoord("week1", 0, 0)).completed

        # Undo and redo the last set: no second prompt
        meso = undo_set(meso, SetCoord("week1", 0, 0, 2))
        again = record_set(meso, SetCoord("week1", 0, 0, 2), "8", "100")
        assert again.state == "completed"
        assert again.prompt_feedback is False

    def test_no_prompt_when_feedback_recorded(self):
        meso = record_exercise_feedback(
            _make_mesocycle(), ExerciseCoord("week1", 0, 1), "just_right"
        )
        meso = record_set(meso, SetCoord("week1", 0, 1, 0), "12", "20").mesocycle
        outcome = record_set(meso, SetCoord("week1", 0, 1, 1), "12", "20")
        assert outcome.state == "completed"
        assert outcome.prompt_feedback is False

    def test_empty_values_fall_back_to_targets(self):
        meso = set_exercise_targets(_make_mesocycle(), ExerciseCoord("week1", 0, 0), "80", "8")
        outcome = record_set(meso, SetCoord("week1", 0, 0, 0), "", "")
        s = outcome.mesocycle.set_at(SetCoord("week1", 0, 0, 0))
        assert (s.completed_reps, s.completed_weight) == ("8", "80")

    def test_blank_weight_without_target_rejected(self):
        meso = _make_mesocycle()
        with pytest.raises(ValueError, match="No weight"):
            record_set(meso, SetCoord("week1", 0, 0, 0), "8", "")
        assert meso.exercise_at(ExerciseCoord("week1", 0, 0)).state == "pending"

    def test_blank_weight_keeps_working_weight(self):
        meso = record_set(_make_mesocycle(), SetCoord("week1", 0, 0, 0), "8", "100").mesocycle
        meso = record_set(meso, SetCoord("week1", 0, 0, 1), "7", "").mesocycle
        ex = meso.exercise_at(ExerciseCoord("week1", 0, 0))
        assert ex.weight == "100"
        assert [s.completed_weight for s in ex.generated_sets] == ["100", "100", ""]

    def test_completed_exercise_has_weight_and_reps(self):
        meso = record_set(_make_mesocycle(), SetCoord("week1", 0, 0, 0), "8", "100").mesocycle
        for i in (1, 2):
            meso = record_set(meso, SetCoord("week1", 0, 0, i), "", "").mesocycle
        ex = meso.exercise_at(ExerciseCoord("week1", 0, 0))
        assert ex.completed
        assert (ex.weight, ex.reps) == ("100", "8")

    def test_input_not_modified(self):
        meso = _make_mesocycle()
        before = copy.deepcopy(meso)
        record_set(meso, SetCoord("week1", 0, 0, 0), "8", "100")
        assert meso == before

    def test_bad_coordinate(self):
        with pytest.raises(IndexError):
            record_set(_make_mesocycle(), SetCoord("week1", 0, 0, 9), "8", "100")
        with pytest.raises(KeyError):
            record_set(_make_mesocycle(), SetCoord("week9", 0, 0, 0), "8", "100")

    def test_undo_clears_values(self):
        meso = record_set(_make_mesocycle(), SetCoord("week1", 0, 0, 0), "8", "100").mesocycle
        meso = undo_set(meso, SetCoord("week1", 0, 0, 0))
        s = meso.set_at(SetCoord("week1", 0, 0, 0))
        assert (s.completed, s.completed_reps, s.completed_weight) == (False, "", "")
        assert meso.exercise_at(ExerciseCoord("week1", 0, 0)).state == "pending"


class TestFeedback:
    """Exercise and workout surveys."""

    def test_record_exercise_feedback(self):
        meso = record_exercise_feedback(
            _make_mesocycle(),
            ExerciseCoord("week1", 0, 0),
            "too_heavy",
            notes="grindy last set",
            timestamp="2024-01-01T18:00:00",
        )
        ex = meso.exercise_at(ExerciseCoord("week1", 0, 0))
        assert ex.weight_feeling == "too_heavy"
        assert ex.feedback.notes == "grindy last set"
        assert ex.feedback.timestamp == "2024-01-01T18:00:00"

    def test_invalid_feeling(self):
        with pytest.raises(ValueError, match="weight feeling"):
            record_exercise_feedback(_make_mesocycle(), ExerciseCoord("week1", 0, 0), "meh")

    def test_record_workout_feedback(self):
        meso = record_workout_feedback(
            _make_mesocycle(), "week1", 0,
            WorkoutFeedback(difficulty="Too Hard", soreness={"chest": 4}),
        )
        fb = meso.workout_at("week1", 0).feedback
        assert fb.difficulty == "too_hard"
        assert fb.soreness == {"chest": 4}

    def test_workout_feedback_fields(self):
        fb = WorkoutFeedback(
            soreness={"chest": 1, "legs": 5},
            pump_quality={"chest": "Excellent"},
            exertion_level="Very Hard",
        )
        assert fb.soreness["legs"] == 5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"soreness": {"chest": 0}},
            {"soreness": {"chest": 6}},
            {"soreness": {"chest": "3"}},
            {"pump_quality": {"chest": "Meh"}},
            {"exertion_level": "Brutal"},
        ],
    )
    def test_workout_feedback_rejects_bad_values(self, kwargs):
        with pytest.raises(ValueError):
            WorkoutFeedback(**kwargs)


# ===========================================================================
# Workout completion
# ===========================================================================

class TestCompleteWorkout:
    """Completion, suggestions, and propagation to next week."""

    def test_cannot_complete_without_values(self):
        meso = _log_exercise(_make_mesocycle(), "week1", 0, 0, "100", "8")
        assert not can_complete(meso.workout_at("week1", 0))
        with pytest.raises(IncompleteWorkoutError) as exc:
            complete_workout(meso, "week1", 0, "just_right")
        assert exc.value.missing == ["Cable Fly"]

    def test_progression_applied_to_next_week(self):
        meso = _log_workout(_make_mesocycle())
        result = complete_workout(meso, "week1", 0, "Just Right")

        assert result.workout.completed
        assert result.suggestions["workout-w1-0-0-bench"].weight == 105
        assert result.propagation.status == "applied"
        assert (result.propagation.week_key, result.propagation.workout_index) == ("week2", 0)
        assert {m.tier for m in result.propagation.applied} == {MatchTier.IDENTITY}

        bench = result.mesocycle.exercise_at(ExerciseCoord("week2", 0, 0))
        assert (bench.weight, bench.reps) == ("105", "8")
        assert all(s.target_weight == "105" for s in bench.generated_sets)
        fly = result.mesocycle.exercise_at(ExerciseCoord("week2", 0, 1))
        assert (fly.weight, fly.reps) == ("21", "12")

        # Week 3 is not touched
        assert result.mesocycle.exercise_at(ExerciseCoord("week3", 0, 0)).weight == ""

    def test_too_hard(self):
        meso = _log_workout(_make_mesocycle())
        result = complete_workout(meso, "week1", 0, "Too Hard")
        assert result.mesocycle.exercise_at(ExerciseCoord("week2", 0, 0)).weight == "103"
        assert result.workout.feedback.difficulty == "too_hard"

    def test_input_not_modified(self):
        meso = _log_workout(_make_mesocycle())
        before = copy.deepcopy(meso)
        complete_workout(meso, "week1", 0, "just_right")
        assert meso == before

    def test_next_week_completed_values_untouched(self):
        meso = _log_workout(_make_mesocycle())
        meso = record_set(meso, SetCoord("week2", 0, 0, 0), "6", "90").mesocycle
        result = complete_workout(meso, "week1", 0, "just_right")
        s = result.mesocycle.set_at(SetCoord("week2", 0, 0, 0))
        assert (s.completed_weight, s.completed_reps) == ("90", "6")
        assert s.target_weight == "105"

    def test_renamed_exercise_matched_by_name(self):
        """Next week's exercise has another id but the same name: tier 2 applies."""
        meso = _log_workout(_make_mesocycle())
        nxt = meso.exercise_at(ExerciseCoord("week2", 0, 0))
        nxt.id = "custom-1"
        nxt.base_exercise_id = "custom"
        nxt.name = "BENCH PRESS"

        result = complete_workout(meso, "week1", 0, "just_right")
        bench_match = [m for m in result.propagation.applied if m.coord.exercise_index == 0]
        assert bench_match[0].tier == MatchTier.EXACT_NAME
        assert result.mesocycle.exercise_at(ExerciseCoord("week2", 0, 0)).weight == "105"

    def test_final_week_is_no_op(self):
        meso = _log_workout(_make_mesocycle(weeks=2), week="week2")
        result = complete_workout(meso, "week2", 0, "just_right")

        assert result.workout.completed
        assert result.propagation.status == "no_next_week"
        assert result.suggestions

    def test_empty_deload_week(self):
        meso = _log_workout(_make_mesocycle(weeks=3, include_deload=True), week="week2")
        result = complete_workout(meso, "week2", 0, "just_right")
        assert result.propagation.status == "no_target_workout"

    def test_no_suggestions_without_weight(self):
        meso = _log_exercise(_make_mesocycle(), "week1", 0, 0, "0", "8")
        meso = _log_exercise(meso, "week1", 0, 1, "0", "12")
        result = complete_workout(meso, "week1", 0, "just_right")
        assert result.propagation.status == "no_suggestions"
        assert result.suggestions == {}

    def test_repeat_completion_is_stable(self):
        meso = _log_workout(_make_mesocycle())
        once = complete_workout(meso, "week1", 0, "just_right").mesocycle
        twice = complete_workout(once, "week1", 0, "just_right").mesocycle
        assert once == twice


# ===========================================================================
# Manual edits
# ===========================================================================

class TestEditing:
    """Adding, removing, and retargeting exercises."""

    def test_add_exercise(self):
        meso = add_exercise(_make_mesocycle(), "week1", 1, BENCH)
        legs = meso.workout_at("week1", 1)
        assert [e.id for e in legs.exercises] == ["workout-w1-1-0-squat", "workout-w1-1-0-bench"]
        assert len(legs.exercises[1].generated_sets) == 3

    def test_catalog_exercise_added_by_hand_matches_by_identity(self):
        meso = create_mesocycle(
            "Block", get_split("Push/Pull/Legs"), "2024-01-01", 2, mesocycle_id="ppl"
        )
        readded = remove_exercise(meso, ExerciseCoord("week2", 0, 0))
        readded = add_exercise(readded, "week2", 0, find_catalog_exercise("bench-press"))
        original = meso.exercise_at(ExerciseCoord("week1", 0, 0))
        added = readded.workout_at("week2", 0).exercises[-1]
        assert added.base_exercise_id == original.base_exercise_id == "bench-press-chest"

        for e_idx in range(2):
            readded = _log_exercise(readded, "week1", 0, e_idx, "100", "8")
        result = complete_workout(readded, "week1", 0, "just_right")
        bench = [m for m in result.propagation.applied if m.coord.exercise_index == 1]
        assert bench[0].tier == MatchTier.IDENTITY
        assert result.mesocycle.workout_at("week2", 0).exercises[-1].weight == "105"

    def test_add_duplicate_rejected(self):
        with pytest.raises(ValueError):
            add_exercise(_make_mesocycle(), "week1", 0, BENCH)

    def test_remove_exercise(self):
        meso = remove_exercise(_make_mesocycle(), ExerciseCoord("week1", 0, 0))
        assert [e.name for e in meso.workout_at("week1", 0).exercises] == ["Cable Fly"]

    def test_remove_everywhere(self):
        meso, removed = remove_exercise_everywhere(_make_mesocycle(), "fly")
        assert removed == 3
        assert all(
            e.base_exercise_id != "fly" for w in meso.all_workouts() for e in w.exercises
        )

    def test_set_targets(self):
        meso = set_exercise_targets(_make_mesocycle(), ExerciseCoord("week1", 0, 0), "80", "10")
        ex = meso.exercise_at(ExerciseCoord("week1", 0, 0))
        assert (ex.weight, ex.reps, ex.target_reps) == ("80", "10", 10)
        assert all(s.target_weight == "80" and s.target_reps == 10 for s in ex.generated_sets)

    @pytest.mark.parametrize("weight,reps", [("", "10"), ("80", ""), ("80", "ten")])
    def test_set_targets_requires_values(self, weight, reps):
        with pytest.raises(ValueError):
            set_exercise_targets(_make_mesocycle(), ExerciseCoord("week1", 0, 0), weight, reps)


# ===========================================================================
# Metrics
# ===========================================================================

class TestMetrics:
    """Number parsing, volume, and progress."""

    @pytest.mark.parametrize(
        "value,expected",
        [("100", 100.0), ("62,5", 62.5), (" 7 ", 7.0), ("", 0.0), ("abc", 0.0), (None, 0.0), ("nan", 0.0), (12, 12.0)],
    )
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    def test_workout_volume(self):
        meso = _log_workout(_make_mesocycle())
        # 3 x 100 x 8 + 2 x 20 x 12
        assert workout_volume(meso.workout_at("week1", 0)) == 2880.0

    def test_current_week(self):
        meso = _make_mesocycle()
        assert current_week(meso, "2023-12-01") == 1
        assert current_week(meso, "2024-01-07") == 1
        assert current_week(meso, "2024-01-08") == 2
        assert current_week(meso, "2024-06-01") == 3

    def test_progress(self):
        meso = _log_workout(_make_mesocycle())
        meso = complete_workout(meso, "week1", 0, "just_right").mesocycle
        progress = mesocycle_progress(meso, "2024-01-02")

        assert (progress.completed_workouts, progress.total_workouts) == (1, 6)
        assert progress.percent_complete == 16.7
        assert progress.next_workout == ("week1", 1)
        assert progress.current_week == 1
