"""
Minimal smoke tests for meso-scheduler CLI.

Tests basic functionality:
- App runs and lists templates
- A mesocycle is created in the store
- Sets can be logged and undone
- Completing a workout carries progression into next week
- Errors exit with code 1
"""

import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from meso_scheduler.cli.main import app
from meso_scheduler.core.models import ExerciseCoord, SetCoord
from meso_scheduler.io.mesocycle_store import MesocycleStore


runner = CliRunner()


@pytest.fixture
def temp_store_dir():
    """Create a temporary directory for the store."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _create(store_dir: Path, *extra: str):
    return runner.invoke(app, [
        "create",
        "--id", "test",
        "--split", "Push/Pull/Legs",
        "--start", "2024-01-01",
        "--weeks", "2",
        "--store-dir", str(store_dir),
        *extra,
    ])


def _log_push_day(store_dir: Path) -> None:
    """Log every set of week 1, workout 1 at 100 x 8."""
    meso = MesocycleStore(store_dir).load("test")
    for e_idx, exercise in enumerate(meso.workout_at("week1", 0).exercises, 1):
        for s_idx in range(1, len(exercise.generated_sets) + 1):
            result = runner.invoke(app, [
                "log-set", "test", "1", "1", str(e_idx), str(s_idx),
                "--reps", "8", "--weight", "100",
                "--store-dir", str(store_dir),
            ])
            assert result.exit_code == 0, result.output


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "meso-scheduler" in result.output or "mesocycle" in result.output.lower()

    def test_templates(self):
        result = runner.invoke(app, ["templates"])
        assert result.exit_code == 0
        assert "Upper/Lower" in result.output

    def test_create_saves_mesocycle(self, temp_store_dir):
        result = _create(temp_store_dir)
        assert result.exit_code == 0, result.output

        meso = MesocycleStore(temp_store_dir).load("test")
        assert meso.end_date == "2024-01-14"
        assert len(meso.all_workouts()) == 6

    def test_create_duplicate_fails(self, temp_store_dir):
        _create(temp_store_dir)
        result = _create(temp_store_dir)
        assert result.exit_code == 1

    def test_create_unknown_split(self, temp_store_dir):
        result = runner.invoke(app, [
            "create", "--split", "Nope", "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 1

    def test_create_too_many_weeks(self, temp_store_dir):
        result = _create(temp_store_dir, "--weeks", "13")
        assert result.exit_code == 1

    def test_list_and_show(self, temp_store_dir):
        _create(temp_store_dir)

        result = runner.invoke(app, ["list", "--store-dir", str(temp_store_dir)])
        assert result.exit_code == 0
        assert "test" in result.output

        result = runner.invoke(app, [
            "show", "test", "--today", "2024-01-02", "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0

        result = runner.invoke(app, [
            "show", "test", "--week", "1", "--workout", "1", "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0

    def test_show_missing(self, temp_store_dir):
        result = runner.invoke(app, ["show", "ghost", "--store-dir", str(temp_store_dir)])
        assert result.exit_code == 1

    def test_log_and_undo_set(self, temp_store_dir):
        _create(temp_store_dir)
        result = runner.invoke(app, [
            "log-set", "test", "1", "1", "1", "1", "--reps", "8", "--weight", "60",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0, result.output
        s = MesocycleStore(temp_store_dir).load("test").set_at(SetCoord("week1", 0, 0, 0))
        assert (s.completed, s.completed_weight) == (True, "60")

        result = runner.invoke(app, [
            "undo-set", "test", "1", "1", "1", "1", "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0
        s = MesocycleStore(temp_store_dir).load("test").set_at(SetCoord("week1", 0, 0, 0))
        assert s.completed is False

    def test_log_set_out_of_range(self, temp_store_dir):
        _create(temp_store_dir)
        result = runner.invoke(app, [
            "log-set", "test", "1", "1", "1", "99", "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 1

    def test_feedback(self, temp_store_dir):
        _create(temp_store_dir)
        result = runner.invoke(app, [
            "feedback", "test", "1", "1", "1", "--feeling", "too_heavy",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0, result.output
        ex = MesocycleStore(temp_store_dir).load("test").exercise_at(ExerciseCoord("week1", 0, 0))
        assert ex.weight_feeling == "too_heavy"

        result = runner.invoke(app, [
            "feedback", "test", "1", "1", "1", "--feeling", "meh",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 1

    def test_complete_incomplete_workout(self, temp_store_dir):
        _create(temp_store_dir)
        result = runner.invoke(app, [
            "complete", "test", "1", "1", "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 1
        assert not MesocycleStore(temp_store_dir).load("test").workout_at("week1", 0).completed

    def test_suggest_and_complete(self, temp_store_dir):
        _create(temp_store_dir)
        _log_push_day(temp_store_dir)

        result = runner.invoke(app, [
            "suggest", "test", "1", "1", "--difficulty", "Just Right",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0, result.output
        assert "105" in result.output

        result = runner.invoke(app, [
            "complete", "test", "1", "1", "--difficulty", "too_hard",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0, result.output

        store = MesocycleStore(temp_store_dir)
        meso = store.load("test")
        assert meso.workout_at("week1", 0).completed
        assert meso.exercise_at(ExerciseCoord("week2", 0, 0)).weight == "103"
        assert len(store.load_history("test")) == 1

    def test_bad_difficulty(self, temp_store_dir):
        _create(temp_store_dir)
        result = runner.invoke(app, [
            "complete", "test", "1", "1", "--difficulty", "brutal",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 1

    def test_edit_commands(self, temp_store_dir):
        _create(temp_store_dir)
        base = ["--store-dir", str(temp_store_dir)]

        result = runner.invoke(app, ["add-exercise", "test", "1", "1", "lateral-raise", *base])
        assert result.exit_code == 0, result.output
        result = runner.invoke(app, ["set-target", "test", "1", "1", "1", "-w", "80", "-r", "10", *base])
        assert result.exit_code == 0, result.output
        result = runner.invoke(app, ["remove-exercise", "test", "1", "1", "2", *base])
        assert result.exit_code == 0, result.output

        push = MesocycleStore(temp_store_dir).load("test").workout_at("week1", 0)
        assert [e.base_exercise_id for e in push.exercises] == ["bench-press-chest", "lateral-raise-shoulders"]
        assert push.exercises[0].weight == "80"

    def test_delete(self, temp_store_dir):
        _create(temp_store_dir)
        result = runner.invoke(app, ["delete", "test", "--force", "--store-dir", str(temp_store_dir)])
        assert result.exit_code == 0
        assert not MesocycleStore(temp_store_dir).exists("test")

    def test_log_set_without_weight_fails(self, temp_store_dir):
        _create(temp_store_dir)
        result = runner.invoke(app, [
            "log-set", "test", "1", "1", "1", "1", "--reps", "8",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 1
        s = MesocycleStore(temp_store_dir).load("test").set_at(SetCoord("week1", 0, 0, 0))
        assert s.completed is False

    def test_complete_with_session_feedback(self, temp_store_dir):
        _create(temp_store_dir)
        _log_push_day(temp_store_dir)

        result = runner.invoke(app, [
            "complete", "test", "1", "1",
            "--soreness", "chest=4", "--pump", "chest=excellent",
            "--exertion", "hard", "--notes", "felt strong",
            "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0, result.output

        fb = MesocycleStore(temp_store_dir).load("test").workout_at("week1", 0).feedback
        assert fb.difficulty == "just_right"
        assert fb.soreness == {"chest": 4}
        assert fb.pump_quality == {"chest": "Excellent"}
        assert (fb.exertion_level, fb.notes) == ("Hard", "felt strong")

    @pytest.mark.parametrize(
        "extra",
        [["--soreness", "chest=9"], ["--soreness", "chest"], ["--pump", "chest=meh"]],
    )
    def test_complete_rejects_bad_session_feedback(self, temp_store_dir, extra):
        _create(temp_store_dir)
        _log_push_day(temp_store_dir)
        result = runner.invoke(app, [
            "complete", "test", "1", "1", *extra, "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 1
        assert not MesocycleStore(temp_store_dir).load("test").workout_at("week1", 0).completed

    def test_complete_before_empty_deload_week_warns(self, temp_store_dir):
        _create(temp_store_dir, "--deload")
        _log_push_day(temp_store_dir)
        result = runner.invoke(app, [
            "complete", "test", "1", "1", "--store-dir", str(temp_store_dir),
        ])
        assert result.exit_code == 0, result.output
        assert "Warning" in result.output
