"""Mesocycle commands: templates, create, list, show, delete."""

from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.config import (
    DEFAULT_MESOCYCLE_NAME,
    DEFAULT_PROGRESSION_PCT,
    DEFAULT_SPLIT,
    DEFAULT_WEEKS,
)
from ...core.errors import StorageError
from ...core.generator import create_mesocycle
from ...core.metrics import mesocycle_progress
from ...core.models import week_key
from ...core.templates import SPLIT_REGISTRY, get_split
from .. import views
from ..app import StoreDirOption, app, get_store


@app.command()
def templates() -> None:
    """
    List the available split templates.
    """
    views.console.print(views.format_split_table(list(SPLIT_REGISTRY.values())))


@app.command()
def create(
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Mesocycle name"),
    ] = DEFAULT_MESOCYCLE_NAME,
    split: Annotated[
        str,
        typer.Option("--split", help="Split template name (see 'templates')"),
    ] = DEFAULT_SPLIT,
    start: Annotated[
        Optional[str],
        typer.Option("--start", "-d", help="Start date (YYYY-MM-DD, default: today)"),
    ] = None,
    weeks: Annotated[
        int,
        typer.Option("--weeks", "-w", help="Number of weeks (1-12)"),
    ] = DEFAULT_WEEKS,
    progression: Annotated[
        float,
        typer.Option("--progression", help="Weekly progression percent (0-20)"),
    ] = DEFAULT_PROGRESSION_PCT,
    deload: Annotated[
        bool,
        typer.Option("--deload/--no-deload", help="Make the last week a deload week"),
    ] = False,
    mesocycle_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Mesocycle id (default: generated)"),
    ] = None,
    store_dir: StoreDirOption = None,
) -> None:
    """
    Generate a new mesocycle from a split template and save it.

      meso-scheduler create --split "Upper/Lower" --start 2026-03-02 --weeks 5 --deload
    """
    store = get_store(store_dir)
    start_date = start or datetime.now().strftime("%Y-%m-%d")

    try:
        template = get_split(split)
        mesocycle = create_mesocycle(
            name,
            template,
            start_date,
            weeks,
            weekly_progression_pct=progression,
            include_deload=deload,
            mesocycle_id=mesocycle_id,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        if store.exists(mesocycle.id):
            views.print_error(f"Mesocycle '{mesocycle.id}' already exists")
            raise typer.Exit(1)
        store.save(mesocycle)
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    total = len(mesocycle.all_workouts())
    views.print_success(
        f"Created mesocycle '{mesocycle.name}' ({mesocycle.id}): "
        f"{total} workouts, {mesocycle.start_date} → {mesocycle.end_date}"
    )


@app.command("list")
def list_mesocycles(store_dir: StoreDirOption = None) -> None:
    """
    List stored mesocycles.
    """
    store = get_store(store_dir)
    try:
        mesocycles = store.load_all()
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not mesocycles:
        views.print_info("No mesocycles yet. Run 'create' to generate one.")
        return

    views.console.print(views.format_mesocycle_table(mesocycles))


@app.command()
def show(
    mesocycle_id: Annotated[str, typer.Argument(help="Mesocycle id")],
    week: Annotated[
        Optional[int],
        typer.Option("--week", help="Show only this week"),
    ] = None,
    workout: Annotated[
        Optional[int],
        typer.Option("--workout", help="Show one workout of --week in detail (1-based)"),
    ] = None,
    today: Annotated[
        Optional[str],
        typer.Option("--today", help="Reference date for progress (default: today)"),
    ] = None,
    store_dir: StoreDirOption = None,
) -> None:
    """
    Show a mesocycle, one of its weeks, or one workout.
    """
    store = get_store(store_dir)
    try:
        mesocycle = store.load(mesocycle_id)
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if workout is not None:
        if week is None:
            views.print_error("--workout requires --week")
            raise typer.Exit(1)
        try:
            session = mesocycle.workout_at(week_key(week), workout - 1)
        except (KeyError, IndexError) as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        views.print_workout(session)
        return

    if week is not None:
        key = week_key(week)
        if key not in mesocycle.workouts:
            views.print_error(f"Week {week} not in mesocycle {mesocycle.id}")
            raise typer.Exit(1)
        mesocycle.workouts = {key: mesocycle.workouts[key]}
        views.print_mesocycle(mesocycle)
        return

    progress = mesocycle_progress(mesocycle, today or datetime.now().strftime("%Y-%m-%d"))
    views.print_mesocycle(mesocycle, progress)


@app.command()
def delete(
    mesocycle_id: Annotated[str, typer.Argument(help="Mesocycle id")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    store_dir: StoreDirOption = None,
) -> None:
    """
    Delete a stored mesocycle. Its completed-workout history is kept.
    """
    store = get_store(store_dir)
    try:
        mesocycle = store.load(mesocycle_id)
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not force and not views.confirm_action(f"Delete mesocycle '{mesocycle.name}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete(mesocycle_id)
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted mesocycle {mesocycle_id}")
