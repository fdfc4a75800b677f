"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of mesocycles, workouts and
progression suggestions.
"""

from rich.console import Console
from rich.table import Table

from ..core.completion import CompletionResult
from ..core.config import WEEKDAY_NAMES
from ..core.metrics import MesocycleProgress, workout_volume
from ..core.models import Mesocycle, Suggestion, WorkoutSession, parse_week_number
from ..core.templates.base import SplitTemplate

console = Console()

_STATE_STYLE = {
    "pending": "dim",
    "in_progress": "yellow",
    "completed": "green",
}


def format_split_table(splits: list[SplitTemplate]) -> Table:
    """
    Create a Rich table listing split templates.

    Args:
        splits: Templates to display

    Returns:
        Rich Table object
    """
    table = Table(title="Split Templates")

    table.add_column("Name", style="cyan")
    table.add_column("Sessions/wk", justify="right")
    table.add_column("Days")
    table.add_column("Deload", justify="center")

    for split in splits:
        days = sorted({d for w in split.workouts for d in w.weekdays if 0 <= d <= 6})
        table.add_row(
            split.name,
            str(split.sessions_per_week),
            ", ".join(WEEKDAY_NAMES[d][:3] for d in days),
            "yes" if split.deload_workouts else "-",
        )

    return table


def format_mesocycle_table(mesocycles: list[Mesocycle]) -> Table:
    """Create a Rich table listing stored mesocycles."""
    table = Table(title="Mesocycles")

    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Split", style="magenta")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Weeks", justify="right")
    table.add_column("Done", justify="right")

    for m in mesocycles:
        sessions = m.all_workouts()
        done = sum(1 for w in sessions if w.completed)
        table.add_row(
            m.id,
            m.name,
            m.split_name or "-",
            m.start_date,
            m.end_date,
            str(m.week_count) + (" (deload)" if m.include_deload else ""),
            f"{done}/{len(sessions)}",
        )

    return table


def _fmt_exercise(workout: WorkoutSession) -> list[str]:
    lines = []
    for i, e in enumerate(workout.exercises, 1):
        style = _STATE_STYLE[e.state]
        sets = f"{e.completed_set_count}/{len(e.generated_sets)}"
        target = f"{e.weight or '-'} x {e.reps or e.target_reps}"
        lines.append(f"[{style}]{i}. {e.name}  {target}  ({sets} sets)[/{style}]")
    return lines


def print_mesocycle(mesocycle: Mesocycle, progress: MesocycleProgress | None = None) -> None:
    """
    Print every week of a mesocycle with its workouts and exercises.

    Args:
        mesocycle: Document to display
        progress: Optional progress summary printed in the header
    """
    console.print(f"[bold cyan]{mesocycle.name}[/bold cyan] [dim]({mesocycle.id})[/dim]")
    console.print(
        f"{mesocycle.start_date} → {mesocycle.end_date}, {mesocycle.week_count} weeks, "
        f"+{mesocycle.weekly_progression_pct:g}%/week"
    )
    if progress is not None:
        console.print(
            f"Progress: {progress.completed_workouts}/{progress.total_workouts} "
            f"({progress.percent_complete:g}%), current week {progress.current_week}"
        )

    for key in sorted(mesocycle.workouts, key=lambda k: parse_week_number(k) or 0):
        sessions = mesocycle.workouts[key]
        week = parse_week_number(key)
        title = f"Week {week}" + (" (deload)" if week == mesocycle.deload_week else "")
        if not sessions:
            console.print(f"[dim]{title}: no workouts[/dim]")
            continue

        table = Table(title=title, show_lines=True)
        table.add_column("#", justify="right", style="dim", width=3)
        table.add_column("Date", style="cyan")
        table.add_column("Workout")
        table.add_column("RPE", justify="center")
        table.add_column("Exercises")
        table.add_column("Status", justify="center")

        for i, w in enumerate(sessions, 1):
            band = w.intensity_band
            rpe = f"{band.min_effort}-{band.max_effort}" if band else "-"
            table.add_row(
                str(i),
                w.date,
                w.name,
                rpe,
                "\n".join(_fmt_exercise(w)),
                "[green]done[/green]" if w.completed else "",
            )
        console.print(table)


def print_workout(workout: WorkoutSession) -> None:
    """Print one workout with its sets."""
    console.print(f"[bold]{workout.name}[/bold] [dim]{workout.date}[/dim]")
    if workout.intensity_band is not None:
        console.print(f"[dim]{workout.intensity_band.label}[/dim]")

    table = Table()
    table.add_column("Exercise", style="cyan")
    table.add_column("Set", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Done", justify="right")

    for e in workout.exercises:
        for s in e.generated_sets:
            target = f"{s.target_weight or '-'} x {s.target_reps}"
            done = f"{s.completed_weight or '-'} x {s.completed_reps}" if s.completed else ""
            table.add_row(e.name if s.number == 1 else "", str(s.number), target, done)

    console.print(table)
    volume = workout_volume(workout)
    if volume > 0:
        console.print(f"Volume: {volume:g}")


def format_suggestion_table(suggestions: list[Suggestion]) -> Table:
    """Create a Rich table of next-week suggestions."""
    table = Table(title="Next Week")

    table.add_column("Exercise", style="cyan")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("Sets", justify="right")

    for s in suggestions:
        table.add_row(s.exercise_name, str(s.weight), str(s.reps), str(s.sets))

    return table


def print_completion(result: CompletionResult) -> None:
    """Print suggestions and where they were applied."""
    if result.suggestions:
        console.print(format_suggestion_table(list(result.suggestions.values())))

    p = result.propagation
    if p.status == "applied":
        print_success(
            f"Progression applied to {p.week_key} workout {p.workout_index + 1} "
            f"({len(p.applied)} exercise(s))"
        )
    elif p.status == "no_next_week":
        print_info("Last week of the mesocycle: nothing to carry forward.")
    elif p.status == "no_target_workout":
        print_warning("Next week has no workouts: progression not applied.")
    elif p.status == "no_suggestions":
        print_warning("No sets with a positive weight were logged: nothing to carry forward.")
    else:
        print_warning("No matching exercises found in next week's workout.")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
