"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.mesocycle_store import MesocycleStore, get_default_store_dir

# Shared --store-dir option type used across all commands
StoreDirOption = Annotated[
    Optional[Path],
    typer.Option("--store-dir", "-s", help="Store directory (default: ~/.meso-scheduler)"),
]

app = typer.Typer(
    name="meso-scheduler",
    help="Plan multi-week hypertrophy mesocycles and carry progression week to week.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine debug logging"),
    ] = False,
) -> None:
    """
    Mesocycle planner: generate a block, log sets, complete workouts.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def get_store(store_dir: Path | None) -> MesocycleStore:
    """Get a mesocycle store from a directory or the default location."""
    return MesocycleStore(store_dir if store_dir is not None else get_default_store_dir())
