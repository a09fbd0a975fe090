"""CLI entry point -- registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="mutant-scan",
    help="Mutant Scan - DNA grid classification service",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"mutant-scan {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Classify DNA grids, inspect statistics, or run the HTTP service."""


# Import subcommands to register them
from .classify import classify as _classify  # noqa: F401, E402
from .stats import stats as _stats  # noqa: F401, E402
from .serve import serve as _serve  # noqa: F401, E402
