"""``mutant-scan stats`` -- show mutant/human counts and their ratio."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import app
from ._common import console, resolve_settings
from ..exceptions import PersistenceError
from ..runtime import ClassifierRuntime


@app.command()
def stats(
    json_output: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    data_dir: Optional[Path] = typer.Option(None, "--db", help="Data directory for the record store"),
    backend: Optional[str] = typer.Option(None, "--backend", help="sqlite, diskcache or memory"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """
    Show how many grids were classified mutant and human.

    [bold cyan]Examples:[/bold cyan]

      mutant-scan stats

      mutant-scan stats --json
    """
    settings = resolve_settings(config=config, data_dir=data_dir, backend=backend, verbose=verbose)

    try:
        with ClassifierRuntime(settings) as runtime:
            snapshot = runtime.stats.snapshot()
    except PersistenceError as exc:
        console.print(f"[red]Record store unavailable:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(snapshot.to_dict(), indent=2))
        return

    table = Table(title="Classification stats")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Mutant DNA", str(snapshot.mutant_count))
    table.add_row("Human DNA", str(snapshot.human_count))
    table.add_row("Ratio", f"{snapshot.ratio:.3f}")
    console.print(table)
