"""``mutant-scan classify`` -- classify and record a single grid."""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import app
from ._common import console, mutant_label, resolve_settings
from ..detection import iter_runs, validate_grid
from ..exceptions import ClassificationError, ValidationError
from ..runtime import ClassifierRuntime
from ..server.serializers import RequestError, parse_dna_request


def _read_rows_file(path: Path) -> list:
    """Read rows from a JSON file holding ``{"dna": [...]}`` or a bare list."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot read {path}:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    if isinstance(payload, list):
        payload = {"dna": payload}
    try:
        return parse_dna_request(payload)
    except RequestError as exc:
        console.print(f"[red]Invalid request file {path}:[/red] {escape(exc.message)}")
        raise typer.Exit(2)


@app.command()
def classify(
    rows: Optional[List[str]] = typer.Argument(None, help="Grid rows, e.g. ATGCGA CAGTGC ..."),
    file: Optional[Path] = typer.Option(
        None, "-f", "--file", help='JSON file with {"dna": [...]} or a list of rows'
    ),
    explain: bool = typer.Option(False, "--explain", help="List every run of four found"),
    json_output: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    data_dir: Optional[Path] = typer.Option(None, "--db", help="Data directory for the record store"),
    backend: Optional[str] = typer.Option(None, "--backend", help="sqlite, diskcache or memory"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """
    Classify a DNA grid as mutant or human and record the result.

    [bold cyan]Examples:[/bold cyan]

      mutant-scan classify ATGCGA CAGTGC TTATGT AGAAGG CCCCTA TCACTG

      mutant-scan classify --file dna.json --explain
    """
    if file is not None:
        rows = _read_rows_file(file)

    settings = resolve_settings(config=config, data_dir=data_dir, backend=backend, verbose=verbose)

    try:
        with ClassifierRuntime(settings) as runtime:
            result = runtime.service.classify(rows)
    except ValidationError as exc:
        if json_output:
            print(json.dumps(exc.to_json(), indent=2))
        else:
            console.print(f"[red]Invalid DNA:[/red] {escape(str(exc))}")
        raise typer.Exit(2)
    except ClassificationError as exc:
        console.print(f"[red]Classification failed:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    grid = validate_grid(rows)
    runs = list(iter_runs(grid)) if explain else []

    if json_output:
        data = {"is_mutant": result, "fingerprint": grid.fingerprint}
        if explain:
            data["runs"] = [
                {"row": r.row, "col": r.col, "direction": r.direction.name.lower(), "base": r.base}
                for r in runs
            ]
        print(json.dumps(data, indent=2))
        return

    console.print(f"{mutant_label(result)}  [dim]{grid.fingerprint[:16]}[/dim]")

    if explain:
        if not runs:
            console.print("[dim]No runs of four found.[/dim]")
            return
        table = Table(title=f"Runs of four ({len(runs)})")
        table.add_column("Start", justify="right")
        table.add_column("Direction")
        table.add_column("Base", justify="center")
        for run in runs:
            table.add_row(f"({run.row}, {run.col})", run.direction.name.lower(), run.base)
        console.print(table)
