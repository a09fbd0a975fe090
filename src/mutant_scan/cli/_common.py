"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import ServiceSettings, load_settings
from ..exceptions import MutantScanError
from ..logging_config import setup_logging

console = Console()


def resolve_settings(
    config: Optional[Path] = None,
    data_dir: Optional[Path] = None,
    backend: Optional[str] = None,
    verbose: bool = False,
    **overrides,
) -> ServiceSettings:
    """Build settings from CLI options and configure logging.

    Exits with status 1 when the configuration is invalid.
    """
    if data_dir is not None:
        overrides["data_dir"] = str(data_dir)
    if backend is not None:
        overrides["store_backend"] = backend
    if verbose:
        overrides["verbose"] = True
    try:
        settings = load_settings(config_file=config, **overrides)
    except MutantScanError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    setup_logging(
        verbose=settings.verbosity == "verbose",
        quiet=settings.verbosity == "quiet",
        log_file=settings.log_file,
        trace_cache=settings.trace_cache,
    )
    return settings


def mutant_label(is_mutant: bool) -> str:
    return "[bold red]MUTANT[/bold red]" if is_mutant else "[bold green]HUMAN[/bold green]"
