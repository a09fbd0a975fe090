"""``mutant-scan serve`` -- run the classification HTTP service."""

import logging
from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import console, resolve_settings
from ..runtime import ClassifierRuntime

logger = logging.getLogger(__name__)


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, help="Port to listen on"),
    host: Optional[str] = typer.Option(None, help="Host to bind to"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    data_dir: Optional[Path] = typer.Option(None, "--db", help="Data directory for the record store"),
    backend: Optional[str] = typer.Option(None, "--backend", help="sqlite, diskcache or memory"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """Serve POST /api/mutant and GET /api/stats over HTTP."""
    try:
        from ..server import _check_deps

        _check_deps()
    except ImportError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    import uvicorn

    from ..server.app import create_app

    settings = resolve_settings(
        config=config, data_dir=data_dir, backend=backend, verbose=verbose, host=host, port=port
    )

    url = f"http://{settings.host}:{settings.port}"
    console.print(f"[bold]Mutant Scan[/bold] → [link={url}]{url}[/link] ({settings.store_backend} store)")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    with ClassifierRuntime(settings) as runtime:
        asgi_app = create_app(runtime.service, runtime.stats)
        try:
            uvicorn.run(
                asgi_app,
                host=settings.host,
                port=settings.port,
                log_level="info" if settings.verbosity == "verbose" else "warning",
            )
        except KeyboardInterrupt:
            pass
        finally:
            logger.debug("Grids scanned this session: %d", runtime.detector.calls)
            console.print("\n[dim]Stopped.[/dim]")
