"""
Logging for Mutant Scan.

Terminal output goes through rich on stderr so JSON written to stdout by
``--json`` commands stays parseable. Every logger lives under the
``mutant_scan`` namespace.

The cache logs one line per lookup and store. Under ``--verbose`` that
drowns out the rest, so ``mutant_scan.cache`` stays at INFO unless
``trace_cache`` asks for it.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "mutant_scan"
CACHE_LOGGER = "mutant_scan.cache"

_FILE_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"


def _level_for(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
    trace_cache: bool = False,
) -> logging.Logger:
    """
    Install the stderr handler (and optional file handler) and set levels.

    Args:
        verbose: DEBUG for mutant_scan loggers
        quiet: ERROR only
        log_file: Append a plain-text copy of the log here, with thread names
            so concurrent classifications can be told apart
        trace_cache: Also emit the cache's per-fingerprint hit/miss lines

    Returns:
        The ``mutant_scan`` logger
    """
    level = _level_for(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    cache_level = logging.DEBUG if trace_cache else max(level, logging.INFO)
    logging.getLogger(CACHE_LOGGER).setLevel(cache_level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``mutant_scan`` namespace; bare names get the prefix."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
