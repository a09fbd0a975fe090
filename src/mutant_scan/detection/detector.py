"""Run detection over a validated grid.

A run is ``RUN_LENGTH`` identical symbols along one of four directions
starting at some cell. A grid is mutant once ``MUTANT_THRESHOLD`` runs have
been found, scanning cells in row-major order and, per cell, the directions
in declaration order. Overlapping runs anchored at different cells each
count.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Iterator

from .grid import Grid

RUN_LENGTH = 4
MUTANT_THRESHOLD = 2


class Direction(Enum):
    """Scan direction as a (row step, column step) pair."""

    RIGHT = (0, 1)
    DOWN = (1, 0)
    DIAGONAL = (1, 1)
    ANTI_DIAGONAL = (1, -1)

    @property
    def d_row(self) -> int:
        return self.value[0]

    @property
    def d_col(self) -> int:
        return self.value[1]


@dataclass(frozen=True)
class Run:
    """A run of identical bases anchored at (row, col)."""

    row: int
    col: int
    direction: Direction
    base: str

    def cells(self) -> list[tuple[int, int]]:
        return [
            (self.row + i * self.direction.d_row, self.col + i * self.direction.d_col)
            for i in range(RUN_LENGTH)
        ]


def _is_run(grid: Grid, row: int, col: int, direction: Direction) -> bool:
    end_row = row + (RUN_LENGTH - 1) * direction.d_row
    end_col = col + (RUN_LENGTH - 1) * direction.d_col
    if not grid.in_bounds(end_row, end_col):
        return False

    base = grid.cell(row, col)
    for i in range(1, RUN_LENGTH):
        if grid.cell(row + i * direction.d_row, col + i * direction.d_col) != base:
            return False
    return True


def iter_runs(grid: Grid) -> Iterator[Run]:
    """Yield every run in row-major cell order."""
    n = grid.size
    for row in range(n):
        for col in range(n):
            for direction in Direction:
                if _is_run(grid, row, col, direction):
                    yield Run(row=row, col=col, direction=direction, base=grid.cell(row, col))


def count_runs(grid: Grid) -> int:
    """Total number of runs in the grid, without short-circuiting."""
    return sum(1 for _ in iter_runs(grid))


def is_mutant(grid: Grid) -> bool:
    """True once ``MUTANT_THRESHOLD`` runs are found; stops scanning there."""
    found = sum(1 for _ in islice(iter_runs(grid), MUTANT_THRESHOLD))
    return found >= MUTANT_THRESHOLD


class RunDetector:
    """Callable wrapper around :func:`is_mutant` with a call counter.

    The service accepts any ``Callable[[Grid], bool]``; this class is the
    default and lets the runtime report how many grids were actually scanned
    (as opposed to served from the record store).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.calls = 0

    def __call__(self, grid: Grid) -> bool:
        with self._lock:
            self.calls += 1
        return is_mutant(grid)
