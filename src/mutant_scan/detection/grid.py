"""Grid validation and content fingerprinting.

A grid is N rows of N symbols over the alphabet {A, T, C, G}. Rows are
uppercased once, at construction, so validation, fingerprinting and run
detection all see the same normalized content.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from ..exceptions import EmptyInputError, ErrorCode, InvalidAlphabetError, NotSquareError

ALPHABET = frozenset("ATCG")

# Not in the alphabet, so distinct row sequences never join to the same text.
ROW_SEPARATOR = "|"


def fingerprint_rows(rows: Iterable[str]) -> str:
    """SHA-256 hex digest of rows joined with ``ROW_SEPARATOR``.

    Order-sensitive: swapping two rows yields a different fingerprint.
    """
    joined = ROW_SEPARATOR.join(rows)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Grid:
    """Validated, uppercased N x N symbol matrix."""

    rows: tuple[str, ...]

    @property
    def size(self) -> int:
        return len(self.rows)

    def cell(self, row: int, col: int) -> str:
        return self.rows[row][col]

    def in_bounds(self, row: int, col: int) -> bool:
        n = len(self.rows)
        return 0 <= row < n and 0 <= col < n

    @property
    def fingerprint(self) -> str:
        return fingerprint_rows(self.rows)


def validate_grid(rows: Optional[Sequence[Any]]) -> Grid:
    """Check that ``rows`` form a square grid over A/T/C/G.

    Checks run in order: empty input, then per row its length against the
    row count followed by its symbols. Lowercase symbols are accepted and
    normalized to uppercase.

    Raises:
        EmptyInputError: ``rows`` is None or has no rows.
        NotSquareError: a row's length differs from the row count.
        InvalidAlphabetError: a row is not a string or holds a symbol
            outside the alphabet.
    """
    if rows is None:
        raise EmptyInputError(
            message="DNA must not be null",
            code=ErrorCode.DNA100,
            recoverable=False,
        )
    if isinstance(rows, str):
        rows = [rows]
    rows = list(rows)
    n = len(rows)
    if n == 0:
        raise EmptyInputError(
            message="DNA must contain at least one row",
            code=ErrorCode.DNA100,
            recoverable=False,
        )

    normalized = []
    for index, row in enumerate(rows):
        if not isinstance(row, str):
            raise InvalidAlphabetError(
                message=f"Row {index} is not a string",
                code=ErrorCode.DNA102,
                context={"row": index, "type": type(row).__name__},
                recoverable=False,
            )
        if len(row) != n:
            raise NotSquareError(
                message=f"DNA must be {n}x{n}: row {index} has length {len(row)}",
                code=ErrorCode.DNA101,
                context={"row": index, "length": len(row), "expected": n},
                recoverable=False,
            )
        upper = row.upper()
        invalid = sorted(set(upper) - ALPHABET)
        if invalid:
            raise InvalidAlphabetError(
                message=f"Row {index} contains invalid bases: {''.join(invalid)}",
                code=ErrorCode.DNA102,
                context={"row": index, "invalid": "".join(invalid)},
                recoverable=False,
                recovery_hint="Only A, T, C and G are allowed",
            )
        normalized.append(upper)

    return Grid(rows=tuple(normalized))
