from __future__ import annotations

from typing import Any, List, Sequence, Tuple

# Grid cell vocabulary shared by the numbering, extraction and validation passes.
BLOCK = "#"
PLACEHOLDER = "_"
EMPTY = ""

Grid = Sequence[Sequence[str]]
Coord = Tuple[int, int]


class GridShapeError(ValueError):
    """Raised when a grid is not a rectangular sequence of rows."""


def is_blocked(cell: Any) -> bool:
    """Return True for the blocking marker."""
    return cell == BLOCK


def is_blank(cell: Any) -> bool:
    """Empty, None or whitespace-only cells count as unfilled."""
    if cell is None:
        return True
    return not str(cell).strip()


# PUBLIC_INTERFACE
def ensure_rectangular(grid: Any) -> Tuple[int, int]:
    """Return (rows, cols) for a well-formed grid or raise GridShapeError.

    A grid is a non-string sequence of rows, each a non-string sequence of the
    same length. An empty grid (no rows) is accepted and reported as (0, 0).
    """
    if grid is None or isinstance(grid, (str, bytes)) or not isinstance(grid, Sequence):
        raise GridShapeError("Grid must be a sequence of rows.")
    if len(grid) == 0:
        return 0, 0

    cols = None
    for index, row in enumerate(grid):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise GridShapeError(f"Row {index} is not a sequence of cells.")
        if cols is None:
            cols = len(row)
        elif len(row) != cols:
            raise GridShapeError(
                f"Row {index} has {len(row)} cells, expected {cols}."
            )
    return len(grid), cols or 0


# PUBLIC_INTERFACE
def strip_letters(grid: Grid) -> List[List[str]]:
    """Build the player-facing grid: blocking markers kept, every other cell emptied.

    Always returns a new structure; the input grid is left untouched.
    """
    ensure_rectangular(grid)
    return [[BLOCK if is_blocked(cell) else EMPTY for cell in row] for row in grid]


def same_blocking_layout(first: Grid, second: Grid) -> bool:
    """True when both grids share dimensions and blocking-marker positions."""
    if ensure_rectangular(first) != ensure_rectangular(second):
        return False
    for row_a, row_b in zip(first, second):
        for a, b in zip(row_a, row_b):
            if is_blocked(a) != is_blocked(b):
                return False
    return True
