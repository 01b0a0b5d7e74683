from __future__ import annotations

import logging
from typing import Dict, List

from .cells import Coord, Grid, EMPTY, ensure_rectangular, is_blocked

logger = logging.getLogger(__name__)

NumberingMap = Dict[Coord, int]


def _starts_horizontal(grid: Grid, row: int, col: int, cols: int) -> bool:
    left_open = col == 0 or is_blocked(grid[row][col - 1])
    return left_open and col < cols - 1 and not is_blocked(grid[row][col + 1])


def _starts_vertical(grid: Grid, row: int, col: int, rows: int) -> bool:
    top_open = row == 0 or is_blocked(grid[row - 1][col])
    return top_open and row < rows - 1 and not is_blocked(grid[row + 1][col])


# PUBLIC_INTERFACE
def generate_numbering(grid: Grid) -> NumberingMap:
    """Assign clue numbers to every cell that starts a word.

    Cells are scanned in row-major order. A non-blocked cell gets the next
    number when it is the first cell of a horizontal or vertical run of at
    least two non-blocked cells. A cell starting both directions receives a
    single shared number. Only the blocking layout matters: letters and empty
    cells are treated alike.

    Raises:
        GridShapeError: if the grid is not rectangular.
    """
    rows, cols = ensure_rectangular(grid)
    numbering: NumberingMap = {}
    current = 1

    for row in range(rows):
        for col in range(cols):
            if is_blocked(grid[row][col]):
                continue
            if _starts_horizontal(grid, row, col, cols) or _starts_vertical(grid, row, col, rows):
                numbering[(row, col)] = current
                current += 1

    logger.debug("Numbered %d word starts on a %dx%d grid", len(numbering), rows, cols)
    return numbering


# PUBLIC_INTERFACE
def numbering_matrix(numbering: NumberingMap, rows: int, cols: int) -> List[List[str]]:
    """Render a numbering map as a rows x cols matrix of strings ("" when unnumbered)."""
    matrix = [[EMPTY] * cols for _ in range(rows)]
    for (row, col), number in numbering.items():
        matrix[row][col] = str(number)
    return matrix
