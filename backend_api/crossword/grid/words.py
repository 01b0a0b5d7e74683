from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .cells import Coord, Grid, PLACEHOLDER, ensure_rectangular, is_blank, is_blocked
from .numbering import NumberingMap

logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 2


class Direction(str, Enum):
    """Reading direction of a word span."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class WordSpan:
    """A maximal run of non-blocked cells, committed only when length >= 2."""

    direction: Direction
    number: int
    start_row: int
    start_col: int
    length: int
    content: str

    @property
    def cells(self) -> List[Coord]:
        if self.direction == Direction.HORIZONTAL:
            return [(self.start_row, self.start_col + i) for i in range(self.length)]
        return [(self.start_row + i, self.start_col) for i in range(self.length)]

    @property
    def is_complete(self) -> bool:
        return PLACEHOLDER not in self.content

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "direction": self.direction.value,
            "word": self.content,
            "start_row": self.start_row,
            "start_col": self.start_col,
            "length": self.length,
        }


WordMap = Dict[int, WordSpan]


@dataclass
class _RunBuffer:
    """Accumulates consecutive non-blocked cells along one line."""

    direction: Direction
    letters: List[str] = field(default_factory=list)
    start: Optional[Coord] = None
    number: Optional[int] = None

    def push(self, row: int, col: int, cell: Any, numbering: NumberingMap) -> None:
        if not self.letters:
            self.start = (row, col)
            self.number = numbering.get((row, col))
        self.letters.append(PLACEHOLDER if is_blank(cell) else str(cell))

    def flush(self, words: WordMap) -> None:
        if len(self.letters) >= MIN_WORD_LENGTH and self.number is not None:
            start_row, start_col = self.start
            words[self.number] = WordSpan(
                direction=self.direction,
                number=self.number,
                start_row=start_row,
                start_col=start_col,
                length=len(self.letters),
                content="".join(self.letters),
            )
        self.letters = []
        self.start = None
        self.number = None


def _scan_line(line: List[Tuple[int, int, Any]], direction: Direction, numbering: NumberingMap, words: WordMap) -> None:
    buffer = _RunBuffer(direction)
    for row, col, cell in line:
        if is_blocked(cell):
            buffer.flush(words)
        else:
            buffer.push(row, col, cell, numbering)
    buffer.flush(words)


# PUBLIC_INTERFACE
def extract_words(grid: Grid, numbering: NumberingMap) -> Tuple[WordMap, WordMap]:
    """Extract horizontal and vertical words keyed by their clue number.

    Horizontal runs are delimited by row edges and blocking markers, vertical
    runs by column edges and blocking markers. Empty cells are rendered with
    the placeholder so a word's content always has one character per cell.

    Returns:
        (horizontal_words, vertical_words)

    Raises:
        GridShapeError: if the grid is not rectangular.
    """
    rows, cols = ensure_rectangular(grid)
    horizontal: WordMap = {}
    vertical: WordMap = {}

    for row in range(rows):
        _scan_line([(row, col, grid[row][col]) for col in range(cols)], Direction.HORIZONTAL, numbering, horizontal)

    for col in range(cols):
        _scan_line([(row, col, grid[row][col]) for row in range(rows)], Direction.VERTICAL, numbering, vertical)

    logger.debug("Extracted %d horizontal and %d vertical words", len(horizontal), len(vertical))
    return horizontal, vertical


def words_to_dict(words: WordMap) -> Dict[str, Dict[str, Any]]:
    """JSON-friendly form keyed by the stringified clue number."""
    return {str(number): span.to_dict() for number, span in sorted(words.items())}
