from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .cells import ensure_rectangular, is_blank, is_blocked, GridShapeError
from .words import Direction, WordMap

ClueMap = Dict[int, str]

_DIRECTION_LABELS = {
    Direction.HORIZONTAL: ("horizontal", "horizontaux"),
    Direction.VERTICAL: ("vertical", "verticaux"),
}


@dataclass
class PuzzleData:
    """Authoring payload handed to the completeness validator.

    Fields are optional because the validator's job is to report what is
    missing; clue maps are keyed by clue number.
    """

    title: Optional[str] = None
    language: Optional[str] = None
    grid: Optional[Sequence[Sequence[str]]] = None
    solution: Optional[Sequence[Sequence[str]]] = None
    clues_horizontal: Optional[Mapping[int, str]] = None
    clues_vertical: Optional[Mapping[int, str]] = None


@dataclass
class ValidationReport:
    """Accumulated validation errors in detection order."""

    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


def _is_grid_like(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _missing_clue_set(clues: Optional[Mapping[int, str]], direction: Direction) -> List[str]:
    _, plural = _DIRECTION_LABELS[direction]
    return [] if clues else [f"Les indices {plural} sont obligatoires"]


def _blank_clues(clues: Optional[Mapping[int, str]], direction: Direction) -> List[str]:
    label, _ = _DIRECTION_LABELS[direction]
    return [f"L'indice {label} {number} est vide" for number, clue in sorted((clues or {}).items()) if is_blank(clue)]


# PUBLIC_INTERFACE
def validate_puzzle_data(data: PuzzleData) -> ValidationReport:
    """Collect every completeness problem in an authored puzzle.

    Checks, in order:
    1. title, language, grid and solution are present (a missing or
       non-list grid/solution ends the pass immediately);
    2. every cell that is open in both the grid and the solution holds a
       letter in the solution, reported with 1-based (row, col);
    3. both clue sets are non-empty, then no clue text is blank (horizontal
       before vertical).

    Incomplete puzzles are reported, never raised.

    Raises:
        GridShapeError: if grid or solution rows are ragged.
    """
    errors: List[str] = []

    if is_blank(data.title):
        errors.append("Le titre est obligatoire")
    if not data.language:
        errors.append("La langue est obligatoire")

    if not _is_grid_like(data.grid):
        errors.append("La grille est obligatoire")
        return ValidationReport(errors)
    if not _is_grid_like(data.solution):
        errors.append("La solution est obligatoire")
        return ValidationReport(errors)

    grid_rows, grid_cols = ensure_rectangular(data.grid)
    if ensure_rectangular(data.solution) != (grid_rows, grid_cols):
        raise GridShapeError("Grid and solution dimensions differ.")

    for row in range(grid_rows):
        for col in range(grid_cols):
            solution_cell = data.solution[row][col]
            if is_blocked(data.grid[row][col]) or is_blocked(solution_cell):
                continue
            if is_blank(solution_cell):
                errors.append(f"Case vide détectée en position ({row + 1}, {col + 1})")

    # Presence of both clue sets is reported before any blank clue text.
    errors += _missing_clue_set(data.clues_horizontal, Direction.HORIZONTAL)
    errors += _missing_clue_set(data.clues_vertical, Direction.VERTICAL)
    errors += _blank_clues(data.clues_horizontal, Direction.HORIZONTAL)
    errors += _blank_clues(data.clues_vertical, Direction.VERTICAL)
    return ValidationReport(errors)


# PUBLIC_INTERFACE
def check_clue_coverage(words: WordMap, clues: Optional[Mapping[int, str]], direction: Direction) -> List[str]:
    """Return one error per extracted word that has no usable clue."""
    clues = clues or {}
    label, _ = _DIRECTION_LABELS[direction]
    return [
        f"Indice {label} manquant pour le mot {number}"
        for number in sorted(words)
        if is_blank(clues.get(number))
    ]


def _normalize_cell(cell: Any) -> str:
    return "" if cell is None else str(cell).strip().casefold()


# PUBLIC_INTERFACE
def validate_solution(submitted: Any, solution: Sequence[Sequence[str]]) -> bool:
    """Compare a player's grid with the stored solution.

    Open cells must match after trimming and case-folding; blocked cells are
    ignored. A submission with a different shape is simply incorrect.
    """
    try:
        shape = ensure_rectangular(submitted)
    except GridShapeError:
        return False
    if shape != ensure_rectangular(solution):
        return False

    for submitted_row, solution_row in zip(submitted, solution):
        for given, expected in zip(submitted_row, solution_row):
            if is_blocked(expected):
                continue
            if _normalize_cell(given) != _normalize_cell(expected):
                return False
    return True
