"""
Crossword grid analysis engine.

Exports:
- generate_numbering / numbering_matrix for clue numbering
- extract_words and WordSpan for horizontal/vertical word spans
- validate_characters, CharsetRegistry and Language for per-language alphabets
- validate_puzzle_data, check_clue_coverage and validate_solution for
  completeness and submission checks

These modules are framework-agnostic pure functions and can be reused by views
or services without importing request objects or models.
"""

from .cells import BLOCK, PLACEHOLDER, GridShapeError, ensure_rectangular, same_blocking_layout, strip_letters
from .numbering import generate_numbering, numbering_matrix
from .words import Direction, WordSpan, extract_words, words_to_dict
from .charset import CharacterCheck, CharsetRegistry, Language, validate_characters
from .completeness import PuzzleData, ValidationReport, check_clue_coverage, validate_puzzle_data, validate_solution

__all__ = [
    "BLOCK",
    "PLACEHOLDER",
    "GridShapeError",
    "ensure_rectangular",
    "same_blocking_layout",
    "strip_letters",
    "generate_numbering",
    "numbering_matrix",
    "Direction",
    "WordSpan",
    "extract_words",
    "words_to_dict",
    "CharacterCheck",
    "CharsetRegistry",
    "Language",
    "validate_characters",
    "PuzzleData",
    "ValidationReport",
    "check_clue_coverage",
    "validate_puzzle_data",
    "validate_solution",
]
