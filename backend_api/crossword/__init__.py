"""
Crossword app package initializer.

Re-exports the grid engine so callers can import from crossword directly, e.g.:

    from crossword import generate_numbering, extract_words
"""

# PUBLIC_INTERFACE
from .grid import (
    CharsetRegistry,
    Language,
    PuzzleData,
    extract_words,
    generate_numbering,
    validate_characters,
    validate_puzzle_data,
)

__all__ = [
    "CharsetRegistry",
    "Language",
    "PuzzleData",
    "extract_words",
    "generate_numbering",
    "validate_characters",
    "validate_puzzle_data",
]
