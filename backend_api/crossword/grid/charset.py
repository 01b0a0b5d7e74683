from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Pattern, Protocol, Sequence

from .cells import BLOCK, EMPTY, GridShapeError, ensure_rectangular


class Language(str, Enum):
    """Writing systems a puzzle can be authored in."""

    FR = "FR"
    AR = "AR"


GRID_FORMAT_ERROR = "Format de grille invalide - doit être un tableau"
ROW_FORMAT_ERROR = "Format de ligne invalide - doit être un tableau"


@dataclass(frozen=True)
class CharacterCheck:
    """Outcome of a character-set validation pass.

    ``structural`` is set when the grid itself is malformed rather than
    containing a forbidden character.
    """

    valid: bool
    error: Optional[str] = None
    structural: bool = False
    row: Optional[int] = None
    col: Optional[int] = None


class CharsetRule(Protocol):
    """Protocol for per-language character rules."""

    error_message: str

    # PUBLIC_INTERFACE
    def accepts(self, cell: str) -> bool:
        """Return True when every character of the cell is allowed."""


@dataclass(frozen=True)
class RegexCharsetRule:
    """Character rule backed by a full-match regular expression."""

    pattern: Pattern[str]
    error_message: str

    def accepts(self, cell: str) -> bool:
        return self.pattern.fullmatch(cell) is not None


FRENCH = RegexCharsetRule(
    pattern=re.compile(r"[A-Za-zÀ-ÿ#\s]*"),
    error_message="Caractères français uniquement autorisés",
)

ARABIC = RegexCharsetRule(
    pattern=re.compile(r"[\u0600-\u06FF#\s]*"),
    error_message="Caractères arabes uniquement autorisés",
)


# PUBLIC_INTERFACE
class CharsetRegistry:
    """Registry mapping language tags to character rules."""

    _registry: Dict[str, CharsetRule] = {
        Language.FR.value: FRENCH,
        Language.AR.value: ARABIC,
    }

    @classmethod
    def get(cls, language: str) -> CharsetRule:
        """Return the rule for a language tag, or raise KeyError."""
        key = _language_key(language)
        if key not in cls._registry:
            raise KeyError(f"Unknown language: {language!r}")
        return cls._registry[key]

    @classmethod
    def register(cls, language: str, rule: CharsetRule) -> None:
        """Register or override the rule for a language tag."""
        key = _language_key(language)
        if not key:
            raise ValueError("language must be a non-empty string")
        cls._registry[key] = rule

    @classmethod
    def languages(cls) -> Sequence[str]:
        return tuple(cls._registry)


def _language_key(language: Any) -> str:
    if isinstance(language, Language):
        return language.value
    return (language or "").strip().upper()


# PUBLIC_INTERFACE
def validate_characters(grid: Any, language: str) -> CharacterCheck:
    """Check every filled, non-blocked cell against the language's alphabet.

    Stops at the first offending cell. Blocking markers and empty cells are
    accepted for every language. A grid that is not a rectangular list of
    lists yields a structural failure instead of a character violation.

    Raises:
        KeyError: if no rule is registered for ``language``.
    """
    rule = CharsetRegistry.get(language)
    if not isinstance(grid, (list, tuple)):
        return CharacterCheck(valid=False, error=GRID_FORMAT_ERROR, structural=True)

    for row_index, row in enumerate(grid):
        if not isinstance(row, (list, tuple)):
            return CharacterCheck(valid=False, error=ROW_FORMAT_ERROR, structural=True)
        for col_index, cell in enumerate(row):
            if cell == BLOCK or cell == EMPTY or cell is None:
                continue
            if not isinstance(cell, str) or not rule.accepts(cell):
                return CharacterCheck(
                    valid=False,
                    error=rule.error_message,
                    row=row_index,
                    col=col_index,
                )
    try:
        ensure_rectangular(grid)
    except GridShapeError:
        return CharacterCheck(valid=False, error=GRID_FORMAT_ERROR, structural=True)
    return CharacterCheck(valid=True)
