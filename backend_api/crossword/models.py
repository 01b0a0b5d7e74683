from __future__ import annotations

from django.db import models
from django.utils import timezone

from .grid import Language


# PUBLIC_INTERFACE
class TimeStampedModel(models.Model):
    """Abstract base model providing created/updated timestamps.

    Notes:
        Keep this abstract model free of any logic that would access the Django
        app registry or execute queries at module import time.
    """
    created_at = models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")
    updated_at = models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")

    class Meta:
        abstract = True


LANGUAGE_CHOICES = [(lang.value, lang.value) for lang in Language]

DIFFICULTY_CHOICES = (
    ("easy", "Easy"),
    ("medium", "Medium"),
    ("hard", "Hard"),
)

DEFAULT_TITLE = "Puzzle du jour"


# PUBLIC_INTERFACE
class CrosswordPuzzle(TimeStampedModel):
    """An authored crossword.

    Fields:
    - title, date, language, difficulty: listing metadata
    - rows, cols: grid dimensions
    - grid: authored grid (list of rows of single-character strings, "#" blocks)
    - solution: solution grid sharing the grid's blocking layout
    - clues_horizontal / clues_vertical: clue text keyed by stringified number
    - numbering: row-major matrix of clue numbers ("" when unnumbered)
    - is_published: whether players can see the puzzle
    """
    title = models.CharField(max_length=200, default=DEFAULT_TITLE)
    date = models.DateField(db_index=True, help_text="Day the puzzle is scheduled for.")
    language = models.CharField(max_length=2, choices=LANGUAGE_CHOICES)
    difficulty = models.CharField(max_length=8, choices=DIFFICULTY_CHOICES, default="medium")
    rows = models.PositiveSmallIntegerField()
    cols = models.PositiveSmallIntegerField()
    grid = models.JSONField(default=list)
    solution = models.JSONField(default=list)
    clues_horizontal = models.JSONField(default=dict, blank=True)
    clues_vertical = models.JSONField(default=dict, blank=True)
    numbering = models.JSONField(default=list, blank=True)
    is_published = models.BooleanField(default=True)

    class Meta:
        ordering = ["-date", "created_at", "id"]
        verbose_name = "Crossword Puzzle"
        verbose_name_plural = "Crossword Puzzles"

    def toggle_published(self) -> bool:
        """Flip the publish flag and persist it. Returns the new state."""
        self.is_published = not self.is_published
        self.save(update_fields=["is_published", "updated_at"])
        return self.is_published

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title} ({self.date}, {self.language})"


# PUBLIC_INTERFACE
class PlayerStats(TimeStampedModel):
    """Daily solve counters per language.

    Fields:
    - date: day the solves happened
    - language: puzzle language
    - puzzles_completed: number of correct submissions that day
    - total_time_spent: cumulative solving time in seconds
    """
    date = models.DateField(default=timezone.localdate, db_index=True)
    language = models.CharField(max_length=2, choices=LANGUAGE_CHOICES)
    puzzles_completed = models.PositiveIntegerField(default=0)
    total_time_spent = models.PositiveIntegerField(default=0, help_text="Seconds.")

    class Meta:
        ordering = ["-date"]
        unique_together = (("date", "language"),)
        verbose_name = "Player Stats"
        verbose_name_plural = "Player Stats"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.date} {self.language}: {self.puzzles_completed}"
