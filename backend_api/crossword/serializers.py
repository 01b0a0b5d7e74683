from __future__ import annotations

from typing import Any, Dict, List, Mapping

from rest_framework import serializers

from .grid import GridShapeError, Language, ensure_rectangular, same_blocking_layout, strip_letters
from .models import CrosswordPuzzle, DEFAULT_TITLE, DIFFICULTY_CHOICES

MIN_SIDE = 3
MAX_SIDE = 25

LANGUAGE_FIELD_CHOICES = [(lang.value, lang.value) for lang in Language]


def _grid_field(**kwargs) -> serializers.ListField:
    """A list of rows, each a list of single-cell strings."""
    return serializers.ListField(
        child=serializers.ListField(
            child=serializers.CharField(allow_blank=True, trim_whitespace=False, max_length=4),
            allow_empty=True,
        ),
        **kwargs,
    )


def _check_shape(grid: List[List[str]], field_name: str) -> tuple:
    try:
        shape = ensure_rectangular(grid)
    except GridShapeError as exc:
        raise serializers.ValidationError({field_name: str(exc)})
    rows, cols = shape
    if not (MIN_SIDE <= rows <= MAX_SIDE and MIN_SIDE <= cols <= MAX_SIDE):
        raise serializers.ValidationError(
            {field_name: f"Grid must be between {MIN_SIDE}x{MIN_SIDE} and {MAX_SIDE}x{MAX_SIDE}."}
        )
    return shape


# PUBLIC_INTERFACE
class ClueMapField(serializers.Field):
    """Clue texts keyed by clue number.

    Accepts the JSON object form ``{"1": "clue"}`` or the legacy list form
    ``[{"number": 1, "clue": "..."}]`` and always yields ``Dict[int, str]``.
    """

    default_error_messages = {
        "invalid": "Expected an object of clue texts keyed by number, or a list of clue entries.",
        "bad_number": "Clue number {value!r} is not a positive integer.",
        "bad_text": "Clue {number} must be a string.",
    }

    def to_internal_value(self, data: Any) -> Dict[int, str]:
        if isinstance(data, Mapping):
            items = list(data.items())
        elif isinstance(data, list):
            items = []
            for entry in data:
                if not isinstance(entry, Mapping) or "number" not in entry:
                    self.fail("invalid")
                items.append((entry["number"], entry.get("clue", "")))
        else:
            self.fail("invalid")

        clues: Dict[int, str] = {}
        for raw_number, text in items:
            try:
                number = int(str(raw_number).strip())
            except ValueError:
                self.fail("bad_number", value=raw_number)
            if number <= 0:
                self.fail("bad_number", value=raw_number)
            if text is None:
                text = ""
            if not isinstance(text, str):
                self.fail("bad_text", number=number)
            clues[number] = text
        return clues

    def to_representation(self, value: Mapping) -> Dict[str, str]:
        return {str(number): text for number, text in (value or {}).items()}


# PUBLIC_INTERFACE
class PuzzleWriteSerializer(serializers.Serializer):
    """Payload for the strict create/update endpoints.

    Shape checks happen here; completeness (blank cells, blank clues, missing
    title) is left to the grid engine so that every problem is reported at once.
    """

    title = serializers.CharField(required=False, allow_blank=True, default="", max_length=200)
    date = serializers.DateField()
    language = serializers.ChoiceField(choices=LANGUAGE_FIELD_CHOICES)
    difficulty = serializers.ChoiceField(choices=DIFFICULTY_CHOICES, required=False, default="medium")
    is_published = serializers.BooleanField(required=False, default=True)
    rows = serializers.IntegerField(required=False, min_value=MIN_SIDE, max_value=MAX_SIDE)
    cols = serializers.IntegerField(required=False, min_value=MIN_SIDE, max_value=MAX_SIDE)
    grid = _grid_field(required=False, allow_null=True)
    solution = _grid_field(required=False, allow_null=True)
    clues_horizontal = ClueMapField(required=False, default=dict)
    clues_vertical = ClueMapField(required=False, default=dict)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        grid = attrs.get("grid")
        solution = attrs.get("solution")
        if grid is None:
            return attrs

        rows, cols = _check_shape(grid, "grid")
        if attrs.setdefault("rows", rows) != rows or attrs.setdefault("cols", cols) != cols:
            raise serializers.ValidationError("rows and cols must match the grid dimensions.")

        if solution is not None:
            _check_shape(solution, "solution")
            if not same_blocking_layout(grid, solution):
                raise serializers.ValidationError(
                    {"solution": "Solution must have the same dimensions and black squares as the grid."}
                )
        return attrs


# PUBLIC_INTERFACE
class DraftPuzzleSerializer(serializers.Serializer):
    """Payload for the lenient draft endpoint.

    Only rows, cols, date and language are required; a missing or mis-sized
    grid is replaced by an empty one in the view.
    """

    title = serializers.CharField(required=False, allow_blank=True, default=DEFAULT_TITLE, max_length=200)
    date = serializers.DateField()
    language = serializers.ChoiceField(choices=LANGUAGE_FIELD_CHOICES)
    difficulty = serializers.ChoiceField(choices=DIFFICULTY_CHOICES, required=False, default="medium")
    is_published = serializers.BooleanField(required=False, default=True)
    rows = serializers.IntegerField(min_value=MIN_SIDE, max_value=MAX_SIDE)
    cols = serializers.IntegerField(min_value=MIN_SIDE, max_value=MAX_SIDE)
    grid = _grid_field(required=False, allow_null=True)
    clues_horizontal = ClueMapField(required=False, default=dict)
    clues_vertical = ClueMapField(required=False, default=dict)


# PUBLIC_INTERFACE
class PuzzleDetailSerializer(serializers.ModelSerializer):
    """Full puzzle representation for administrators."""

    clues_horizontal = ClueMapField()
    clues_vertical = ClueMapField()

    class Meta:
        model = CrosswordPuzzle
        fields = [
            "id",
            "title",
            "date",
            "language",
            "difficulty",
            "is_published",
            "rows",
            "cols",
            "grid",
            "solution",
            "clues_horizontal",
            "clues_vertical",
            "numbering",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# PUBLIC_INTERFACE
class PuzzleSummarySerializer(serializers.ModelSerializer):
    """Listing metadata without grids."""

    class Meta:
        model = CrosswordPuzzle
        fields = ["id", "title", "date", "language", "difficulty", "is_published", "rows", "cols"]
        read_only_fields = fields


# PUBLIC_INTERFACE
class PlayerPuzzleSerializer(serializers.ModelSerializer):
    """Player-facing puzzle: ``grid`` keeps only the black squares.

    The solution ships alongside so the client can check cells locally.
    """

    grid = serializers.SerializerMethodField()
    clues_horizontal = ClueMapField()
    clues_vertical = ClueMapField()

    class Meta:
        model = CrosswordPuzzle
        fields = [
            "id",
            "title",
            "date",
            "language",
            "difficulty",
            "rows",
            "cols",
            "grid",
            "solution",
            "clues_horizontal",
            "clues_vertical",
            "numbering",
            "created_at",
        ]
        read_only_fields = fields

    def get_grid(self, obj: CrosswordPuzzle) -> List[List[str]]:
        return strip_letters(obj.grid)


# PUBLIC_INTERFACE
class ArchiveEntrySerializer(serializers.Serializer):
    """One published day in the archive."""

    date = serializers.DateField()
    language = serializers.CharField()
    title = serializers.CharField()
    difficulty = serializers.CharField()


# PUBLIC_INTERFACE
class PreviewWordsRequestSerializer(serializers.Serializer):
    """Request payload for previewing numbering and words of a grid in progress."""

    grid = _grid_field()
    language = serializers.ChoiceField(choices=LANGUAGE_FIELD_CHOICES)
    clues_horizontal = ClueMapField(required=False)
    clues_vertical = ClueMapField(required=False)


# PUBLIC_INTERFACE
class PreviewWordsResponseSerializer(serializers.Serializer):
    """Numbering matrix, extracted words and any clue gaps."""

    numbering = serializers.ListField(child=serializers.ListField(child=serializers.CharField(allow_blank=True)))
    horizontal_words = serializers.DictField(child=serializers.DictField())
    vertical_words = serializers.DictField(child=serializers.DictField())
    clue_errors = serializers.ListField(child=serializers.CharField())


# PUBLIC_INTERFACE
class DraftPuzzleResponseSerializer(serializers.Serializer):
    """Response of the lenient draft endpoint."""

    id = serializers.IntegerField()
    title = serializers.CharField()
    date = serializers.DateField()
    language = serializers.CharField()
    rows = serializers.IntegerField()
    cols = serializers.IntegerField()
    numbering = serializers.ListField(child=serializers.ListField(child=serializers.CharField(allow_blank=True)))
    horizontal_words = serializers.DictField(child=serializers.DictField())
    vertical_words = serializers.DictField(child=serializers.DictField())


# PUBLIC_INTERFACE
class SubmitSolutionRequestSerializer(serializers.Serializer):
    """Player submission of a filled grid."""

    solution = _grid_field()
    language = serializers.ChoiceField(choices=LANGUAGE_FIELD_CHOICES, required=False)
    time_spent = serializers.IntegerField(required=False, min_value=0, default=0)


# PUBLIC_INTERFACE
class SubmitSolutionResponseSerializer(serializers.Serializer):
    """Verdict for a submission; the solution is revealed only when correct."""

    correct = serializers.BooleanField()
    message = serializers.CharField()
    solution = serializers.ListField(child=serializers.ListField(child=serializers.CharField(allow_blank=True)), allow_null=True)


# PUBLIC_INTERFACE
class StatsResponseSerializer(serializers.Serializer):
    """Administrator dashboard counters."""

    total_puzzles = serializers.IntegerField()
    arabic_puzzles = serializers.IntegerField()
    french_puzzles = serializers.IntegerField()
    language_distribution = serializers.DictField(child=serializers.IntegerField())
    puzzles_resolved = serializers.IntegerField()
    total_time_spent = serializers.IntegerField()
    average_time_per_puzzle = serializers.IntegerField()
    recent_stats = serializers.ListField(child=serializers.DictField())
