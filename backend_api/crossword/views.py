from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Count, F, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status, permissions
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .models import CrosswordPuzzle, PlayerStats, DEFAULT_TITLE
from .permissions import IsPuzzleAdmin
from .serializers import (
    PuzzleWriteSerializer,
    DraftPuzzleSerializer,
    DraftPuzzleResponseSerializer,
    PuzzleDetailSerializer,
    PuzzleSummarySerializer,
    PlayerPuzzleSerializer,
    ArchiveEntrySerializer,
    PreviewWordsRequestSerializer,
    PreviewWordsResponseSerializer,
    SubmitSolutionRequestSerializer,
    SubmitSolutionResponseSerializer,
    StatsResponseSerializer,
)
from crossword.grid import (
    Direction,
    GridShapeError,
    Language,
    PuzzleData,
    CharsetRegistry,
    check_clue_coverage,
    ensure_rectangular,
    extract_words,
    generate_numbering,
    numbering_matrix,
    validate_characters,
    validate_puzzle_data,
    validate_solution,
    words_to_dict,
)

logger = logging.getLogger(__name__)

SOLVED_MESSAGE = "Congratulations! Puzzle solved correctly!"
UNSOLVED_MESSAGE = "Some answers are incorrect. Keep trying!"
INVALID_DATA_ERROR = "Données invalides"
RECENT_STATS_LIMIT = 30


def _internal_error() -> Response:
    return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _parse_day(value: str) -> Optional[datetime.date]:
    """Parse a YYYY-MM-DD path segment, returning None when malformed."""
    try:
        return parse_date(value)
    except ValueError:
        return None


def _bad_date(value: str) -> Response:
    return Response({"error": f"Invalid date: {value!r}. Expected YYYY-MM-DD."}, status=status.HTTP_400_BAD_REQUEST)


def _stringify_clues(clues: Optional[Dict[int, str]]) -> Dict[str, str]:
    return {str(number): text for number, text in sorted((clues or {}).items())}


def _authoring_errors(vd: Dict[str, Any]) -> List[str]:
    """Run the completeness validator, then the character check on both grids."""
    report = validate_puzzle_data(
        PuzzleData(
            title=vd.get("title"),
            language=vd.get("language"),
            grid=vd.get("grid"),
            solution=vd.get("solution"),
            clues_horizontal=vd.get("clues_horizontal"),
            clues_vertical=vd.get("clues_vertical"),
        )
    )
    errors = list(report.errors)
    if vd.get("grid") is None or vd.get("solution") is None:
        return errors
    for key in ("grid", "solution"):
        check = validate_characters(vd[key], vd["language"])
        if not check.valid:
            errors.append(check.error)
            break
    return errors


def _apply_authoring_payload(puzzle: CrosswordPuzzle, vd: Dict[str, Any]) -> CrosswordPuzzle:
    grid = vd["grid"]
    rows, cols = ensure_rectangular(grid)
    puzzle.title = vd.get("title") or DEFAULT_TITLE
    puzzle.date = vd["date"]
    puzzle.language = vd["language"]
    puzzle.difficulty = vd.get("difficulty") or "medium"
    puzzle.is_published = vd.get("is_published", True)
    puzzle.rows = rows
    puzzle.cols = cols
    puzzle.grid = grid
    puzzle.solution = vd["solution"]
    puzzle.clues_horizontal = _stringify_clues(vd.get("clues_horizontal"))
    puzzle.clues_vertical = _stringify_clues(vd.get("clues_vertical"))
    puzzle.numbering = numbering_matrix(generate_numbering(grid), rows, cols)
    puzzle.save()
    return puzzle


def _unique_title(title: str, day: datetime.date) -> str:
    """Disambiguate titles when several puzzles share a date."""
    existing = CrosswordPuzzle.objects.filter(date=day)
    count = existing.count()
    if count == 0:
        return title or DEFAULT_TITLE
    if not title or title == DEFAULT_TITLE:
        return f"{DEFAULT_TITLE} {count + 1}"
    if existing.filter(title=title).exists():
        return f"{title} ({count + 1})"
    return title


def _published_on(day: datetime.date):
    return CrosswordPuzzle.objects.filter(date=day, is_published=True).order_by("created_at", "id")


# PUBLIC_INTERFACE
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health(request):
    """Health check endpoint for the API.

    Returns:
    - 200 OK with {"message": "Server is up!"}
    """
    return Response({"message": "Server is up!"})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_languages",
    operation_summary="List supported puzzle languages",
    operation_description="Returns the language tags accepted by the character-set validator.",
    tags=["meta"],
    responses={200: openapi.Response("OK", schema=openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Items(type=openapi.TYPE_STRING)))},
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_languages(request):
    """List language tags with a registered alphabet."""
    return Response(list(CharsetRegistry.languages()), status=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Player endpoints
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="todays_puzzles",
    operation_summary="Get today's published puzzles",
    operation_description="""
Returns every published puzzle scheduled for today (server local date), in
creation order. The `grid` field only keeps black squares; letters are stripped.
""",
    responses={200: PlayerPuzzleSerializer(many=True)},
    tags=["player"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def todays_puzzles(request):
    """Published puzzles of the day, letters hidden."""
    puzzles = _published_on(timezone.localdate())
    return Response(PlayerPuzzleSerializer(puzzles, many=True).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="puzzles_by_date",
    operation_summary="Get published puzzles for a date",
    operation_description="""
Path parameters:
- date (YYYY-MM-DD)

Returns published puzzles for that day, letters hidden, in creation order.
""",
    responses={200: PlayerPuzzleSerializer(many=True)},
    tags=["player"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def puzzles_by_date(request, date_str: str):
    """Published puzzles for an archive day."""
    day = _parse_day(date_str)
    if day is None:
        return _bad_date(date_str)
    return Response(PlayerPuzzleSerializer(_published_on(day), many=True).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="archive_dates",
    operation_summary="List days with published puzzles",
    operation_description="""
Returns one entry per day with at least one published puzzle, newest first.
Each entry describes the first puzzle created that day.
""",
    responses={200: ArchiveEntrySerializer(many=True)},
    tags=["player"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def archive_dates(request):
    """Distinct published dates for the archive calendar."""
    rows = (
        CrosswordPuzzle.objects.filter(is_published=True)
        .order_by("-date", "created_at", "id")
        .values("date", "language", "title", "difficulty")
    )
    entries: List[Dict[str, Any]] = []
    seen = set()
    for row in rows:
        if row["date"] in seen:
            continue
        seen.add(row["date"])
        entries.append(row)
    return Response(ArchiveEntrySerializer(entries, many=True).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="submit_solution",
    operation_summary="Submit a filled grid",
    operation_description="""
Checks a player's grid against the stored solution.

Request body:
- solution (list of rows, required)
- language (FR | AR, optional, defaults to the puzzle language)
- time_spent (seconds, optional)

Characters are validated against the language first (400 on violation).
Correct submissions are counted in the daily player statistics.
""",
    request_body=SubmitSolutionRequestSerializer,
    responses={200: SubmitSolutionResponseSerializer},
    tags=["player"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def submit_solution(request, puzzle_id: int):
    """Verify a submission and record the solve when it is correct."""
    puzzle = CrosswordPuzzle.objects.filter(pk=puzzle_id, is_published=True).first()
    if puzzle is None:
        return Response({"error": "Puzzle not found."}, status=status.HTTP_404_NOT_FOUND)

    serializer = SubmitSolutionRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data
    language = vd.get("language") or puzzle.language

    check = validate_characters(vd["solution"], language)
    if not check.valid:
        return Response({"error": check.error}, status=status.HTTP_400_BAD_REQUEST)

    is_correct = validate_solution(vd["solution"], puzzle.solution)
    if is_correct:
        with transaction.atomic():
            stats, _ = PlayerStats.objects.select_for_update().get_or_create(
                date=timezone.localdate(), language=language
            )
            PlayerStats.objects.filter(pk=stats.pk).update(
                puzzles_completed=F("puzzles_completed") + 1,
                total_time_spent=F("total_time_spent") + vd.get("time_spent", 0),
            )
        logger.info("Puzzle %s solved (%s, %ss)", puzzle.pk, language, vd.get("time_spent", 0))

    resp = {
        "correct": is_correct,
        "message": SOLVED_MESSAGE if is_correct else UNSOLVED_MESSAGE,
        "solution": puzzle.solution if is_correct else None,
    }
    return Response(SubmitSolutionResponseSerializer(resp).data, status=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="list_puzzles",
    operation_summary="List all puzzles",
    operation_description="All puzzles, published or not, newest date first.",
    responses={200: PuzzleDetailSerializer(many=True)},
    tags=["admin"],
)
@swagger_auto_schema(
    method="post",
    operation_id="create_puzzle",
    operation_summary="Create a complete puzzle",
    operation_description="""
Strict creation: the title, every open solution cell and every clue must be
filled, and letters must belong to the puzzle language.

On failure returns 400 with {"error": "Données invalides", "details": [...]},
listing every problem found.
""",
    request_body=PuzzleWriteSerializer,
    responses={201: PuzzleDetailSerializer},
    tags=["admin"],
)
@api_view(["GET", "POST"])
@permission_classes([IsPuzzleAdmin])
def puzzles(request):
    """List puzzles or create one with full validation."""
    if request.method == "GET":
        return Response(PuzzleDetailSerializer(CrosswordPuzzle.objects.all(), many=True).data)

    serializer = PuzzleWriteSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data
    try:
        errors = _authoring_errors(vd)
        if errors:
            logger.info("Rejected puzzle creation: %d problem(s)", len(errors))
            return Response({"error": INVALID_DATA_ERROR, "details": errors}, status=status.HTTP_400_BAD_REQUEST)
        puzzle = _apply_authoring_payload(CrosswordPuzzle(), vd)
    except GridShapeError:
        logger.exception("Malformed grid reached puzzle creation")
        return _internal_error()

    logger.info("Created puzzle %s for %s (%s)", puzzle.pk, puzzle.date, puzzle.language)
    return Response(PuzzleDetailSerializer(puzzle).data, status=status.HTTP_201_CREATED)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_puzzle",
    operation_summary="Get a puzzle",
    responses={200: PuzzleDetailSerializer},
    tags=["admin"],
)
@swagger_auto_schema(
    method="put",
    operation_id="update_puzzle",
    operation_summary="Replace a puzzle",
    operation_description="Same validation rules as creation.",
    request_body=PuzzleWriteSerializer,
    responses={200: PuzzleDetailSerializer},
    tags=["admin"],
)
@swagger_auto_schema(
    method="delete",
    operation_id="delete_puzzle",
    operation_summary="Delete a puzzle",
    tags=["admin"],
)
@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsPuzzleAdmin])
def puzzle_detail(request, puzzle_id: int):
    """Retrieve, replace or delete one puzzle."""
    puzzle = CrosswordPuzzle.objects.filter(pk=puzzle_id).first()
    if puzzle is None:
        return Response({"error": "Puzzle not found."}, status=status.HTTP_404_NOT_FOUND)

    if request.method == "GET":
        return Response(PuzzleDetailSerializer(puzzle).data)

    if request.method == "DELETE":
        puzzle.delete()
        logger.info("Deleted puzzle %s", puzzle_id)
        return Response({"message": "Puzzle deleted successfully"}, status=status.HTTP_200_OK)

    serializer = PuzzleWriteSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data
    try:
        errors = _authoring_errors(vd)
        if errors:
            logger.info("Rejected update of puzzle %s: %d problem(s)", puzzle_id, len(errors))
            return Response({"error": INVALID_DATA_ERROR, "details": errors}, status=status.HTTP_400_BAD_REQUEST)
        _apply_authoring_payload(puzzle, vd)
    except GridShapeError:
        logger.exception("Malformed grid reached update of puzzle %s", puzzle_id)
        return _internal_error()

    logger.info("Updated puzzle %s", puzzle_id)
    return Response(PuzzleDetailSerializer(puzzle).data)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="patch",
    operation_id="toggle_publish",
    operation_summary="Publish or unpublish a puzzle",
    tags=["admin"],
)
@api_view(["PATCH"])
@permission_classes([IsPuzzleAdmin])
def toggle_publish(request, puzzle_id: int):
    """Flip the publish flag of a puzzle."""
    puzzle = get_object_or_404(CrosswordPuzzle, pk=puzzle_id)
    was_published = puzzle.is_published
    now_published = puzzle.toggle_published()
    logger.info("Puzzle %s publish status changed from %s to %s", puzzle_id, was_published, now_published)
    return Response(
        {
            "success": True,
            "id": puzzle.pk,
            "is_published": now_published,
            "message": f"Puzzle {'published' if now_published else 'unpublished'} successfully",
        }
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="admin_puzzles_by_date",
    operation_summary="Get puzzles of a day for editing",
    operation_description="""
Path parameters:
- date (YYYY-MM-DD)

Query params:
- id (optional): return only that puzzle, 404 if it is not scheduled that day.

Without `id`, returns the single puzzle of the day, or
{"multiple": true, "puzzles": [...]} when several exist.
""",
    manual_parameters=[
        openapi.Parameter("id", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
    ],
    tags=["admin"],
)
@api_view(["GET"])
@permission_classes([IsPuzzleAdmin])
def admin_puzzles_by_date(request, date_str: str):
    """Puzzles of one day, published or not."""
    day = _parse_day(date_str)
    if day is None:
        return _bad_date(date_str)

    qs = CrosswordPuzzle.objects.filter(date=day).order_by("created_at", "id")
    puzzle_id = (request.GET.get("id") or "").strip()
    if puzzle_id:
        puzzle = qs.filter(pk=puzzle_id).first() if puzzle_id.isdigit() else None
        if puzzle is None:
            return Response({"error": "Puzzle not found for this date and id."}, status=status.HTTP_404_NOT_FOUND)
        return Response(PuzzleDetailSerializer(puzzle).data)

    found = list(qs)
    if not found:
        return Response({"error": "No puzzle found for this date."}, status=status.HTTP_404_NOT_FOUND)
    if len(found) == 1:
        return Response(PuzzleDetailSerializer(found[0]).data)
    return Response({"multiple": True, "puzzles": PuzzleSummarySerializer(found, many=True).data})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="create_draft_puzzle",
    operation_summary="Create a puzzle without completeness checks",
    operation_description="""
Lenient creation used by the grid editor. Only rows, cols, date and language
are required. A grid that is missing or does not match rows x cols is replaced
by an empty grid. The grid doubles as the solution.

Duplicate titles on the same day get a numeric suffix.

Response includes the computed numbering and the words found in the grid.
""",
    request_body=DraftPuzzleSerializer,
    responses={201: DraftPuzzleResponseSerializer},
    tags=["admin"],
)
@api_view(["POST"])
@permission_classes([IsPuzzleAdmin])
def create_draft_puzzle(request):
    """Save a puzzle in whatever state the editor has it."""
    serializer = DraftPuzzleSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data
    rows, cols = vd["rows"], vd["cols"]

    grid = vd.get("grid")
    try:
        shape_ok = grid is not None and ensure_rectangular(grid) == (rows, cols)
    except GridShapeError:
        shape_ok = False
    if not shape_ok:
        logger.info("Draft grid missing or not %dx%d, starting from an empty grid", rows, cols)
        grid = [[""] * cols for _ in range(rows)]

    numbering = generate_numbering(grid)
    horizontal, vertical = extract_words(grid, numbering)

    puzzle = CrosswordPuzzle.objects.create(
        title=_unique_title(vd.get("title") or "", vd["date"]),
        date=vd["date"],
        language=vd["language"],
        difficulty=vd.get("difficulty") or "medium",
        is_published=vd.get("is_published", True),
        rows=rows,
        cols=cols,
        grid=grid,
        solution=grid,
        clues_horizontal=_stringify_clues(vd.get("clues_horizontal")),
        clues_vertical=_stringify_clues(vd.get("clues_vertical")),
        numbering=numbering_matrix(numbering, rows, cols),
    )
    logger.info("Created draft puzzle %s for %s (%s)", puzzle.pk, puzzle.date, puzzle.language)

    resp = {
        "id": puzzle.pk,
        "title": puzzle.title,
        "date": puzzle.date,
        "language": puzzle.language,
        "rows": rows,
        "cols": cols,
        "numbering": puzzle.numbering,
        "horizontal_words": words_to_dict(horizontal),
        "vertical_words": words_to_dict(vertical),
    }
    return Response(DraftPuzzleResponseSerializer(resp).data, status=status.HTTP_201_CREATED)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="preview_words",
    operation_summary="Preview numbering and words of a grid",
    operation_description="""
Request body:
- grid (list of rows, required)
- language (FR | AR, required)
- clues_horizontal / clues_vertical (optional): when given, words without a
  clue are listed in `clue_errors`.

Returns 400 with the validator's message when a cell holds a character outside
the language alphabet.
""",
    request_body=PreviewWordsRequestSerializer,
    responses={200: PreviewWordsResponseSerializer},
    tags=["admin"],
)
@api_view(["POST"])
@permission_classes([IsPuzzleAdmin])
def preview_words(request):
    """Number the grid and list its words without saving anything."""
    serializer = PreviewWordsRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data
    grid = vd["grid"]

    check = validate_characters(grid, vd["language"])
    if not check.valid:
        return Response({"error": check.error}, status=status.HTTP_400_BAD_REQUEST)

    try:
        rows, cols = ensure_rectangular(grid)
        numbering = generate_numbering(grid)
        horizontal, vertical = extract_words(grid, numbering)
    except GridShapeError:
        logger.exception("Malformed grid sent to word preview")
        return _internal_error()

    clue_errors: List[str] = []
    if "clues_horizontal" in vd:
        clue_errors += check_clue_coverage(horizontal, vd["clues_horizontal"], Direction.HORIZONTAL)
    if "clues_vertical" in vd:
        clue_errors += check_clue_coverage(vertical, vd["clues_vertical"], Direction.VERTICAL)

    resp = {
        "numbering": numbering_matrix(numbering, rows, cols),
        "horizontal_words": words_to_dict(horizontal),
        "vertical_words": words_to_dict(vertical),
        "clue_errors": clue_errors,
    }
    return Response(PreviewWordsResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="admin_stats",
    operation_summary="Dashboard statistics",
    operation_description="""
Counts every puzzle, published or not, per language, plus solve totals from
the daily player statistics and the latest 30 statistics rows.
""",
    responses={200: StatsResponseSerializer},
    tags=["admin"],
)
@api_view(["GET"])
@permission_classes([IsPuzzleAdmin])
def admin_stats(request):
    """Totals for the administrator dashboard."""
    distribution = {
        row["language"]: row["count"]
        for row in CrosswordPuzzle.objects.values("language").annotate(count=Count("id")).order_by("language")
    }
    totals = PlayerStats.objects.aggregate(
        completed=Sum("puzzles_completed"),
        time_spent=Sum("total_time_spent"),
    )
    completed = totals["completed"] or 0
    time_spent = totals["time_spent"] or 0
    recent = list(
        PlayerStats.objects.order_by("-date").values(
            "date", "language", "puzzles_completed", "total_time_spent"
        )[:RECENT_STATS_LIMIT]
    )

    resp = {
        "total_puzzles": sum(distribution.values()),
        "arabic_puzzles": distribution.get(Language.AR.value, 0),
        "french_puzzles": distribution.get(Language.FR.value, 0),
        "language_distribution": distribution,
        "puzzles_resolved": completed,
        "total_time_spent": time_spent,
        "average_time_per_puzzle": int(time_spent / completed + 0.5) if completed else 0,
        "recent_stats": recent,
    }
    return Response(StatsResponseSerializer(resp).data, status=status.HTTP_200_OK)
