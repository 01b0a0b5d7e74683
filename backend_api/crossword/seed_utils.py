import datetime
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from .grid import generate_numbering, numbering_matrix
from .models import CrosswordPuzzle

SAMPLE_PUZZLES: List[Dict[str, Any]] = [
    {
        "title": "Puzzle du jour",
        "language": "FR",
        "difficulty": "easy",
        "grid": [
            ["C", "A", "R", "#", "#"],
            ["H", "#", "O", "#", "#"],
            ["A", "#", "S", "U", "N"],
            ["T", "#", "E", "#", "#"],
            ["#", "#", "#", "#", "#"],
        ],
        "clues_horizontal": {"1": "Véhicule à quatre roues", "3": "Étoile jaune dans le ciel"},
        "clues_vertical": {"1": "Animal qui ronronne", "2": "Une fleur"},
    },
    {
        "title": "لغز اليوم",
        "language": "AR",
        "difficulty": "easy",
        "grid": [
            ["ك", "ت", "ا", "ب"],
            ["#", "#", "#", "ي"],
            ["#", "#", "#", "ت"],
            ["#", "#", "#", "#"],
        ],
        "clues_horizontal": {"1": "ما نقرأ فيه"},
        "clues_vertical": {"2": "مكان السكن"},
    },
]


# PUBLIC_INTERFACE
def ensure_seed_puzzles(day: Optional[datetime.date] = None) -> int:
    """Ensure there is at least one published puzzle to play.

    Returns number of puzzles inserted (0 if any puzzle already exists).
    """
    if CrosswordPuzzle.objects.exists():
        return 0
    day = day or timezone.localdate()
    with transaction.atomic():
        for sample in SAMPLE_PUZZLES:
            grid = sample["grid"]
            rows, cols = len(grid), len(grid[0])
            CrosswordPuzzle.objects.create(
                title=sample["title"],
                date=day,
                language=sample["language"],
                difficulty=sample["difficulty"],
                rows=rows,
                cols=cols,
                grid=grid,
                solution=grid,
                clues_horizontal=sample["clues_horizontal"],
                clues_vertical=sample["clues_vertical"],
                numbering=numbering_matrix(generate_numbering(grid), rows, cols),
                is_published=True,
            )
    return len(SAMPLE_PUZZLES)
