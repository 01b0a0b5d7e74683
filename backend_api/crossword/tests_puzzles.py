import datetime

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from crossword.models import CrosswordPuzzle, PlayerStats
from crossword.seed_utils import ensure_seed_puzzles

SECRET = "s3cret"
ADMIN_HEADERS = {"HTTP_X_ADMIN_SECRET": SECRET}

GRID = [
    ["C", "A", "R"],
    ["#", "O", "#"],
    ["S", "U", "N"],
]


def _payload(**overrides):
    payload = {
        "title": "Premier puzzle",
        "date": "2025-12-09",
        "language": "FR",
        "difficulty": "easy",
        "grid": GRID,
        "solution": GRID,
        "clues_horizontal": {"1": "Véhicule", "3": "Étoile"},
        "clues_vertical": {"2": "Voyelles"},
    }
    payload.update(overrides)
    return payload


def _make_puzzle(day=None, published=True, title="Puzzle du jour", language="FR"):
    return CrosswordPuzzle.objects.create(
        title=title,
        date=day or timezone.localdate(),
        language=language,
        rows=3,
        cols=3,
        grid=GRID,
        solution=GRID,
        clues_horizontal={"1": "Véhicule", "3": "Étoile"},
        clues_vertical={"2": "Voyelles"},
        numbering=[["1", "2", ""], ["", "", ""], ["3", "", ""]],
        is_published=published,
    )


@override_settings(ADMIN_SECRET_CODE=SECRET)
class AdminPermissionTests(APITestCase):
    def test_health_is_public(self):
        resp = self.client.get(reverse('Health'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Server is up!"})

    def test_languages(self):
        resp = self.client.get(reverse('languages'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(set(resp.json()), {"FR", "AR"})

    def test_admin_requires_secret(self):
        resp = self.client.get(reverse('admin-puzzles'))
        self.assertEqual(resp.status_code, 403)
        resp = self.client.get(reverse('admin-puzzles'), HTTP_X_ADMIN_SECRET="wrong")
        self.assertEqual(resp.status_code, 403)

    def test_admin_accepts_secret_header(self):
        resp = self.client.get(reverse('admin-puzzles'), **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), [])

    def test_admin_accepts_staff_user(self):
        user = get_user_model().objects.create_user("editor", password="pw", is_staff=True)
        self.client.force_authenticate(user)
        resp = self.client.get(reverse('admin-puzzles'))
        self.assertEqual(resp.status_code, 200)

    @override_settings(ADMIN_SECRET_CODE="")
    def test_empty_secret_disables_header_access(self):
        resp = self.client.get(reverse('admin-puzzles'), HTTP_X_ADMIN_SECRET="")
        self.assertEqual(resp.status_code, 403)


@override_settings(ADMIN_SECRET_CODE=SECRET)
class AdminPuzzleTests(APITestCase):
    def test_create_complete_puzzle(self):
        resp = self.client.post(reverse('admin-puzzles'), _payload(), format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["rows"], 3)
        self.assertEqual(data["cols"], 3)
        self.assertEqual(data["numbering"], [["1", "2", ""], ["", "", ""], ["3", "", ""]])
        self.assertEqual(data["clues_horizontal"], {"1": "Véhicule", "3": "Étoile"})
        self.assertTrue(data["is_published"])
        self.assertEqual(CrosswordPuzzle.objects.count(), 1)

    def test_create_accepts_legacy_clue_list(self):
        payload = _payload(clues_vertical=[{"number": 2, "clue": "Voyelles"}])
        resp = self.client.post(reverse('admin-puzzles'), payload, format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["clues_vertical"], {"2": "Voyelles"})

    def test_create_reports_every_problem(self):
        solution = [["C", "A", "R"], ["#", "", "#"], ["S", "U", "N"]]
        payload = _payload(title="", solution=solution, clues_vertical={"2": "   "})
        resp = self.client.post(reverse('admin-puzzles'), payload, format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 400)
        data = resp.json()
        self.assertEqual(data["error"], "Données invalides")
        self.assertEqual(
            data["details"],
            [
                "Le titre est obligatoire",
                "Case vide détectée en position (2, 2)",
                "L'indice vertical 2 est vide",
            ],
        )
        self.assertFalse(CrosswordPuzzle.objects.exists())

    def test_create_missing_solution(self):
        payload = _payload()
        del payload["solution"]
        resp = self.client.post(reverse('admin-puzzles'), payload, format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["details"], ["La solution est obligatoire"])

    def test_create_rejects_wrong_alphabet(self):
        arabic = [["C", "A", "R"], ["#", "ب", "#"], ["S", "U", "N"]]
        resp = self.client.post(
            reverse('admin-puzzles'), _payload(grid=arabic, solution=arabic), format="json", **ADMIN_HEADERS
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Caractères français uniquement autorisés", resp.json()["details"])

    def test_create_rejects_mismatched_layout(self):
        solution = [["C", "A", "R"], ["O", "O", "#"], ["S", "U", "N"]]
        resp = self.client.post(reverse('admin-puzzles'), _payload(solution=solution), format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("solution", resp.json())

    def test_create_rejects_dimension_mismatch(self):
        resp = self.client.post(reverse('admin-puzzles'), _payload(rows=4), format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 400)

    def test_detail_update_delete(self):
        puzzle = _make_puzzle(day=datetime.date(2025, 1, 1))
        url = reverse('admin-puzzle-detail', kwargs={"puzzle_id": puzzle.pk})

        resp = self.client.get(url, **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["solution"], GRID)

        resp = self.client.put(url, _payload(title="Renommé", is_published=False), format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 200)
        puzzle.refresh_from_db()
        self.assertEqual(puzzle.title, "Renommé")
        self.assertFalse(puzzle.is_published)
        self.assertEqual(puzzle.date, datetime.date(2025, 12, 9))

        resp = self.client.put(url, _payload(clues_horizontal={}), format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["details"], ["Les indices horizontaux sont obligatoires"])

        resp = self.client.delete(url, **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 200)
        resp = self.client.get(url, **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 404)

    def test_toggle_publish(self):
        puzzle = _make_puzzle()
        url = reverse('admin-toggle-publish', kwargs={"puzzle_id": puzzle.pk})
        resp = self.client.patch(url, **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["is_published"])
        resp = self.client.patch(url, **ADMIN_HEADERS)
        self.assertTrue(resp.json()["is_published"])
        self.assertEqual(self.client.patch(reverse('admin-toggle-publish', kwargs={"puzzle_id": 999}), **ADMIN_HEADERS).status_code, 404)

    def test_puzzles_by_date(self):
        day = datetime.date(2025, 3, 1)
        first = _make_puzzle(day=day, published=False)
        url = reverse('admin-puzzles-by-date', kwargs={"date_str": "2025-03-01"})

        resp = self.client.get(url, **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], first.pk)

        second = _make_puzzle(day=day, title="Autre")
        data = self.client.get(url, **ADMIN_HEADERS).json()
        self.assertTrue(data["multiple"])
        self.assertEqual([p["id"] for p in data["puzzles"]], [first.pk, second.pk])

        resp = self.client.get(url, {"id": second.pk}, **ADMIN_HEADERS)
        self.assertEqual(resp.json()["title"], "Autre")

        other_day = _make_puzzle(day=datetime.date(2025, 3, 2))
        self.assertEqual(self.client.get(url, {"id": other_day.pk}, **ADMIN_HEADERS).status_code, 404)

        empty = reverse('admin-puzzles-by-date', kwargs={"date_str": "2020-01-01"})
        self.assertEqual(self.client.get(empty, **ADMIN_HEADERS).status_code, 404)
        bad = reverse('admin-puzzles-by-date', kwargs={"date_str": "2025-13-45"})
        self.assertEqual(self.client.get(bad, **ADMIN_HEADERS).status_code, 400)


@override_settings(ADMIN_SECRET_CODE=SECRET)
class DraftAndPreviewTests(APITestCase):
    def test_draft_without_grid_gets_empty_grid(self):
        payload = {"rows": 4, "cols": 5, "date": "2025-05-01", "language": "AR"}
        resp = self.client.post(reverse('admin-create-draft'), payload, format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["title"], "Puzzle du jour")
        # Empty 4x5 grid: one word per row and per column.
        self.assertEqual(len(data["horizontal_words"]), 4)
        self.assertEqual(len(data["vertical_words"]), 5)
        self.assertEqual(data["horizontal_words"]["1"]["word"], "_____")
        puzzle = CrosswordPuzzle.objects.get(pk=data["id"])
        self.assertEqual(puzzle.grid, [[""] * 5 for _ in range(4)])
        self.assertEqual(puzzle.solution, puzzle.grid)

    def test_draft_keeps_matching_grid(self):
        payload = {"rows": 3, "cols": 3, "date": "2025-05-01", "language": "FR", "grid": GRID}
        data = self.client.post(reverse('admin-create-draft'), payload, format="json", **ADMIN_HEADERS).json()
        self.assertEqual(data["numbering"], [["1", "2", ""], ["", "", ""], ["3", "", ""]])
        self.assertEqual(data["horizontal_words"]["3"]["word"], "SUN")
        self.assertEqual(data["vertical_words"]["2"]["word"], "AOU")

    def test_draft_replaces_mis_sized_grid(self):
        payload = {"rows": 3, "cols": 4, "date": "2025-05-01", "language": "FR", "grid": GRID}
        resp = self.client.post(reverse('admin-create-draft'), payload, format="json", **ADMIN_HEADERS)
        puzzle = CrosswordPuzzle.objects.get(pk=resp.json()["id"])
        self.assertEqual(puzzle.grid, [[""] * 4 for _ in range(3)])

    def test_draft_requires_dimensions(self):
        resp = self.client.post(
            reverse('admin-create-draft'), {"date": "2025-05-01", "language": "FR"}, format="json", **ADMIN_HEADERS
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("rows", resp.json())

    def test_draft_titles_are_disambiguated(self):
        base = {"rows": 3, "cols": 3, "date": "2025-06-01", "language": "FR"}
        url = reverse('admin-create-draft')
        titles = [
            self.client.post(url, base, format="json", **ADMIN_HEADERS).json()["title"],
            self.client.post(url, base, format="json", **ADMIN_HEADERS).json()["title"],
            self.client.post(url, dict(base, title="Mots"), format="json", **ADMIN_HEADERS).json()["title"],
            self.client.post(url, dict(base, title="Mots"), format="json", **ADMIN_HEADERS).json()["title"],
        ]
        self.assertEqual(titles, ["Puzzle du jour", "Puzzle du jour 2", "Mots", "Mots (4)"])

    def test_preview_words(self):
        payload = {"grid": GRID, "language": "FR", "clues_horizontal": {"1": "Véhicule"}}
        resp = self.client.post(reverse('admin-preview-words'), payload, format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["numbering"][0], ["1", "2", ""])
        self.assertEqual(data["horizontal_words"]["1"]["word"], "CAR")
        self.assertEqual(data["vertical_words"]["2"]["start_col"], 1)
        self.assertEqual(data["clue_errors"], ["Indice horizontal manquant pour le mot 3"])

    def test_preview_rejects_wrong_alphabet(self):
        payload = {"grid": [["ك", "ت"], ["ا", "ب"]], "language": "FR"}
        resp = self.client.post(reverse('admin-preview-words'), payload, format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Caractères français uniquement autorisés")

    def test_preview_rejects_ragged_grid(self):
        payload = {"grid": [["A", "B"], ["C"]], "language": "FR"}
        resp = self.client.post(reverse('admin-preview-words'), payload, format="json", **ADMIN_HEADERS)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Format de grille invalide - doit être un tableau"})


@override_settings(ADMIN_SECRET_CODE=SECRET)
class PlayerTests(APITestCase):
    def test_todays_puzzles_hide_letters(self):
        published = _make_puzzle()
        _make_puzzle(published=False)
        _make_puzzle(day=timezone.localdate() - datetime.timedelta(days=1))

        resp = self.client.get(reverse('player-today'))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([p["id"] for p in data], [published.pk])
        self.assertEqual(data[0]["grid"], [["", "", ""], ["#", "", "#"], ["", "", ""]])
        self.assertEqual(data[0]["solution"], GRID)
        published.refresh_from_db()
        self.assertEqual(published.grid, GRID)

    def test_puzzles_by_date(self):
        day = datetime.date(2024, 2, 29)
        puzzle = _make_puzzle(day=day)
        resp = self.client.get(reverse('player-date', kwargs={"date_str": "2024-02-29"}))
        self.assertEqual([p["id"] for p in resp.json()], [puzzle.pk])
        resp = self.client.get(reverse('player-date', kwargs={"date_str": "yesterday"}))
        self.assertEqual(resp.status_code, 400)

    def test_archive_dates_are_distinct(self):
        _make_puzzle(day=datetime.date(2025, 1, 1), title="Premier")
        _make_puzzle(day=datetime.date(2025, 1, 1), title="Second")
        _make_puzzle(day=datetime.date(2025, 1, 3), language="AR")
        _make_puzzle(day=datetime.date(2025, 1, 5), published=False)

        data = self.client.get(reverse('player-dates')).json()
        self.assertEqual([e["date"] for e in data], ["2025-01-03", "2025-01-01"])
        self.assertEqual(data[0]["language"], "AR")
        self.assertEqual(data[1]["title"], "Premier")

    def test_submit_correct_solution_records_stats(self):
        puzzle = _make_puzzle()
        url = reverse('player-submit', kwargs={"puzzle_id": puzzle.pk})
        submission = [["c", "a", "r"], ["#", "o", "#"], ["s", "u", "n"]]

        resp = self.client.post(url, {"solution": submission, "language": "FR", "time_spent": 90}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["correct"])
        self.assertEqual(data["solution"], GRID)

        self.client.post(url, {"solution": submission, "time_spent": 30}, format="json")
        stats = PlayerStats.objects.get(date=timezone.localdate(), language="FR")
        self.assertEqual(stats.puzzles_completed, 2)
        self.assertEqual(stats.total_time_spent, 120)

    def test_submit_wrong_solution(self):
        puzzle = _make_puzzle()
        submission = [["C", "A", "T"], ["#", "O", "#"], ["S", "U", "N"]]
        resp = self.client.post(
            reverse('player-submit', kwargs={"puzzle_id": puzzle.pk}), {"solution": submission}, format="json"
        )
        data = resp.json()
        self.assertFalse(data["correct"])
        self.assertIsNone(data["solution"])
        self.assertEqual(data["message"], "Some answers are incorrect. Keep trying!")
        self.assertFalse(PlayerStats.objects.exists())

    def test_submit_rejects_wrong_alphabet(self):
        puzzle = _make_puzzle()
        submission = [["C", "A", "R"], ["#", "ب", "#"], ["S", "U", "N"]]
        resp = self.client.post(
            reverse('player-submit', kwargs={"puzzle_id": puzzle.pk}), {"solution": submission}, format="json"
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Caractères français uniquement autorisés")

    def test_submit_unknown_or_unpublished_puzzle(self):
        hidden = _make_puzzle(published=False)
        for puzzle_id in (hidden.pk, 999):
            resp = self.client.post(
                reverse('player-submit', kwargs={"puzzle_id": puzzle_id}), {"solution": GRID}, format="json"
            )
            self.assertEqual(resp.status_code, 404)

    def test_stats(self):
        _make_puzzle(language="FR")
        _make_puzzle(language="AR", published=False)
        PlayerStats.objects.create(date=datetime.date(2025, 1, 1), language="FR", puzzles_completed=3, total_time_spent=300)
        PlayerStats.objects.create(date=datetime.date(2025, 1, 2), language="AR", puzzles_completed=1, total_time_spent=100)

        data = self.client.get(reverse('admin-stats'), **ADMIN_HEADERS).json()
        self.assertEqual(data["total_puzzles"], 2)
        self.assertEqual(data["french_puzzles"], 1)
        self.assertEqual(data["arabic_puzzles"], 1)
        self.assertEqual(data["language_distribution"], {"AR": 1, "FR": 1})
        self.assertEqual(data["puzzles_resolved"], 4)
        self.assertEqual(data["average_time_per_puzzle"], 100)
        self.assertEqual(len(data["recent_stats"]), 2)
        self.assertEqual(data["recent_stats"][0]["language"], "AR")

    def test_stats_average_rounds_half_up(self):
        PlayerStats.objects.create(date=datetime.date(2025, 1, 1), language="FR", puzzles_completed=2, total_time_spent=5)

        data = self.client.get(reverse('admin-stats'), **ADMIN_HEADERS).json()
        self.assertEqual(data["total_time_spent"], 5)
        self.assertEqual(data["average_time_per_puzzle"], 3)


class SeedTests(APITestCase):
    def test_seed_puzzles_are_complete_and_idempotent(self):
        self.assertEqual(ensure_seed_puzzles(), 2)
        self.assertEqual(ensure_seed_puzzles(), 0)
        resp = self.client.get(reverse('player-today'))
        self.assertEqual(sorted(p["language"] for p in resp.json()), ["AR", "FR"])
        french = CrosswordPuzzle.objects.get(language="FR")
        self.assertEqual(french.numbering[2], ["", "", "3", "", ""])
