import re

from django.test import SimpleTestCase

from crossword.grid import (
    CharsetRegistry,
    Direction,
    GridShapeError,
    PuzzleData,
    check_clue_coverage,
    extract_words,
    generate_numbering,
    numbering_matrix,
    same_blocking_layout,
    strip_letters,
    validate_characters,
    validate_puzzle_data,
    validate_solution,
)
from crossword.grid.charset import RegexCharsetRule

SAMPLE = [
    ["C", "A", "R", "#", "#"],
    ["H", "#", "O", "#", "#"],
    ["A", "#", "S", "U", "N"],
]


class NumberingTests(SimpleTestCase):
    def assertRowMajorSequence(self, numbering):
        ordered = [numbering[coord] for coord in sorted(numbering)]
        self.assertEqual(ordered, list(range(1, len(numbering) + 1)))

    def test_sample_numbering(self):
        numbering = generate_numbering(SAMPLE)
        self.assertEqual(numbering, {(0, 0): 1, (0, 2): 2, (2, 2): 3})
        self.assertRowMajorSequence(numbering)

    def test_numbers_have_no_gaps_on_mixed_layout(self):
        grid = [
            ["", "", "#", "", ""],
            ["", "#", "", "", "#"],
            ["", "", "", "#", ""],
            ["#", "", "", "", ""],
        ]
        self.assertRowMajorSequence(generate_numbering(grid))

    def test_uniform_grid_numbering(self):
        grid = [["X"] * 5 for _ in range(5)]
        numbering = generate_numbering(grid)
        # Row 0 cells all start vertical words; column 0 below row 0 starts horizontal words.
        expected = {(0, c): c + 1 for c in range(5)}
        expected.update({(r, 0): 5 + r for r in range(1, 5)})
        self.assertEqual(numbering, expected)

    def test_cell_starting_both_directions_gets_one_number(self):
        grid = [
            ["A", "B"],
            ["C", "#"],
        ]
        numbering = generate_numbering(grid)
        self.assertEqual(numbering, {(0, 0): 1})

    def test_fully_blocked_grid_has_no_numbers(self):
        self.assertEqual(generate_numbering([["#"] * 3 for _ in range(3)]), {})

    def test_isolated_cell_gets_no_number(self):
        grid = [
            ["#", "A", "#"],
            ["#", "#", "#"],
            ["B", "C", "#"],
        ]
        self.assertEqual(generate_numbering(grid), {(2, 0): 1})

    def test_letters_do_not_affect_numbering(self):
        blank = [["" if cell != "#" else "#" for cell in row] for row in SAMPLE]
        self.assertEqual(generate_numbering(blank), generate_numbering(SAMPLE))

    def test_ragged_grid_raises(self):
        with self.assertRaises(GridShapeError):
            generate_numbering([["A", "B"], ["C"]])

    def test_numbering_matrix(self):
        matrix = numbering_matrix(generate_numbering(SAMPLE), 3, 5)
        self.assertEqual(matrix[0], ["1", "", "2", "", ""])
        self.assertEqual(matrix[2], ["", "", "3", "", ""])


class ExtractionTests(SimpleTestCase):
    def test_sample_words(self):
        horizontal, vertical = extract_words(SAMPLE, generate_numbering(SAMPLE))

        self.assertEqual(sorted(horizontal), [1, 3])
        car = horizontal[1]
        self.assertEqual((car.content, car.start_row, car.start_col, car.length), ("CAR", 0, 0, 3))
        sun = horizontal[3]
        self.assertEqual((sun.content, sun.start_row, sun.start_col, sun.length), ("SUN", 2, 2, 3))

        self.assertEqual(sorted(vertical), [1, 2])
        self.assertEqual(vertical[1].content, "CHA")
        self.assertEqual((vertical[1].start_row, vertical[1].start_col), (0, 0))
        self.assertEqual(vertical[2].content, "ROS")
        self.assertEqual(vertical[2].cells, [(0, 2), (1, 2), (2, 2)])

    def test_uniform_grid_words(self):
        grid = [[chr(ord("A") + c) for c in range(5)] for _ in range(5)]
        horizontal, vertical = extract_words(grid, generate_numbering(grid))
        self.assertEqual(len(horizontal), 5)
        self.assertEqual(len(vertical), 5)
        self.assertTrue(all(w.length == 5 for w in horizontal.values()))
        self.assertTrue(all(w.length == 5 for w in vertical.values()))
        self.assertEqual(horizontal[1].content, "ABCDE")
        self.assertEqual(vertical[2].content, "BBBBB")

    def test_no_single_letter_words_and_every_number_used(self):
        grid = [
            ["A", "#", "B", "C"],
            ["D", "E", "#", "F"],
            ["#", "G", "H", "I"],
        ]
        numbering = generate_numbering(grid)
        horizontal, vertical = extract_words(grid, numbering)
        for span in list(horizontal.values()) + list(vertical.values()):
            self.assertGreaterEqual(span.length, 2)
            self.assertEqual(len(span.content), span.length)
        self.assertEqual(set(numbering.values()), set(horizontal) | set(vertical))

    def test_empty_cells_use_placeholder(self):
        grid = [
            ["C", "", "R"],
            ["#", "#", "#"],
            ["", "", ""],
        ]
        horizontal, vertical = extract_words(grid, generate_numbering(grid))
        self.assertEqual(horizontal[1].content, "C_R")
        self.assertFalse(horizontal[1].is_complete)
        self.assertEqual(horizontal[2].content, "___")
        self.assertEqual(vertical, {})

    def test_whitespace_cells_use_placeholder(self):
        grid = [["C", " ", "R"], ["#", "#", "#"]]
        horizontal, _ = extract_words(grid, generate_numbering(grid))
        self.assertEqual(horizontal[1].content, "C_R")
        self.assertFalse(horizontal[1].is_complete)

    def test_fully_blocked_grid_has_no_words(self):
        grid = [["#"] * 4 for _ in range(4)]
        self.assertEqual(extract_words(grid, generate_numbering(grid)), ({}, {}))

    def test_repeated_runs_are_identical(self):
        first = extract_words(SAMPLE, generate_numbering(SAMPLE))
        second = extract_words(SAMPLE, generate_numbering(SAMPLE))
        self.assertEqual(first, second)

    def test_to_dict(self):
        horizontal, _ = extract_words(SAMPLE, generate_numbering(SAMPLE))
        self.assertEqual(
            horizontal[3].to_dict(),
            {"number": 3, "direction": "horizontal", "word": "SUN", "start_row": 2, "start_col": 2, "length": 3},
        )


class CharacterValidationTests(SimpleTestCase):
    def test_french_accepts_letters_blocks_and_blanks(self):
        check = validate_characters([["C", "A", "R"], ["#", "#", "#"], ["", "", ""]], "FR")
        self.assertTrue(check.valid)
        self.assertIsNone(check.error)

    def test_french_accepts_accents(self):
        self.assertTrue(validate_characters([["É", "à", "ç"]], "FR").valid)

    def test_french_rejects_arabic(self):
        check = validate_characters([["C", "A", "R"], ["#", "ب", "#"]], "FR")
        self.assertFalse(check.valid)
        self.assertEqual(check.error, "Caractères français uniquement autorisés")
        self.assertEqual((check.row, check.col), (1, 1))
        self.assertFalse(check.structural)

    def test_arabic_rejects_latin(self):
        check = validate_characters([["ك", "ت", "A"]], "AR")
        self.assertFalse(check.valid)
        self.assertEqual(check.error, "Caractères arabes uniquement autorisés")

    def test_arabic_accepts_arabic(self):
        self.assertTrue(validate_characters([["ك", "ت", "ا", "ب"], ["#", "", "#", "ي"]], "AR").valid)

    def test_first_violation_only(self):
        check = validate_characters([["1", "2"], ["3", "4"]], "FR")
        self.assertEqual((check.row, check.col), (0, 0))

    def test_digits_rejected(self):
        self.assertFalse(validate_characters([["A", "7"]], "FR").valid)

    def test_structural_errors(self):
        grid_check = validate_characters("CAR", "FR")
        self.assertFalse(grid_check.valid)
        self.assertTrue(grid_check.structural)
        self.assertEqual(grid_check.error, "Format de grille invalide - doit être un tableau")

        row_check = validate_characters([["A"], "B"], "FR")
        self.assertTrue(row_check.structural)
        self.assertEqual(row_check.error, "Format de ligne invalide - doit être un tableau")

    def test_ragged_grid_is_structural(self):
        check = validate_characters([["A", "B"], ["C"]], "FR")
        self.assertFalse(check.valid)
        self.assertTrue(check.structural)
        self.assertEqual(check.error, "Format de grille invalide - doit être un tableau")

    def test_unknown_language_raises(self):
        with self.assertRaises(KeyError):
            validate_characters([["A"]], "EN")

    def test_register_new_language(self):
        rule = RegexCharsetRule(pattern=re.compile(r"[A-Z#\s]*"), error_message="Uppercase only")
        original = dict(CharsetRegistry._registry)
        try:
            CharsetRegistry.register("xx", rule)
            self.assertTrue(validate_characters([["A"]], "XX").valid)
            self.assertEqual(validate_characters([["a"]], "XX").error, "Uppercase only")
        finally:
            CharsetRegistry._registry = original


class CompletenessValidationTests(SimpleTestCase):
    def _data(self, **overrides):
        data = PuzzleData(
            title="Puzzle",
            language="FR",
            grid=[["C", "A", "R"], ["#", "O", "#"]],
            solution=[["C", "A", "R"], ["#", "O", "#"]],
            clues_horizontal={1: "Voiture"},
            clues_vertical={2: "Or"},
        )
        for key, value in overrides.items():
            setattr(data, key, value)
        return data

    def test_complete_puzzle_is_valid(self):
        report = validate_puzzle_data(self._data())
        self.assertTrue(report.is_valid)
        self.assertEqual(report.errors, [])

    def test_single_blank_cell(self):
        report = validate_puzzle_data(self._data(solution=[["C", "A", "R"], ["#", "", "#"]]))
        self.assertFalse(report.is_valid)
        self.assertEqual(report.errors, ["Case vide détectée en position (2, 2)"])

    def test_errors_accumulate_in_detection_order(self):
        report = validate_puzzle_data(
            self._data(
                title="  ",
                solution=[["C", " ", "R"], ["#", "", "#"]],
                clues_horizontal={},
                clues_vertical={2: ""},
            )
        )
        self.assertEqual(
            report.errors,
            [
                "Le titre est obligatoire",
                "Case vide détectée en position (1, 2)",
                "Case vide détectée en position (2, 2)",
                "Les indices horizontaux sont obligatoires",
                "L'indice vertical 2 est vide",
            ],
        )

    def test_whitespace_clue_is_blank(self):
        report = validate_puzzle_data(self._data(clues_horizontal={1: "  "}))
        self.assertEqual(report.errors, ["L'indice horizontal 1 est vide"])

    def test_missing_clue_sets_reported_before_blank_clues(self):
        report = validate_puzzle_data(self._data(clues_horizontal={1: " "}, clues_vertical={}))
        self.assertEqual(
            report.errors,
            ["Les indices verticaux sont obligatoires", "L'indice horizontal 1 est vide"],
        )

    def test_blank_clues_listed_horizontal_then_vertical(self):
        report = validate_puzzle_data(self._data(clues_horizontal={3: "", 1: "Voiture"}, clues_vertical={2: " "}))
        self.assertEqual(report.errors, ["L'indice horizontal 3 est vide", "L'indice vertical 2 est vide"])

    def test_missing_grid_stops_early(self):
        report = validate_puzzle_data(self._data(grid=None, clues_vertical={}))
        self.assertEqual(report.errors, ["La grille est obligatoire"])

    def test_missing_solution_stops_early(self):
        report = validate_puzzle_data(self._data(language=None, solution="CAR"))
        self.assertEqual(report.errors, ["La langue est obligatoire", "La solution est obligatoire"])

    def test_cell_blocked_in_solution_only_is_skipped(self):
        report = validate_puzzle_data(self._data(solution=[["C", "A", "R"], ["#", "#", "#"]]))
        self.assertTrue(report.is_valid)

    def test_input_is_not_mutated(self):
        data = self._data(solution=[["C", "", "R"], ["#", "O", "#"]])
        snapshot = [row[:] for row in data.solution]
        validate_puzzle_data(data)
        self.assertEqual(data.solution, snapshot)

    def test_to_dict(self):
        self.assertEqual(validate_puzzle_data(self._data()).to_dict(), {"is_valid": True, "errors": []})


class ClueCoverageTests(SimpleTestCase):
    def test_reports_words_without_clues(self):
        horizontal, vertical = extract_words(SAMPLE, generate_numbering(SAMPLE))
        self.assertEqual(
            check_clue_coverage(horizontal, {1: "Voiture", 3: " "}, Direction.HORIZONTAL),
            ["Indice horizontal manquant pour le mot 3"],
        )
        self.assertEqual(
            check_clue_coverage(vertical, None, Direction.VERTICAL),
            ["Indice vertical manquant pour le mot 1", "Indice vertical manquant pour le mot 2"],
        )


class GridHelperTests(SimpleTestCase):
    def test_strip_letters_returns_new_grid(self):
        original = [row[:] for row in SAMPLE]
        stripped = strip_letters(SAMPLE)
        self.assertEqual(stripped[0], ["", "", "", "#", "#"])
        self.assertEqual(SAMPLE, original)
        self.assertTrue(same_blocking_layout(SAMPLE, stripped))

    def test_same_blocking_layout_detects_mismatch(self):
        other = [row[:] for row in SAMPLE]
        other[1][1] = "X"
        self.assertFalse(same_blocking_layout(SAMPLE, other))
        self.assertFalse(same_blocking_layout(SAMPLE, SAMPLE[:2]))

    def test_validate_solution(self):
        submitted = [["c", "a", "r ", "#", "#"], ["H", "#", "O", "#", "#"], ["A", "#", "S", "U", "N"]]
        self.assertTrue(validate_solution(submitted, SAMPLE))
        submitted[2][4] = "M"
        self.assertFalse(validate_solution(submitted, SAMPLE))
        self.assertFalse(validate_solution(SAMPLE[:2], SAMPLE))
        self.assertFalse(validate_solution([["A"], ["B", "C"]], SAMPLE))
