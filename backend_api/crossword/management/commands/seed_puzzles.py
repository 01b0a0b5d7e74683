from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from crossword.models import CrosswordPuzzle
from crossword.seed_utils import ensure_seed_puzzles


class Command(BaseCommand):
    help = "Seed sample French and Arabic puzzles if the puzzle table is empty."

    def add_arguments(self, parser):
        parser.add_argument("--date", help="Schedule the samples for this day (YYYY-MM-DD). Defaults to today.")

    def handle(self, *args, **options):
        # PUBLIC_INTERFACE
        # This command is idempotent and safe to run multiple times.
        day = None
        if options.get("date"):
            day = parse_date(options["date"])
            if day is None:
                raise CommandError(f"Invalid date: {options['date']!r}")

        count_before = CrosswordPuzzle.objects.count()
        if count_before > 0:
            self.stdout.write(self.style.WARNING(f"Puzzles already present: {count_before}. No action taken."))
            return

        inserted = ensure_seed_puzzles(day)
        self.stdout.write(self.style.SUCCESS(f"Seeded {inserted} puzzles."))
