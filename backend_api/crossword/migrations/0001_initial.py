from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CrosswordPuzzle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("title", models.CharField(default="Puzzle du jour", max_length=200)),
                ("date", models.DateField(db_index=True, help_text="Day the puzzle is scheduled for.")),
                ("language", models.CharField(choices=[("FR", "FR"), ("AR", "AR")], max_length=2)),
                (
                    "difficulty",
                    models.CharField(
                        choices=[("easy", "Easy"), ("medium", "Medium"), ("hard", "Hard")],
                        default="medium",
                        max_length=8,
                    ),
                ),
                ("rows", models.PositiveSmallIntegerField()),
                ("cols", models.PositiveSmallIntegerField()),
                ("grid", models.JSONField(default=list)),
                ("solution", models.JSONField(default=list)),
                ("clues_horizontal", models.JSONField(blank=True, default=dict)),
                ("clues_vertical", models.JSONField(blank=True, default=dict)),
                ("numbering", models.JSONField(blank=True, default=list)),
                ("is_published", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Crossword Puzzle",
                "verbose_name_plural": "Crossword Puzzles",
                "ordering": ["-date", "created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="PlayerStats",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("date", models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ("language", models.CharField(choices=[("FR", "FR"), ("AR", "AR")], max_length=2)),
                ("puzzles_completed", models.PositiveIntegerField(default=0)),
                ("total_time_spent", models.PositiveIntegerField(default=0, help_text="Seconds.")),
            ],
            options={
                "verbose_name": "Player Stats",
                "verbose_name_plural": "Player Stats",
                "ordering": ["-date"],
                "unique_together": {("date", "language")},
            },
        ),
    ]
