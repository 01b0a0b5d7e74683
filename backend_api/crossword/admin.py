from django.contrib import admin

from .models import CrosswordPuzzle, PlayerStats


@admin.register(CrosswordPuzzle)
class CrosswordPuzzleAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "title",
        "date",
        "language",
        "difficulty",
        "rows",
        "cols",
        "is_published",
        "created_at",
    )
    list_filter = ("is_published", "language", "difficulty")
    search_fields = ("title",)
    date_hierarchy = "date"
    ordering = ("-date", "created_at")
    readonly_fields = ("numbering", "created_at", "updated_at")
    actions = ["publish", "unpublish"]

    @admin.action(description="Publish selected puzzles")
    def publish(self, request, queryset):
        queryset.update(is_published=True)

    @admin.action(description="Unpublish selected puzzles")
    def unpublish(self, request, queryset):
        queryset.update(is_published=False)


@admin.register(PlayerStats)
class PlayerStatsAdmin(admin.ModelAdmin):
    list_display = ("date", "language", "puzzles_completed", "total_time_spent")
    list_filter = ("language",)
    ordering = ("-date", "language")
