from django.urls import path
from .views import (
    health,
    get_languages,
    todays_puzzles,
    puzzles_by_date,
    archive_dates,
    submit_solution,
    puzzles,
    puzzle_detail,
    toggle_publish,
    admin_puzzles_by_date,
    create_draft_puzzle,
    preview_words,
    admin_stats,
)

urlpatterns = [
    path('health/', health, name='Health'),
    path('languages', get_languages, name='languages'),
    # Player
    path('player/today', todays_puzzles, name='player-today'),
    path('player/date/<str:date_str>', puzzles_by_date, name='player-date'),
    path('player/dates', archive_dates, name='player-dates'),
    path('player/submit/<int:puzzle_id>', submit_solution, name='player-submit'),
    # Admin
    path('admin/puzzles', puzzles, name='admin-puzzles'),
    path('admin/puzzles/by-date/<str:date_str>', admin_puzzles_by_date, name='admin-puzzles-by-date'),
    path('admin/puzzles/<int:puzzle_id>', puzzle_detail, name='admin-puzzle-detail'),
    path('admin/puzzles/<int:puzzle_id>/toggle-publish', toggle_publish, name='admin-toggle-publish'),
    path('admin/create-puzzle', create_draft_puzzle, name='admin-create-draft'),
    path('admin/preview-words', preview_words, name='admin-preview-words'),
    path('admin/stats', admin_stats, name='admin-stats'),
]
