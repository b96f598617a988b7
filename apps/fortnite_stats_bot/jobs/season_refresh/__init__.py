"""
Season refresh job module.

Contains the scheduled task that keeps the current SeasonContext fresh.
"""

from apps.fortnite_stats_bot.jobs.season_refresh.season_job import (
    SeasonSource,
    refresh_season_context,
    setup_season_refresh_task,
)

__all__ = [
    'SeasonSource',
    'refresh_season_context',
    'setup_season_refresh_task',
]
