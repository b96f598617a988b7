"""
Jobs module for the stats bot.

Contains scheduled tasks that keep the stats cache and the current
season up to date.
"""

from apps.fortnite_stats_bot.jobs.cache_maintenance import setup_cache_maintenance_task
from apps.fortnite_stats_bot.jobs.season_refresh import setup_season_refresh_task

__all__ = [
    'setup_cache_maintenance_task',
    'setup_season_refresh_task',
]
