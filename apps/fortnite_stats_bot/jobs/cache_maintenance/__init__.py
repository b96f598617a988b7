"""
Cache maintenance job module.

Contains the scheduled task that sweeps expired stats cache entries
and persists the cache to disk.
"""

from apps.fortnite_stats_bot.jobs.cache_maintenance.maintenance_job import (
    run_maintenance_once,
    setup_cache_maintenance_task,
)

__all__ = [
    'run_maintenance_once',
    'setup_cache_maintenance_task',
]
