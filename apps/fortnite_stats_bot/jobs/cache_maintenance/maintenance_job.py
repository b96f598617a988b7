"""
Scheduled task that sweeps the stats cache and persists what is left.

Runs every STATS_MAINTENANCE_INTERVAL_MINUTES (10 by default). The first
iteration runs as soon as the task starts, so expired entries restored
from disk at startup are dropped right away.
"""

import logging
from typing import Optional

from discord.ext import tasks

from apps.fortnite_stats_bot.bot_config import get_bot_config
from apps.fortnite_stats_bot.services.stats_service import StatsService

logger = logging.getLogger(__name__)

# Service instance reference (set by setup function)
_service_instance: Optional[StatsService] = None


def set_service_instance(service: StatsService) -> None:
    """Set the stats service used by the maintenance task."""
    global _service_instance
    _service_instance = service


def get_service_instance() -> Optional[StatsService]:
    """Get the stats service."""
    return _service_instance


def run_maintenance_once(service: StatsService) -> int:
    """
    Sweep expired cache entries and persist the remaining ones.

    Returns:
        Number of entries removed by the sweep
    """
    removed = service.run_maintenance()
    service.cache.save_to_disk()
    return removed


@tasks.loop(minutes=10)
async def run_cache_maintenance():
    """Sweep and persist the stats cache."""
    if not _service_instance:
        logger.error("Stats service not set for cache maintenance")
        return

    try:
        run_maintenance_once(_service_instance)
    except Exception as e:
        logger.error(f"Error in cache maintenance task: {e}", exc_info=True)


def setup_cache_maintenance_task(
    service: StatsService,
    interval_minutes: Optional[int] = None,
) -> None:
    """Start the scheduled cache maintenance task."""
    set_service_instance(service)

    if interval_minutes is None:
        interval_minutes = get_bot_config().maintenance_interval_minutes

    if not run_cache_maintenance.is_running():
        run_cache_maintenance.change_interval(minutes=interval_minutes)
        run_cache_maintenance.start()
        logger.info(f"Started cache maintenance task (every {interval_minutes} min)")
    else:
        logger.warning("Cache maintenance task already running")
