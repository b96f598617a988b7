"""
Scheduled task that keeps the current season up to date.

The season source is whatever can report the running season (Epic's
calendar endpoint in production). A failed or empty refresh keeps the
previously known season so season queries keep working.
"""

import logging
from typing import Optional, Protocol

from discord.ext import tasks

from libs.stats_engine import SeasonContext, SeasonContextHolder

from apps.fortnite_stats_bot.bot_config import get_bot_config

logger = logging.getLogger(__name__)


class SeasonSource(Protocol):
    async def fetch_current_season(self) -> Optional[SeasonContext]:
        ...


_holder: Optional[SeasonContextHolder] = None
_source: Optional[SeasonSource] = None


async def refresh_season_context(holder: SeasonContextHolder, source: SeasonSource) -> bool:
    """
    Fetch the current season and store it in the holder.

    Returns:
        True if the holder now has a different season, False otherwise
        (unchanged, nothing reported, or the source failed)
    """
    try:
        season = await source.fetch_current_season()
    except Exception as e:
        previous = holder.current.short_name if holder.current else None
        logger.error(f"Failed to refresh season context, keeping {previous}: {e}", exc_info=True)
        return False

    if season is None:
        logger.warning("Season source returned no current season, keeping previous context")
        return False

    changed = holder.update(season)
    if changed:
        logger.info(f"Season context updated to {season.name} ({season.short_name})")
    return changed


@tasks.loop(minutes=60)
async def refresh_current_season():
    """Refresh the season holder from the season source."""
    if _holder is None or _source is None:
        logger.error("Season holder or source not set for season refresh")
        return
    await refresh_season_context(_holder, _source)


def setup_season_refresh_task(
    holder: SeasonContextHolder,
    source: SeasonSource,
    interval_minutes: Optional[int] = None,
) -> None:
    """Start the scheduled season refresh task."""
    global _holder, _source
    _holder = holder
    _source = source

    if interval_minutes is None:
        interval_minutes = get_bot_config().season_refresh_interval_minutes

    if not refresh_current_season.is_running():
        refresh_current_season.change_interval(minutes=interval_minutes)
        refresh_current_season.start()
        logger.info(f"Started season refresh task (every {interval_minutes} min)")
    else:
        logger.warning("Season refresh task already running")
