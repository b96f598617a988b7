"""
Shared formatting utilities for stats output.
"""

from typing import Iterable, List, Tuple, Union

from libs.stats_engine import ModeStats, StatsSnapshot

from apps.fortnite_stats_bot.common.constants import DISCORD_MESSAGE_MAX_LENGTH, TOP_MODES_LIMIT


def format_playtime(minutes: Union[int, float]) -> str:
    """
    Format minutes played as hours and minutes, or days and hours past 24h.

    Examples: 0 -> "0h", 200 -> "3h 20m", 3180 -> "2d 5h"
    """
    if not minutes:
        return "0h"
    minutes = int(minutes)
    hours = minutes // 60
    if hours >= 24:
        days = hours // 24
        return f"{days}d {hours % 24}h"
    return f"{hours}h {minutes % 60}m"


def format_ratio(value: Union[int, float], decimals: int = 2) -> str:
    """Format kd or win rate with a fixed number of decimals."""
    return f"{float(value):.{decimals}f}"


def top_modes(
    snapshot: StatsSnapshot,
    limit: int = TOP_MODES_LIMIT,
    exclude: Iterable[str] = (),
) -> List[Tuple[str, ModeStats]]:
    """
    Return the most played modes of a snapshot.

    Args:
        snapshot: Aggregated stats
        limit: Maximum number of modes returned
        exclude: Display names to leave out, e.g. composite modes

    Returns:
        (display_name, stats) pairs with matches > 0, most matches first
    """
    excluded = set(exclude)
    played = [
        (name, stats) for name, stats in snapshot.modes.items()
        if stats.matches > 0 and name not in excluded
    ]
    played.sort(key=lambda item: item[1].matches, reverse=True)
    return played[:limit]


def truncate_message(message: str, limit: int = DISCORD_MESSAGE_MAX_LENGTH) -> str:
    """Truncate a message to Discord's length limit."""
    if len(message) > limit:
        return message[:limit - 3] + "..."
    return message
