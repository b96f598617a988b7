"""
Services module for the stats bot.

Contains the stats service, the provider interface and the leaderboard.
"""

from apps.fortnite_stats_bot.services.leaderboard import (
    LeaderboardEntry,
    build_leaderboard,
    format_leaderboard_table,
)
from apps.fortnite_stats_bot.services.provider import (
    ProviderResult,
    StatsPrivateError,
    StatsProvider,
)
from apps.fortnite_stats_bot.services.stats_service import (
    StatsService,
    create_stats_service,
)

__all__ = [
    'LeaderboardEntry',
    'build_leaderboard',
    'format_leaderboard_table',
    'ProviderResult',
    'StatsPrivateError',
    'StatsProvider',
    'StatsService',
    'create_stats_service',
]
