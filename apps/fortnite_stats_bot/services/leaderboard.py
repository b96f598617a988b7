"""
Server leaderboard built from linked accounts and cached snapshots.

Only accounts whose snapshot is still retained in the stats cache are
ranked; the leaderboard never triggers provider fetches.
"""

import logging

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from tabulate import tabulate

from apps.fortnite_stats_bot.common.constants import (
    LEADERBOARD_RESULT_LIMIT,
    LEADERBOARD_STAT_CONFIG,
)
from apps.fortnite_stats_bot.common.linked_accounts import LinkedAccount
from apps.fortnite_stats_bot.common.shared import truncate_message
from apps.fortnite_stats_bot.common.stats_cache import StatsCacheStore
from apps.fortnite_stats_bot.common.validation import validate_leaderboard_stat

logger = logging.getLogger(__name__)

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    discord_user_id: int
    display_name: str
    value: Union[int, float]


def build_leaderboard(
    linked_accounts: Sequence[Tuple[int, LinkedAccount]],
    cache: StatsCacheStore,
    stat: str = "wins",
    limit: int = LEADERBOARD_RESULT_LIMIT,
) -> List[LeaderboardEntry]:
    """
    Rank linked accounts by an overall stat.

    Args:
        linked_accounts: (discord_user_id, account) pairs in link order
        cache: Stats cache holding the snapshots
        stat: One of wins, kills, kd, matches
        limit: Maximum number of entries

    Returns:
        Entries sorted by the stat descending; ties keep link order
    """
    stat = validate_leaderboard_stat(stat)
    field_name = LEADERBOARD_STAT_CONFIG[stat]["field"]

    rows = []
    for discord_user_id, account in linked_accounts:
        entry = cache.peek_retained(account.account_id)
        if entry is None:
            continue
        value = getattr(entry.snapshot.overall, field_name)
        rows.append((discord_user_id, account.display_name, value))

    rows.sort(key=lambda row: row[2], reverse=True)

    leaderboard = [
        LeaderboardEntry(rank=i, discord_user_id=user_id, display_name=name, value=value)
        for i, (user_id, name, value) in enumerate(rows[:limit], 1)
    ]
    logger.info(
        f"Built {stat} leaderboard with {len(leaderboard)} of {len(linked_accounts)} linked accounts"
    )
    return leaderboard


def format_leaderboard_value(value: Union[int, float], value_format: str) -> str:
    if value_format == "float":
        return f"{float(value):.2f}"
    return f"{int(value):,}"


def format_leaderboard_table(entries: Sequence[LeaderboardEntry], stat: str = "wins") -> str:
    """Render leaderboard entries as a monospace table message."""
    stat = validate_leaderboard_stat(stat)
    config = LEADERBOARD_STAT_CONFIG[stat]

    if not entries:
        return "No linked players with cached stats yet. Use `/link set` to appear on the leaderboard."

    table_data = [
        [
            MEDALS.get(entry.rank, str(entry.rank)),
            entry.display_name,
            format_leaderboard_value(entry.value, config["format"]),
        ]
        for entry in entries
    ]
    headers = ["#", "Player", config["display_name"]]

    table_str = tabulate(table_data, headers=headers, tablefmt="github")

    message_lines = [f"## Leaderboard - {config['display_name']}", "```", table_str, "```"]
    return truncate_message("\n".join(message_lines))
