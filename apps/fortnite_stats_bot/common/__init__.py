"""
Common utilities module for the stats bot.

This module provides centralized access to shared functionality:
- Stats snapshot cache
- Linked account storage
- Request logging
- Input validation
- Formatting helpers
"""

# Stats snapshot cache
from apps.fortnite_stats_bot.common.stats_cache import (
    CacheEntry,
    StatsCacheStore,
)

# Linked accounts (Discord user -> Epic account)
from apps.fortnite_stats_bot.common.linked_accounts import (
    LinkedAccount,
    get_all_linked_accounts,
    get_linked_account,
    initialize_linked_accounts,
    link_account,
    unlink_account,
)

# Request logging
from apps.fortnite_stats_bot.common.logging import (
    get_latency_ms,
    log_stats_completion,
    log_stats_request,
)

# Input validation
from apps.fortnite_stats_bot.common.validation import (
    validate_account_id,
    validate_choice_parameter,
    validate_leaderboard_stat,
    validate_mode_key,
)

# Shared formatting utilities
from apps.fortnite_stats_bot.common.shared import (
    format_playtime,
    format_ratio,
    top_modes,
    truncate_message,
)

# Constants
from apps.fortnite_stats_bot.common.constants import (
    DISCORD_MESSAGE_MAX_LENGTH,
    LEADERBOARD_RESULT_LIMIT,
    LEADERBOARD_STAT_CONFIG,
    LEADERBOARD_STAT_DISPLAY_LIST,
    LEADERBOARD_STAT_VALID_VALUES,
    TOP_MODES_LIMIT,
)

__all__ = [
    # Cache
    'CacheEntry',
    'StatsCacheStore',
    # Linked accounts
    'LinkedAccount',
    'get_all_linked_accounts',
    'get_linked_account',
    'initialize_linked_accounts',
    'link_account',
    'unlink_account',
    # Logging
    'get_latency_ms',
    'log_stats_completion',
    'log_stats_request',
    # Validation
    'validate_account_id',
    'validate_choice_parameter',
    'validate_leaderboard_stat',
    'validate_mode_key',
    # Shared formatting utilities
    'format_playtime',
    'format_ratio',
    'top_modes',
    'truncate_message',
    # Constants
    'DISCORD_MESSAGE_MAX_LENGTH',
    'LEADERBOARD_RESULT_LIMIT',
    'LEADERBOARD_STAT_CONFIG',
    'LEADERBOARD_STAT_DISPLAY_LIST',
    'LEADERBOARD_STAT_VALID_VALUES',
    'TOP_MODES_LIMIT',
]
