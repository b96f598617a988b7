"""
Constants and configuration mappings used across the stats bot services.
"""

# =============================================================================
# Discord Limits
# =============================================================================

DISCORD_MESSAGE_MAX_LENGTH = 2000

# =============================================================================
# Result Limits
# =============================================================================

LEADERBOARD_RESULT_LIMIT = 10
TOP_MODES_LIMIT = 3

# =============================================================================
# Leaderboard Stat Configuration
# =============================================================================

LEADERBOARD_STAT_CONFIG = {
    "wins": {
        "field": "wins",
        "display_name": "Wins",
        "format": "int"
    },
    "kills": {
        "field": "kills",
        "display_name": "Kills",
        "format": "int"
    },
    "kd": {
        "field": "kd",
        "display_name": "K/D",
        "format": "float"
    },
    "matches": {
        "field": "matches",
        "display_name": "Matches",
        "format": "int"
    }
}

LEADERBOARD_STAT_VALID_VALUES = {"wins", "kills", "kd", "matches"}
LEADERBOARD_STAT_DISPLAY_LIST = ["wins", "kills", "kd", "matches"]
