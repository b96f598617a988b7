"""
Shared Fortnite data files for the stats bot.

This package contains data files like the game mode registry
that are used by both the stats engine and the bot services.
"""

from pathlib import Path

# Path to the versioned, ordered game mode registry
GAME_MODES_PATH = Path(__file__).parent / "game_modes.json"

__all__ = ['GAME_MODES_PATH']
