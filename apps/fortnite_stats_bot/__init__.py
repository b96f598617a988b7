"""
Fortnite stats bot package.

This package provides the services behind the bot's slash commands:
cached stats lookups, linked accounts, the server leaderboard and the
scheduled maintenance jobs.
"""

def main():
    """Main entry point for the operator CLI."""
    from apps.fortnite_stats_bot.stats_cli import main as _main
    _main()

__all__ = ['main']
