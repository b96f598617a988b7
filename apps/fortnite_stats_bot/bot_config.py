"""
Stats bot configuration from environment variables.
"""

from __future__ import annotations

import logging
import os

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

APPS_DIR = Path(__file__).parent.parent
ROOT_DIR = APPS_DIR.parent
ENV_FILE = ROOT_DIR / ".env"
DOCKER_ENV_FILE = ROOT_DIR / "infra" / "docker" / ".env"

env_loaded = False
for env_path in [DOCKER_ENV_FILE, ENV_FILE]:
    if env_path.exists():
        try:
            load_dotenv(dotenv_path=env_path, override=False)
            logger.info(f"Loaded .env from {env_path}")
            env_loaded = True
            break
        except Exception as e:
            logger.error(f"Failed to load {env_path}: {e}", exc_info=True)
if not env_loaded:
    logger.info("No .env file found")


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class StatsBotConfig:
    """Cache, maintenance and data file settings loaded from environment variables."""

    def __init__(self) -> None:
        self.serving_ttl_seconds: int = _get_int("STATS_CACHE_SERVING_TTL_SECONDS", 300)
        self.retention_ttl_seconds: int = _get_int("STATS_CACHE_RETENTION_TTL_SECONDS", 3600)

        if self.serving_ttl_seconds <= 0:
            raise ValueError("STATS_CACHE_SERVING_TTL_SECONDS must be > 0")
        if self.retention_ttl_seconds < self.serving_ttl_seconds:
            raise ValueError(
                "STATS_CACHE_RETENTION_TTL_SECONDS must be >= STATS_CACHE_SERVING_TTL_SECONDS "
                f"({self.retention_ttl_seconds} < {self.serving_ttl_seconds})"
            )

        self.cache_max_entries: int = _get_int("STATS_CACHE_MAX_ENTRIES", 100000)
        if self.cache_max_entries <= 0:
            raise ValueError("STATS_CACHE_MAX_ENTRIES must be > 0")

        self.cache_dir: Path = Path(os.getenv("STATS_BOT_CACHE_DIR", "/app/data/cache"))

        self.maintenance_interval_minutes: int = _get_int("STATS_MAINTENANCE_INTERVAL_MINUTES", 10)
        self.season_refresh_interval_minutes: int = _get_int(
            "STATS_SEASON_REFRESH_INTERVAL_MINUTES", 60
        )

        game_modes_file = os.getenv("FORTNITE_GAME_MODES_FILE")
        self.game_modes_file: Optional[Path] = Path(game_modes_file) if game_modes_file else None

    @property
    def stats_cache_file(self) -> Path:
        return self.cache_dir / "stats_cache.json"

    @property
    def linked_accounts_file(self) -> Path:
        return self.cache_dir / "linked_accounts.json"

    def __repr__(self) -> str:
        return (
            f"StatsBotConfig("
            f"serving_ttl_seconds={self.serving_ttl_seconds}, "
            f"retention_ttl_seconds={self.retention_ttl_seconds}, "
            f"cache_max_entries={self.cache_max_entries}, "
            f"cache_dir={str(self.cache_dir)!r}, "
            f"maintenance_interval_minutes={self.maintenance_interval_minutes}, "
            f"season_refresh_interval_minutes={self.season_refresh_interval_minutes}, "
            f"game_modes_file={self.game_modes_file})"
        )


_bot_config: Optional[StatsBotConfig] = None


def get_bot_config() -> StatsBotConfig:
    """Get or create the singleton config instance."""
    global _bot_config
    if _bot_config is None:
        _bot_config = StatsBotConfig()
    return _bot_config
