"""
Tests for environment based configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from apps.fortnite_stats_bot import bot_config
from apps.fortnite_stats_bot.bot_config import StatsBotConfig, get_bot_config

CONFIG_VARS = [
    "STATS_CACHE_SERVING_TTL_SECONDS",
    "STATS_CACHE_RETENTION_TTL_SECONDS",
    "STATS_CACHE_MAX_ENTRIES",
    "STATS_BOT_CACHE_DIR",
    "STATS_MAINTENANCE_INTERVAL_MINUTES",
    "STATS_SEASON_REFRESH_INTERVAL_MINUTES",
    "FORTNITE_GAME_MODES_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


class TestStatsBotConfig:
    """Tests for StatsBotConfig."""

    def test_defaults(self):
        config = StatsBotConfig()

        assert config.serving_ttl_seconds == 300
        assert config.retention_ttl_seconds == 3600
        assert config.cache_max_entries == 100000
        assert config.cache_dir == Path("/app/data/cache")
        assert config.maintenance_interval_minutes == 10
        assert config.season_refresh_interval_minutes == 60
        assert config.game_modes_file is None
        assert config.stats_cache_file == Path("/app/data/cache/stats_cache.json")
        assert config.linked_accounts_file == Path("/app/data/cache/linked_accounts.json")

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STATS_CACHE_SERVING_TTL_SECONDS", "60")
        monkeypatch.setenv("STATS_CACHE_RETENTION_TTL_SECONDS", " 120 ")
        monkeypatch.setenv("STATS_BOT_CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("FORTNITE_GAME_MODES_FILE", str(tmp_path / "modes.json"))

        config = StatsBotConfig()

        assert config.serving_ttl_seconds == 60
        assert config.retention_ttl_seconds == 120
        assert config.stats_cache_file == tmp_path / "stats_cache.json"
        assert config.game_modes_file == tmp_path / "modes.json"

    def test_retention_below_serving_rejected(self, monkeypatch):
        monkeypatch.setenv("STATS_CACHE_SERVING_TTL_SECONDS", "600")
        monkeypatch.setenv("STATS_CACHE_RETENTION_TTL_SECONDS", "300")
        with pytest.raises(ValueError, match="STATS_CACHE_RETENTION_TTL_SECONDS"):
            StatsBotConfig()

    def test_non_integer_rejected(self, monkeypatch):
        monkeypatch.setenv("STATS_CACHE_MAX_ENTRIES", "lots")
        with pytest.raises(ValueError, match="STATS_CACHE_MAX_ENTRIES must be an integer"):
            StatsBotConfig()

    def test_blank_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("STATS_MAINTENANCE_INTERVAL_MINUTES", "  ")
        assert StatsBotConfig().maintenance_interval_minutes == 10

    def test_repr(self):
        text = repr(StatsBotConfig())
        assert text.startswith("StatsBotConfig(")
        assert "serving_ttl_seconds=300" in text

    def test_singleton(self, monkeypatch):
        monkeypatch.setattr(bot_config, "_bot_config", None)
        assert get_bot_config() is get_bot_config()
