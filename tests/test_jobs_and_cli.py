"""
Tests for the cache maintenance job and the operator CLI.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from libs.stats_engine import StatsSnapshot
from apps.fortnite_stats_bot.common.stats_cache import StatsCacheStore
from apps.fortnite_stats_bot.jobs.cache_maintenance import run_maintenance_once
from apps.fortnite_stats_bot.services.stats_service import StatsService
from apps.fortnite_stats_bot.stats_cli import main

from tests.conftest import FakeClock, SOLO_RAW_STATS


class TestCacheMaintenanceJob:
    """Tests for run_maintenance_once."""

    def test_sweeps_then_persists(self, tmp_path, provider, registry):
        clock = FakeClock()
        path = tmp_path / "stats_cache.json"
        cache = StatsCacheStore(clock=clock, persist_path=path)
        service = StatsService(provider, registry, cache)
        asyncio.run(service.get_stats("acc-1"))
        cache.put("acc-old", cache.get("acc-1"))
        clock.advance(3000)
        asyncio.run(service.get_stats("acc-1"))
        clock.advance(600)

        assert run_maintenance_once(service) == 1

        data = json.loads(path.read_text(encoding="utf-8"))
        assert list(data) == ["acc-1"]


@pytest.fixture
def raw_stats_file(tmp_path):
    path = tmp_path / "raw_stats.json"
    raw = dict(SOLO_RAW_STATS)
    raw["lastmodified"] = 1700000000
    path.write_text(json.dumps({"accountId": "acc-1", "stats": raw}), encoding="utf-8")
    return path


def _run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestStatsCli:
    """Tests for the stats_cli subcommands."""

    def test_aggregate_table(self, raw_stats_file, capsys):
        assert _run_cli(["aggregate", str(raw_stats_file)]) == 0
        out = capsys.readouterr().out
        assert "Overall" in out
        assert "Battle Royale" in out
        assert "3.33" in out

    def test_aggregate_json_single_mode(self, raw_stats_file, capsys):
        assert _run_cli(["aggregate", str(raw_stats_file), "--mode", "solo", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert list(data["modes"]) == ["Solo"]
        assert data["overall"]["win_rate"] == 40.0

    def test_aggregate_unknown_mode(self, raw_stats_file, capsys):
        assert _run_cli(["aggregate", str(raw_stats_file), "--mode", "creative"]) == 2
        assert "Unknown mode" in capsys.readouterr().out

    def test_aggregate_missing_file(self, tmp_path, capsys):
        assert _run_cli(["aggregate", str(tmp_path / "missing.json")]) == 1
        assert "Input Error" in capsys.readouterr().out

    def test_keys(self, raw_stats_file, capsys):
        assert _run_cli(["keys", str(raw_stats_file)]) == 0
        out = capsys.readouterr().out
        assert "3 parsed, 1 skipped" in out
        assert "skipped" in out

    def test_sweep(self, tmp_path, capsys):
        path = tmp_path / "stats_cache.json"
        path.write_text(json.dumps({
            "acc-1": {"inserted_at": 0, "snapshot": StatsSnapshot().to_dict()},
        }), encoding="utf-8")

        assert _run_cli(["sweep", "--cache-file", str(path)]) == 0
        assert "Loaded 0 entries" in capsys.readouterr().out
        assert json.loads(path.read_text(encoding="utf-8")) == {}
