"""
Tests for the stats service: caching, privacy, windows and single-flight.
"""

from __future__ import annotations

import asyncio
import gc

from datetime import datetime, timezone

import pytest

from libs.stats_engine import PRIVATE_STATS, SeasonContext, StatsSnapshot, TimeWindow
from apps.fortnite_stats_bot.bot_config import StatsBotConfig
from apps.fortnite_stats_bot.services.provider import StatsPrivateError
from apps.fortnite_stats_bot.services.stats_service import StatsService, create_stats_service

from tests.conftest import FakeProvider, SOLO_RAW_STATS


@pytest.fixture
def service(provider, registry, cache) -> StatsService:
    return StatsService(provider, registry, cache)


SEASON = SeasonContext(
    number=33,
    name="Chapter 6 Season 1",
    short_name="C6S1",
    start=datetime(2024, 12, 1, tzinfo=timezone.utc),
    end=datetime(2025, 2, 21, tzinfo=timezone.utc),
)


class TestGetStats:
    """Tests for cache-aside lifetime lookups."""

    def test_miss_fetches_and_caches(self, service, provider, cache):
        result = asyncio.run(service.get_stats("acc-1"))

        assert isinstance(result, StatsSnapshot)
        assert result.modes["Solo"].kd == 3.33
        assert provider.calls == [("acc-1", None)]
        assert cache.get("acc-1") is result

    def test_fresh_hit_skips_provider(self, service, provider):
        first = asyncio.run(service.get_stats("acc-1"))
        second = asyncio.run(service.get_stats("acc-1"))

        assert second is first
        assert len(provider.calls) == 1

    def test_stale_entry_is_refetched(self, service, provider, clock):
        first = asyncio.run(service.get_stats("acc-1"))
        clock.advance(300)
        second = asyncio.run(service.get_stats("acc-1"))

        assert len(provider.calls) == 2
        assert second == first
        assert second is not first

    def test_account_id_is_stripped(self, service, provider):
        asyncio.run(service.get_stats("  acc-1 "))
        assert provider.calls == [("acc-1", None)]

    def test_empty_account_id_rejected(self, service):
        with pytest.raises(ValueError):
            asyncio.run(service.get_stats("   "))

    def test_no_data_is_not_cached(self, service, provider, cache):
        provider.results["acc-2"] = {}
        assert asyncio.run(service.get_stats("acc-2")) is None
        assert asyncio.run(service.get_stats("acc-3")) is None
        assert "acc-2" not in cache
        assert "acc-3" not in cache

    def test_private_sentinel_is_passed_through(self, service, provider, cache):
        provider.results["acc-2"] = PRIVATE_STATS
        result = asyncio.run(service.get_stats("acc-2"))

        assert result is PRIVATE_STATS
        assert result.private is True
        assert "acc-2" not in cache

    def test_private_error_becomes_sentinel(self, service, provider, cache):
        provider.results["acc-2"] = StatsPrivateError("acc-2")
        assert asyncio.run(service.get_stats("acc-2")) is PRIVATE_STATS
        asyncio.run(service.get_stats("acc-2"))
        assert len(provider.calls) == 2

    def test_provider_errors_propagate(self, service, provider, cache):
        provider.results["acc-2"] = ConnectionError("epic down")
        with pytest.raises(ConnectionError, match="epic down"):
            asyncio.run(service.get_stats("acc-2"))
        assert "acc-2" not in cache
        assert service._inflight == {}


class TestWindowedQueries:
    """Tests for time-windowed lookups, which bypass the cache."""

    def test_window_bypasses_cache(self, service, provider, cache):
        window = TimeWindow(start=datetime(2025, 1, 1, tzinfo=timezone.utc))
        asyncio.run(service.get_stats("acc-1"))

        result = asyncio.run(service.get_stats("acc-1", time_window=window))

        assert isinstance(result, StatsSnapshot)
        assert provider.calls[-1] == ("acc-1", window)
        assert len(provider.calls) == 2

    def test_windowed_result_is_not_stored(self, service, provider, cache, registry):
        provider.results["acc-2"] = {"br_kills_gamepad_m0_playlist_defaultsolo": 1}
        window = TimeWindow(start=datetime(2025, 1, 1, tzinfo=timezone.utc))
        asyncio.run(service.get_stats("acc-2", time_window=window))
        assert "acc-2" not in cache

    def test_season_stats_use_season_window(self, service, provider):
        asyncio.run(service.get_season_stats("acc-1", SEASON))
        assert provider.calls == [("acc-1", SEASON.time_window)]


class TestSingleFlight:
    """Tests for coalescing concurrent misses."""

    def test_concurrent_misses_share_one_fetch(self, service, provider, cache):
        async def scenario():
            provider.gate = asyncio.Event()
            tasks = [asyncio.ensure_future(service.get_stats("acc-1")) for _ in range(5)]
            await asyncio.sleep(0)
            provider.gate.set()
            return await asyncio.gather(*tasks)

        results = asyncio.run(scenario())

        assert len(provider.calls) == 1
        assert all(result is results[0] for result in results)
        assert cache.get("acc-1") is results[0]
        assert service._inflight == {}

    def test_failure_reaches_every_waiter(self, service, provider):
        provider.results["acc-2"] = RuntimeError("boom")

        async def scenario():
            provider.gate = asyncio.Event()
            tasks = [asyncio.ensure_future(service.get_stats("acc-2")) for _ in range(3)]
            await asyncio.sleep(0)
            provider.gate.set()
            return await asyncio.gather(*tasks, return_exceptions=True)

        results = asyncio.run(scenario())

        assert len(provider.calls) == 1
        assert all(isinstance(result, RuntimeError) for result in results)

    def test_failure_after_every_waiter_cancelled_is_retrieved(self, service, provider):
        provider.results["acc-2"] = RuntimeError("boom")

        async def scenario():
            errors = []
            asyncio.get_running_loop().set_exception_handler(lambda loop, context: errors.append(context))
            provider.gate = asyncio.Event()
            waiter = asyncio.ensure_future(service.get_stats("acc-2"))
            await asyncio.sleep(0)
            waiter.cancel()
            await asyncio.gather(waiter, return_exceptions=True)
            provider.gate.set()
            while service._inflight:
                await asyncio.sleep(0)
            gc.collect()
            await asyncio.sleep(0)
            return errors

        errors = asyncio.run(scenario())

        assert len(provider.calls) == 1
        assert not [e for e in errors if "never retrieved" in e.get("message", "")]

    def test_different_accounts_fetch_separately(self, service, provider):
        provider.results["acc-2"] = dict(SOLO_RAW_STATS)

        async def scenario():
            return await asyncio.gather(service.get_stats("acc-1"), service.get_stats("acc-2"))

        asyncio.run(scenario())
        assert sorted(call[0] for call in provider.calls) == ["acc-1", "acc-2"]


class TestModeStats:
    """Tests for single mode lookups."""

    def test_known_mode(self, service):
        solo = asyncio.run(service.get_mode_stats("acc-1", "solo"))
        assert solo.wins == 2
        assert solo.win_rate == 40.0

    def test_composite_mode(self, service):
        battle_royale = asyncio.run(service.get_mode_stats("acc-1", "Battle_Royale"))
        assert battle_royale.matches == 5

    def test_unknown_mode_does_not_fetch(self, service, provider):
        assert asyncio.run(service.get_mode_stats("acc-1", "creative")) is None
        assert provider.calls == []

    def test_mode_never_played(self, service):
        assert asyncio.run(service.get_mode_stats("acc-1", "zb_duo")) is None

    def test_private_passes_through(self, service, provider):
        provider.results["acc-2"] = PRIVATE_STATS
        assert asyncio.run(service.get_mode_stats("acc-2", "solo")) is PRIVATE_STATS


class TestMaintenance:
    """Tests for invalidation, sweeping and mode helpers."""

    def test_invalidate_forces_refetch(self, service, provider):
        asyncio.run(service.get_stats("acc-1"))
        assert service.invalidate("acc-1") is True
        assert service.invalidate("acc-1") is False
        asyncio.run(service.get_stats("acc-1"))
        assert len(provider.calls) == 2

    def test_invalidate_strips_account_id(self, service, cache):
        asyncio.run(service.get_stats(" acc-1 "))
        assert service.invalidate(" acc-1 ") is True
        assert "acc-1" not in cache

    def test_cached_snapshot_cannot_be_mutated_by_callers(self, service, provider):
        first = asyncio.run(service.get_stats("acc-1"))
        with pytest.raises(TypeError):
            first.modes["Solo"] = None

        second = asyncio.run(service.get_stats("acc-1"))
        assert list(second.modes) == ["Solo", "Battle Royale"]
        assert len(provider.calls) == 1

    def test_run_maintenance_sweeps_expired(self, service, clock, cache):
        asyncio.run(service.get_stats("acc-1"))
        clock.advance(1800)
        assert service.run_maintenance() == 0
        clock.advance(1800)
        assert service.run_maintenance() == 1
        assert len(cache) == 0

    def test_available_modes_in_registry_order(self, service, registry):
        modes = service.available_modes()
        assert len(modes) == len(registry)
        assert modes[0] == {"name": "Ranked Zero Build", "value": "ranked_zb"}
        assert modes[-1] == {"name": "Zero Build", "value": "zero_build"}

    def test_favourite_modes_exclude_composites(self, service):
        snapshot = asyncio.run(service.get_stats("acc-1"))
        assert [name for name, _ in service.favourite_modes(snapshot)] == ["Solo"]


class TestCreateStatsService:
    """Tests for building the service from configuration."""

    def test_restores_persisted_cache(self, tmp_path, monkeypatch, provider, clock):
        monkeypatch.setenv("STATS_BOT_CACHE_DIR", str(tmp_path))
        monkeypatch.delenv("FORTNITE_GAME_MODES_FILE", raising=False)
        config = StatsBotConfig()

        first = create_stats_service(provider, config=config, clock=clock)
        asyncio.run(first.get_stats("acc-1"))
        first.cache.save_to_disk()

        second = create_stats_service(FakeProvider(), config=config, clock=clock)
        assert isinstance(second.cache.get("acc-1"), StatsSnapshot)
        assert second.cache.persist_path == tmp_path / "stats_cache.json"
