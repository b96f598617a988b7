"""
Stats service used by the bot commands.

Checks the snapshot cache, falls back to the provider plus aggregation
on a miss, and writes successful lifetime results through the cache.
Time-windowed (season) queries bypass the cache in both directions since
a single account key cannot hold results for every window.

Concurrent misses for the same account share a single provider fetch.
"""

from __future__ import annotations

import asyncio
import logging
import time

from functools import partial
from typing import Dict, List, Optional, Tuple, Union

from libs.stats_engine import (
    ModeRegistry,
    ModeStats,
    PRIVATE_STATS,
    PrivateStats,
    SeasonContext,
    StatsResult,
    StatsSnapshot,
    TimeWindow,
    aggregate_raw_stats,
    load_mode_registry,
)

from apps.fortnite_stats_bot.bot_config import StatsBotConfig, get_bot_config
from apps.fortnite_stats_bot.common.constants import TOP_MODES_LIMIT
from apps.fortnite_stats_bot.common.logging import log_stats_completion, log_stats_request
from apps.fortnite_stats_bot.common.shared import top_modes
from apps.fortnite_stats_bot.common.stats_cache import StatsCacheStore
from apps.fortnite_stats_bot.common.validation import validate_account_id
from apps.fortnite_stats_bot.services.provider import StatsPrivateError, StatsProvider

logger = logging.getLogger(__name__)


def _describe_window(time_window: Optional[TimeWindow]) -> Optional[str]:
    if time_window is None:
        return None
    end = time_window.end.isoformat() if time_window.end else "now"
    return f"{time_window.start.isoformat()}..{end}"


def _describe_result(result: StatsResult) -> str:
    if result is None:
        return "NO_DATA"
    if isinstance(result, PrivateStats):
        return "PRIVATE"
    return "SUCCESS"


class StatsService:
    """
    Entry point for stats lookups.

    Args:
        provider: Fetches raw counter maps from Epic
        registry: Mode registry used for aggregation
        cache: Snapshot cache shared by every lookup
    """

    def __init__(
        self,
        provider: StatsProvider,
        registry: ModeRegistry,
        cache: StatsCacheStore,
    ) -> None:
        self.provider = provider
        self.registry = registry
        self.cache = cache
        self._inflight: Dict[str, "asyncio.Future[StatsResult]"] = {}

    async def get_stats(
        self,
        account_id: str,
        time_window: Optional[TimeWindow] = None,
    ) -> StatsResult:
        """
        Get the aggregated stats of an account.

        Args:
            account_id: Epic account ID
            time_window: Optional window; windowed results are never cached

        Returns:
            StatsSnapshot, None when the provider has no data, or PRIVATE_STATS

        Raises:
            ValueError: If account_id is empty
            Exception: Provider failures are propagated unchanged
        """
        account_id = validate_account_id(account_id)
        start_time = time.time()
        window_param = _describe_window(time_window)
        log_stats_request("get_stats", account_id, time_window=window_param)

        cache_status = "bypass"
        try:
            if time_window is not None:
                result = await self._fetch_and_aggregate(account_id, time_window)
            else:
                cached = self.cache.get(account_id)
                if cached is not None:
                    log_stats_completion("get_stats", account_id, start_time, "SUCCESS", cache="hit")
                    return cached
                cache_status = "miss"
                result = await self._fetch_coalesced(account_id)
        except Exception:
            log_stats_completion(
                "get_stats", account_id, start_time, "FAILED",
                cache=cache_status, kwargs={"time_window": window_param},
            )
            raise

        log_stats_completion(
            "get_stats", account_id, start_time, _describe_result(result),
            cache=cache_status, kwargs={"time_window": window_param},
        )
        return result

    async def get_season_stats(self, account_id: str, season: SeasonContext) -> StatsResult:
        """Get stats restricted to a season; always fetched from the provider."""
        return await self.get_stats(account_id, time_window=season.time_window)

    async def get_mode_stats(
        self,
        account_id: str,
        mode_key: str,
        time_window: Optional[TimeWindow] = None,
    ) -> Union[ModeStats, PrivateStats, None]:
        """
        Get the stats of one mode by registry id.

        Returns:
            The mode's ModeStats, None for an unknown mode, no data, or a mode
            the player never played, or PRIVATE_STATS
        """
        definition = self.registry.get(mode_key.strip().lower())
        if definition is None:
            logger.info(f"Unknown mode requested: {mode_key!r}")
            return None

        result = await self.get_stats(account_id, time_window=time_window)
        if not isinstance(result, StatsSnapshot):
            return result
        return result.get_mode(definition.display_name)

    def invalidate(self, account_id: str) -> bool:
        """Drop the cached snapshot of an account. Returns True if one was stored."""
        account_id = validate_account_id(account_id)
        removed = self.cache.delete(account_id)
        if removed:
            logger.info(f"Invalidated cached stats for account {account_id}")
        return removed

    def run_maintenance(self) -> int:
        """Sweep entries past the retention TTL. Returns the number removed."""
        removed = self.cache.sweep()
        logger.info(f"Maintenance: {removed} stats cache entries removed")
        return removed

    def available_modes(self) -> List[Dict[str, str]]:
        """Mode choices in registry order, as {"name": display name, "value": id}."""
        return [
            {"name": definition.display_name, "value": definition.id}
            for definition in self.registry
        ]

    def favourite_modes(
        self,
        snapshot: StatsSnapshot,
        limit: int = TOP_MODES_LIMIT,
    ) -> List[Tuple[str, ModeStats]]:
        """Most played base modes of a snapshot."""
        composite_names = [definition.display_name for definition in self.registry.composites]
        return top_modes(snapshot, limit=limit, exclude=composite_names)

    async def _fetch_coalesced(self, account_id: str) -> StatsResult:
        task = self._inflight.get(account_id)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(account_id))
            self._inflight[account_id] = task
            task.add_done_callback(partial(self._clear_inflight, account_id))
        else:
            logger.debug(f"Joining in-flight stats fetch for account {account_id}")
        # Shielded so one cancelled caller does not cancel the fetch for the others
        return await asyncio.shield(task)

    def _clear_inflight(self, account_id: str, task: "asyncio.Future[StatsResult]") -> None:
        if not task.cancelled():
            # Retrieve the exception even when every waiter was cancelled
            task.exception()
        if self._inflight.get(account_id) is task:
            del self._inflight[account_id]

    async def _fetch_and_store(self, account_id: str) -> StatsResult:
        result = await self._fetch_and_aggregate(account_id, None)
        if isinstance(result, StatsSnapshot):
            self.cache.put(account_id, result)
        return result

    async def _fetch_and_aggregate(
        self,
        account_id: str,
        time_window: Optional[TimeWindow],
    ) -> StatsResult:
        try:
            raw_stats = await self.provider.fetch_raw_stats(account_id, time_window=time_window)
        except StatsPrivateError:
            return PRIVATE_STATS

        if isinstance(raw_stats, PrivateStats):
            return PRIVATE_STATS
        if not raw_stats:
            return None
        return aggregate_raw_stats(raw_stats, self.registry)


def create_stats_service(
    provider: StatsProvider,
    config: Optional[StatsBotConfig] = None,
    clock=time.time,
) -> StatsService:
    """
    Build a StatsService from configuration and restore the persisted cache.

    Args:
        provider: Stats provider implementation
        config: Bot configuration; defaults to the environment singleton
        clock: Time source for the cache
    """
    config = config or get_bot_config()
    registry = load_mode_registry(config.game_modes_file)
    cache = StatsCacheStore(
        serving_ttl=config.serving_ttl_seconds,
        retention_ttl=config.retention_ttl_seconds,
        max_entries=config.cache_max_entries,
        clock=clock,
        persist_path=config.stats_cache_file,
    )
    cache.load_from_disk()
    logger.info(f"Created stats service with {registry!r} and {config!r}")
    return StatsService(provider, registry, cache)
