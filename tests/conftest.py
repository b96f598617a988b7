"""
Shared pytest fixtures for the stats bot tests.
"""

from __future__ import annotations

import asyncio

from typing import Any, Dict, List, Optional, Tuple

import pytest

from libs.stats_engine import ModeRegistry, TimeWindow, load_mode_registry
from apps.fortnite_stats_bot.common.stats_cache import StatsCacheStore


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider:
    """
    Stats provider returning canned results per account.

    A result that is an exception instance is raised instead of returned.
    When `gate` is set, every fetch waits on it before answering.
    """

    def __init__(self, results: Optional[Dict[str, Any]] = None) -> None:
        self.results: Dict[str, Any] = dict(results or {})
        self.calls: List[Tuple[str, Optional[TimeWindow]]] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch_raw_stats(self, account_id: str, time_window: Optional[TimeWindow] = None):
        self.calls.append((account_id, time_window))
        if self.gate is not None:
            await self.gate.wait()
        result = self.results.get(account_id)
        if isinstance(result, BaseException):
            raise result
        return result


SOLO_RAW_STATS = {
    "br_placetop1_keyboardmouse_m0_playlist_defaultsolo": 2,
    "br_kills_keyboardmouse_m0_playlist_defaultsolo": 10,
    "br_matchesplayed_keyboardmouse_m0_playlist_defaultsolo": 5,
}


@pytest.fixture
def registry() -> ModeRegistry:
    return load_mode_registry()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> StatsCacheStore:
    return StatsCacheStore(serving_ttl=300, retention_ttl=3600, max_entries=1000, clock=clock)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider({"acc-1": dict(SOLO_RAW_STATS)})
