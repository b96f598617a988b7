"""
Stats provider interface.

The provider is the collaborator that talks to Epic: it owns device auth,
HTTP transport and the response wire format. The stats service only needs
the flat counter map it produces.
"""

from __future__ import annotations

from typing import Optional, Protocol, Union

from libs.stats_engine import PrivateStats, RawCounterMap, TimeWindow


class StatsPrivateError(Exception):
    """Raised by a provider when the player's stats are hidden."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Stats for account {account_id} are private")
        self.account_id = account_id


ProviderResult = Union[RawCounterMap, PrivateStats, None]


class StatsProvider(Protocol):
    """Anything that can fetch raw Battle Royale counters for an account."""

    async def fetch_raw_stats(
        self,
        account_id: str,
        time_window: Optional[TimeWindow] = None,
    ) -> ProviderResult:
        """
        Fetch the raw counter map for an account.

        Returns:
            The raw counter map, None when there is no data, or PRIVATE_STATS
            (alternatively raise StatsPrivateError) when the stats are hidden.
            Transport errors propagate to the caller.
        """
        ...
