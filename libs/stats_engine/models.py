"""
Data model for aggregated Fortnite statistics.

A StatsSnapshot is built once by the aggregation pipeline and never
patched in place afterwards; the cache stores it as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

# Counters accumulated from raw keys, in display order.
# kd and win_rate are derived from these and never accumulated.
COUNTER_FIELDS = (
    "wins",
    "kills",
    "matches",
    "minutes_played",
    "players_outlived",
    "score",
)

RawCounterMap = Mapping[str, Union[int, float]]


@dataclass(frozen=True)
class ModeStats:
    """Counters and derived ratios for one mode (or for all modes combined)."""

    wins: int = 0
    kills: int = 0
    matches: int = 0
    minutes_played: int = 0
    players_outlived: int = 0
    score: int = 0
    kd: float = 0
    win_rate: float = 0

    @property
    def deaths(self) -> int:
        """Matches not won, clamped at zero when the provider reports more wins than matches."""
        return max(self.matches - self.wins, 0)

    def counters(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTER_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        data = self.counters()
        data["kd"] = self.kd
        data["win_rate"] = self.win_rate
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModeStats":
        return cls(
            wins=data.get("wins", 0),
            kills=data.get("kills", 0),
            matches=data.get("matches", 0),
            minutes_played=data.get("minutes_played", 0),
            players_outlived=data.get("players_outlived", 0),
            score=data.get("score", 0),
            kd=data.get("kd", 0),
            win_rate=data.get("win_rate", 0),
        )


@dataclass(frozen=True)
class StatsSnapshot:
    """
    Fully aggregated statistics for one account at one point in time.

    Attributes:
        overall: Totals across every base mode, accumulated alongside them
        modes: Per-mode stats keyed by display name, base modes first
            followed by any composite modes that had matches
    """

    overall: ModeStats = field(default_factory=ModeStats)
    modes: Mapping[str, ModeStats] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Cached snapshots are shared between callers; modes stay read-only
        object.__setattr__(self, "modes", MappingProxyType(dict(self.modes)))

    def get_mode(self, display_name: str) -> ModeStats | None:
        return self.modes.get(display_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall.to_dict(),
            "modes": {name: stats.to_dict() for name, stats in self.modes.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatsSnapshot":
        modes = data.get("modes") or {}
        return cls(
            overall=ModeStats.from_dict(data.get("overall") or {}),
            modes={name: ModeStats.from_dict(stats) for name, stats in modes.items()},
        )


@dataclass(frozen=True)
class PrivateStats:
    """Result returned when the player has hidden their statistics."""

    private: bool = True


# Shared instance; callers compare with `is PRIVATE_STATS` or check `.private`
PRIVATE_STATS = PrivateStats()

StatsResult = Union[StatsSnapshot, PrivateStats, None]
