"""
Derived metrics computed from accumulated counters.

Both ratios have deliberate fallbacks instead of dividing by zero:
kd reports the raw kill count when there are no deaths, and the win
rate is 0 when no matches were played.
"""

from __future__ import annotations

from typing import Mapping, Union

from libs.stats_engine.models import ModeStats

Number = Union[int, float]


def compute_deaths(matches: Number, wins: Number) -> Number:
    """Every match not won counts as one death; clamped at zero."""
    return max(matches - wins, 0)


def compute_kd(kills: Number, deaths: Number) -> Number:
    """Kills per death rounded to 2 decimals, or the kill count when deaths is 0."""
    if deaths > 0:
        return round(kills / deaths, 2)
    return kills


def compute_win_rate(wins: Number, matches: Number) -> Number:
    """Win percentage rounded to 1 decimal, 0 when no matches were played."""
    if matches > 0:
        return round(wins / matches * 100, 1)
    return 0


def derive_mode_stats(counters: Mapping[str, Number]) -> ModeStats:
    """Build a ModeStats from accumulated counters, computing kd and win rate."""
    wins = counters.get("wins", 0)
    kills = counters.get("kills", 0)
    matches = counters.get("matches", 0)

    return ModeStats(
        wins=wins,
        kills=kills,
        matches=matches,
        minutes_played=counters.get("minutes_played", 0),
        players_outlived=counters.get("players_outlived", 0),
        score=counters.get("score", 0),
        kd=compute_kd(kills, compute_deaths(matches, wins)),
        win_rate=compute_win_rate(wins, matches),
    )
