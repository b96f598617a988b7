"""
Fortnite stats engine for the stats bot project.

This package turns the flat counter map returned by the stats provider
into a structured StatsSnapshot: key parsing, mode classification,
aggregation with derived metrics, and composite modes. It performs no I/O
apart from loading the mode registry file.
"""

from libs.stats_engine.aggregator import aggregate_raw_stats, accumulate_raw_stats
from libs.stats_engine.composites import build_composite_modes
from libs.stats_engine.derived import compute_deaths, compute_kd, compute_win_rate, derive_mode_stats
from libs.stats_engine.models import (
    COUNTER_FIELDS,
    ModeStats,
    PRIVATE_STATS,
    PrivateStats,
    RawCounterMap,
    StatsResult,
    StatsSnapshot,
)
from libs.stats_engine.modes import (
    ModeDefinition,
    ModeRegistry,
    get_default_registry,
    load_mode_registry,
    registry_from_dict,
)
from libs.stats_engine.seasons import SeasonContext, SeasonContextHolder, TimeWindow
from libs.stats_engine.stat_keys import ParsedStat, STAT_KIND_MAP, parse_stat_key

__all__ = [
    # Aggregation
    'aggregate_raw_stats',
    'accumulate_raw_stats',
    'build_composite_modes',
    'compute_deaths',
    'compute_kd',
    'compute_win_rate',
    'derive_mode_stats',
    # Models
    'COUNTER_FIELDS',
    'ModeStats',
    'PRIVATE_STATS',
    'PrivateStats',
    'RawCounterMap',
    'StatsResult',
    'StatsSnapshot',
    # Modes
    'ModeDefinition',
    'ModeRegistry',
    'get_default_registry',
    'load_mode_registry',
    'registry_from_dict',
    # Seasons
    'SeasonContext',
    'SeasonContextHolder',
    'TimeWindow',
    # Key parsing
    'ParsedStat',
    'STAT_KIND_MAP',
    'parse_stat_key',
]
