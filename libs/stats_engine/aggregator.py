"""
Aggregation of raw provider counters into a StatsSnapshot.

Single pass over the raw map: each recognised key is classified into a
mode and its value is added to that mode and to the overall totals in the
same step. Input devices are not part of the grouping. Derived ratios are
computed only once every key has been accumulated, then composite modes
are built from the finished base modes.
"""

from __future__ import annotations

import logging

from typing import Dict, Tuple, Union

from libs.stats_engine.composites import build_composite_modes
from libs.stats_engine.derived import derive_mode_stats
from libs.stats_engine.models import COUNTER_FIELDS, RawCounterMap, StatsSnapshot
from libs.stats_engine.modes import ModeRegistry
from libs.stats_engine.stat_keys import parse_stat_key

logger = logging.getLogger(__name__)

Counters = Dict[str, Union[int, float]]


def new_counters() -> Counters:
    return {name: 0 for name in COUNTER_FIELDS}


def accumulate_raw_stats(
    raw_stats: RawCounterMap,
    registry: ModeRegistry,
) -> Tuple[Counters, Dict[str, Counters]]:
    """
    Accumulate raw counters into overall and per-mode totals.

    Returns:
        Tuple of (overall counters, counters keyed by mode display name)
    """
    overall = new_counters()
    modes: Dict[str, Counters] = {}
    skipped = 0

    for key, value in raw_stats.items():
        parsed = parse_stat_key(key, value)
        if parsed is None:
            skipped += 1
            continue

        mode_name = registry.classify_display_name(parsed.playlist)
        mode_counters = modes.get(mode_name)
        if mode_counters is None:
            mode_counters = modes[mode_name] = new_counters()

        mode_counters[parsed.stat_kind] += parsed.value
        overall[parsed.stat_kind] += parsed.value

    if skipped:
        logger.debug(f"Skipped {skipped} of {len(raw_stats)} raw stat keys")

    return overall, modes


def aggregate_raw_stats(raw_stats: RawCounterMap, registry: ModeRegistry) -> StatsSnapshot:
    """
    Turn a raw provider counter map into a StatsSnapshot.

    Args:
        raw_stats: Flat mapping of provider keys to counter values
        registry: Mode registry used for classification and composites

    Returns:
        StatsSnapshot with overall totals, base modes and non-empty composites
    """
    overall_counters, mode_counters = accumulate_raw_stats(raw_stats, registry)

    modes = {name: derive_mode_stats(counters) for name, counters in mode_counters.items()}
    modes.update(build_composite_modes(mode_counters, registry))

    return StatsSnapshot(overall=derive_mode_stats(overall_counters), modes=modes)
