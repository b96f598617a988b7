"""
Composite mode builder.

Runs after the base aggregation pass has finished. Each composite sums
the counters of its source modes field by field; missing sources count
as zero and a composite without any matches is left out entirely.
"""

from __future__ import annotations

import logging

from typing import Dict, Mapping, Union

from libs.stats_engine.derived import derive_mode_stats
from libs.stats_engine.models import COUNTER_FIELDS, ModeStats
from libs.stats_engine.modes import ModeDefinition, ModeRegistry

logger = logging.getLogger(__name__)


def sum_source_counters(
    definition: ModeDefinition,
    base_counters: Mapping[str, Mapping[str, Union[int, float]]],
) -> Dict[str, Union[int, float]]:
    totals: Dict[str, Union[int, float]] = {name: 0 for name in COUNTER_FIELDS}
    for source in definition.composed_of:
        counters = base_counters.get(source)
        if counters is None:
            continue
        for name in COUNTER_FIELDS:
            totals[name] += counters.get(name, 0)
    return totals


def build_composite_modes(
    base_counters: Mapping[str, Mapping[str, Union[int, float]]],
    registry: ModeRegistry,
) -> Dict[str, ModeStats]:
    """
    Build every composite mode of the registry from finished base counters.

    Args:
        base_counters: Base mode counters keyed by display name
        registry: Registry holding the composite definitions

    Returns:
        Composite ModeStats keyed by display name, only for composites with matches
    """
    composites: Dict[str, ModeStats] = {}
    for definition in registry.composites:
        totals = sum_source_counters(definition, base_counters)
        if totals["matches"] <= 0:
            logger.debug(f"Omitting composite mode {definition.display_name!r}: no matches")
            continue
        composites[definition.display_name] = derive_mode_stats(totals)
    return composites
