"""
Parsing of raw provider counter keys.

Raw keys look like ``br_kills_keyboardmouse_m0_playlist_defaultsolo``:

    <namespace>_<statKind>_<inputDevice>_<variant>_playlist_<playlistToken>

Only a fixed set of stat kinds is recognised. Anything else yields None
so that unrelated keys in the provider payload are skipped, not rejected.
"""

from __future__ import annotations

import logging
import math
import re

from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

STAT_KEY_PATTERN = re.compile(
    r"^(?P<namespace>[a-z0-9]+)"
    r"_(?P<stat>[a-z0-9]+)"
    r"_(?P<device>[a-z0-9]+)"
    r"_(?P<variant>[a-z0-9]+)"
    r"_playlist_(?P<playlist>[a-z0-9_]+)$"
)

# Provider stat token -> ModeStats counter field
STAT_KIND_MAP = {
    "placetop1": "wins",
    "wins": "wins",
    "kills": "kills",
    "matchesplayed": "matches",
    "minutesplayed": "minutes_played",
    "playersoutlived": "players_outlived",
    "score": "score",
}


@dataclass(frozen=True)
class ParsedStat:
    """One recognised raw counter."""

    stat_kind: str
    input_device: str
    playlist: str
    value: Union[int, float]


def _coerce_value(value: Any) -> Optional[Union[int, float]]:
    """Return a non-negative number, or None if the value is unusable."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            value = int(value)
    if value < 0:
        return None
    return value


def parse_stat_key(key: str, value: Any) -> Optional[ParsedStat]:
    """
    Decompose a raw counter key and its value.

    Args:
        key: Provider key, matched case-insensitively
        value: Counter value; must be a finite, non-negative number

    Returns:
        ParsedStat, or None if the key shape, stat kind or value is not usable
    """
    if not isinstance(key, str):
        return None

    match = STAT_KEY_PATTERN.match(key.strip().lower())
    if match is None:
        logger.debug(f"Skipping unrecognised stat key: {key!r}")
        return None

    stat_kind = STAT_KIND_MAP.get(match.group("stat"))
    if stat_kind is None:
        logger.debug(f"Skipping unsupported stat kind in key: {key!r}")
        return None

    number = _coerce_value(value)
    if number is None:
        logger.debug(f"Skipping stat key {key!r} with invalid value {value!r}")
        return None

    return ParsedStat(
        stat_kind=stat_kind,
        input_device=match.group("device"),
        playlist=match.group("playlist"),
        value=number,
    )
