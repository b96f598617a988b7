"""
In-memory stats snapshot cache with JSON persistence.

Every entry goes through three states as it ages:
- fresh (age < serving TTL): returned by get()
- stale (serving TTL <= age < retention TTL): still stored, get() misses
- purged (age >= retention TTL): removed by the next sweep()

get() never deletes anything; only sweep(), delete() and an overwriting
put() remove or replace entries.
"""

from __future__ import annotations

import json
import logging
import time

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

from cachetools import LRUCache

from libs.stats_engine import StatsSnapshot

logger = logging.getLogger(__name__)

DEFAULT_SERVING_TTL_SECONDS = 300
DEFAULT_RETENTION_TTL_SECONDS = 3600
DEFAULT_MAX_ENTRIES = 100000


@dataclass(frozen=True)
class CacheEntry:
    """A stored snapshot and the wall-clock time it was inserted."""

    key: str
    snapshot: StatsSnapshot
    inserted_at: float


class StatsCacheStore:
    """
    Snapshot cache with separate serving and retention horizons.

    Args:
        serving_ttl: Seconds during which an entry is served as a hit
        retention_ttl: Seconds after which sweep() removes an entry
        max_entries: Bound of the underlying LRU store
        clock: Returns the current time in seconds
        persist_path: JSON file used by save_to_disk() / load_from_disk()
    """

    def __init__(
        self,
        serving_ttl: float = DEFAULT_SERVING_TTL_SECONDS,
        retention_ttl: float = DEFAULT_RETENTION_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
        persist_path: Optional[Path] = None,
    ) -> None:
        if serving_ttl <= 0:
            raise ValueError(f"serving_ttl must be > 0, got {serving_ttl}")
        if retention_ttl < serving_ttl:
            raise ValueError(
                f"retention_ttl ({retention_ttl}) must be >= serving_ttl ({serving_ttl})"
            )
        self.serving_ttl = serving_ttl
        self.retention_ttl = retention_ttl
        self.persist_path = persist_path
        self._clock = clock
        self._entries: LRUCache[str, CacheEntry] = LRUCache(maxsize=max_entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def _age(self, entry: CacheEntry, now: float) -> float:
        return now - entry.inserted_at

    def get(self, key: str) -> Optional[StatsSnapshot]:
        """Return the snapshot if it is fresh, else None. Never mutates storage."""
        try:
            entry = self._entries.get(key)
        except TypeError:
            logger.warning(f"Unusable stats cache key {key!r}, treating as a miss")
            return None
        if entry is None:
            return None
        if self._age(entry, self._clock()) < self.serving_ttl:
            return entry.snapshot
        return None

    def put(self, key: str, snapshot: StatsSnapshot) -> None:
        """Store a snapshot as fresh, overwriting any existing entry for the key."""
        try:
            self._entries[key] = CacheEntry(key=key, snapshot=snapshot, inserted_at=self._clock())
        except TypeError:
            logger.warning(f"Unusable stats cache key {key!r}, snapshot not stored")

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if one was stored."""
        try:
            return self._entries.pop(key, None) is not None
        except TypeError:
            logger.warning(f"Unusable stats cache key {key!r}, nothing to delete")
            return False

    def peek_retained(self, key: str) -> Optional[CacheEntry]:
        """Return the entry while it is retained, whether fresh or stale."""
        try:
            entry = self._entries.get(key)
        except TypeError:
            return None
        if entry is None:
            return None
        if self._age(entry, self._clock()) >= self.retention_ttl:
            return None
        return entry

    def retained_items(self) -> Iterator[Tuple[str, CacheEntry]]:
        """Iterate over entries that have not reached the retention TTL."""
        now = self._clock()
        for key, entry in list(self._entries.items()):
            if self._age(entry, now) < self.retention_ttl:
                yield key, entry

    def sweep(self) -> int:
        """Delete every entry whose age is >= the retention TTL. Returns the count removed."""
        now = self._clock()
        removed = 0
        for key, entry in list(self._entries.items()):
            if self._age(entry, now) < self.retention_ttl:
                continue
            # Only drop the entry that was inspected; a concurrent put() replaced it otherwise
            if self._entries.get(key) is entry:
                del self._entries[key]
                removed += 1
        if removed:
            logger.info(f"Stats cache sweep removed {removed} expired entries ({len(self._entries)} remaining)")
        return removed

    def clear(self) -> None:
        self._entries.clear()

    # =========================================================================
    # Persistence
    # =========================================================================

    def save_to_disk(self, path: Optional[Path] = None) -> bool:
        """Persist retained entries atomically. Returns False if the write failed."""
        target = path or self.persist_path
        if target is None:
            return False

        data = {
            key: {"inserted_at": entry.inserted_at, "snapshot": entry.snapshot.to_dict()}
            for key, entry in self.retained_items()
        }
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            temp_file = target.with_suffix('.json.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f)
            temp_file.replace(target)
            logger.info(f"Saved {len(data)} cached stats snapshots")
            return True
        except (IOError, OSError) as e:
            logger.error(f"Failed to save stats cache to {target}: {e}", exc_info=True)
            return False

    def load_from_disk(self, path: Optional[Path] = None) -> int:
        """Load persisted entries, skipping those past retention. Returns the count loaded."""
        source = path or self.persist_path
        if source is None:
            return 0
        if not source.exists():
            logger.info(f"Stats cache file not found at {source}, starting with empty cache")
            return 0

        try:
            with open(source, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("Expected a JSON object of cache entries")

            now = self._clock()
            loaded = {}
            for key, raw_entry in data.items():
                inserted_at = float(raw_entry["inserted_at"])
                if now - inserted_at >= self.retention_ttl:
                    continue
                loaded[key] = CacheEntry(
                    key=key,
                    snapshot=StatsSnapshot.from_dict(raw_entry["snapshot"]),
                    inserted_at=inserted_at,
                )
        except (json.JSONDecodeError, ValueError, KeyError, TypeError, AttributeError, IOError) as e:
            logger.warning(f"Failed to load stats cache from {source}: {e}. Starting with empty cache.")
            return 0

        for key, entry in loaded.items():
            self._entries[key] = entry
        logger.info(f"Loaded {len(loaded)} cached stats snapshots from cache file")
        return len(loaded)
