"""
Season and time window values for windowed stats queries.

The current season is not process-wide state: a SeasonContext is passed
explicitly to any season query, and whoever refreshes it (a scheduler)
owns its lifecycle through a SeasonContextHolder.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open time range [start, end) for provider queries. `end` None means now."""

    start: datetime
    end: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _ensure_utc(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", _ensure_utc(self.end))
            if self.end <= self.start:
                raise ValueError(
                    f"Invalid time window: end {self.end.isoformat()} is not after "
                    f"start {self.start.isoformat()}"
                )

    @property
    def start_timestamp(self) -> int:
        return int(self.start.timestamp())

    @property
    def end_timestamp(self) -> Optional[int]:
        return int(self.end.timestamp()) if self.end is not None else None

    def contains(self, moment: datetime) -> bool:
        moment = _ensure_utc(moment)
        if moment < self.start:
            return False
        return self.end is None or moment < self.end


@dataclass(frozen=True)
class SeasonContext:
    """
    Identity and bounds of a Fortnite season.

    Attributes:
        number: Season number as reported by the season source
        name: Display name, e.g. "Chapter 6 Season 1"
        short_name: Compact label, e.g. "C6S1"
        start: Season start
        end: Season end, or None while the season is running
    """

    number: int
    name: str
    short_name: str
    start: datetime
    end: Optional[datetime] = None

    @property
    def time_window(self) -> TimeWindow:
        return TimeWindow(start=self.start, end=self.end)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "short_name": self.short_name,
            "start": _ensure_utc(self.start).isoformat(),
            "end": _ensure_utc(self.end).isoformat() if self.end else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SeasonContext":
        end = data.get("end")
        return cls(
            number=int(data["number"]),
            name=data["name"],
            short_name=data.get("short_name") or data["name"],
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(end) if end else None,
        )


class SeasonContextHolder:
    """Holds the latest known SeasonContext for whoever refreshes it."""

    def __init__(self, initial: Optional[SeasonContext] = None) -> None:
        self._current: Optional[SeasonContext] = initial
        self._updated_at: Optional[datetime] = (
            datetime.now(timezone.utc) if initial is not None else None
        )

    @property
    def current(self) -> Optional[SeasonContext]:
        return self._current

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    def update(self, season: SeasonContext) -> bool:
        """Replace the current season. Returns True if the season changed."""
        changed = self._current != season
        self._current = season
        self._updated_at = datetime.now(timezone.utc)
        return changed
