"""
Game mode registry and playlist classification.

The registry is an ordered, versioned list of immutable mode definitions
loaded once at startup. Classification is a linear scan over the base
(pattern) definitions: the first definition with a pattern contained in
the playlist token wins. Composite definitions are never matched against
playlists; they are resolved after aggregation from other modes.
"""

from __future__ import annotations

import json
import logging

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from libs.fortnite_data import GAME_MODES_PATH

logger = logging.getLogger(__name__)

SUPPORTED_REGISTRY_VERSIONS = {1}


@dataclass(frozen=True)
class ModeDefinition:
    """
    A single game mode.

    Exactly one of `patterns` (base mode) or `composed_of` (composite mode)
    is non-empty.
    """

    id: str
    display_name: str
    patterns: Tuple[str, ...] = ()
    composed_of: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.id or not self.display_name:
            raise ValueError("Mode definitions need a non-empty id and display_name")
        if self.patterns and self.composed_of:
            raise ValueError(
                f"Mode {self.id!r} cannot define both patterns and composed_of"
            )
        if not self.patterns and not self.composed_of:
            raise ValueError(
                f"Mode {self.id!r} must define either patterns or composed_of"
            )
        if any(not pattern for pattern in self.patterns):
            raise ValueError(f"Mode {self.id!r} has an empty pattern")

    @property
    def is_composite(self) -> bool:
        return bool(self.composed_of)

    def matches(self, playlist: str) -> bool:
        return any(pattern in playlist for pattern in self.patterns)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModeDefinition":
        return cls(
            id=data.get("id", ""),
            display_name=data.get("display_name", ""),
            patterns=tuple(p.lower() for p in data.get("patterns") or ()),
            composed_of=tuple(data.get("composed_of") or ()),
        )


class ModeRegistry:
    """Ordered collection of mode definitions."""

    def __init__(self, definitions: Iterable[ModeDefinition], version: int = 1) -> None:
        self.version = version
        self._definitions: Tuple[ModeDefinition, ...] = tuple(definitions)
        self._by_id: Dict[str, ModeDefinition] = {}
        self._by_name: Dict[str, ModeDefinition] = {}

        for definition in self._definitions:
            if definition.id in self._by_id:
                raise ValueError(f"Duplicate mode id: {definition.id!r}")
            if definition.display_name in self._by_name:
                raise ValueError(f"Duplicate mode display name: {definition.display_name!r}")
            self._by_id[definition.id] = definition
            self._by_name[definition.display_name] = definition

        # Composites are summed from base modes only
        for definition in self.composites:
            for source in definition.composed_of:
                source_definition = self._by_name.get(source)
                if source_definition is None:
                    raise ValueError(
                        f"Composite mode {definition.id!r} references unknown mode {source!r}"
                    )
                if source_definition.is_composite:
                    raise ValueError(
                        f"Composite mode {definition.id!r} cannot be built from "
                        f"composite mode {source!r}"
                    )

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"ModeRegistry(version={self.version}, modes={len(self._definitions)})"

    @property
    def definitions(self) -> Tuple[ModeDefinition, ...]:
        return self._definitions

    @property
    def base_modes(self) -> List[ModeDefinition]:
        return [d for d in self._definitions if not d.is_composite]

    @property
    def composites(self) -> List[ModeDefinition]:
        return [d for d in self._definitions if d.is_composite]

    def get(self, mode_id: str) -> Optional[ModeDefinition]:
        return self._by_id.get(mode_id)

    def get_by_display_name(self, display_name: str) -> Optional[ModeDefinition]:
        return self._by_name.get(display_name)

    def classify(self, playlist: str) -> Optional[ModeDefinition]:
        """Return the first base definition matching the playlist token, or None."""
        token = playlist.lower()
        for definition in self._definitions:
            if definition.is_composite:
                continue
            if definition.matches(token):
                return definition
        return None

    def classify_display_name(self, playlist: str) -> str:
        """
        Return the display bucket for a playlist token.

        Unclassified playlists are bucketed under the token itself.
        """
        definition = self.classify(playlist)
        if definition is None:
            return playlist
        return definition.display_name


def registry_from_dict(data: Mapping[str, Any]) -> ModeRegistry:
    """Build a registry from its JSON document form."""
    version = data.get("version")
    if version not in SUPPORTED_REGISTRY_VERSIONS:
        raise ValueError(
            f"Unsupported mode registry version: {version!r}. "
            f"Supported: {', '.join(str(v) for v in sorted(SUPPORTED_REGISTRY_VERSIONS))}"
        )

    modes = data.get("modes")
    if not isinstance(modes, list):
        raise ValueError("Expected `modes` to be a list")

    return ModeRegistry((ModeDefinition.from_dict(entry) for entry in modes), version=version)


def load_mode_registry(path: Optional[Union[str, Path]] = None) -> ModeRegistry:
    """
    Load the mode registry from a JSON file.

    Args:
        path: Registry file; defaults to the bundled game_modes.json

    Raises:
        ValueError: If the file is not a valid registry
        OSError: If the file cannot be read
    """
    registry_path = Path(path) if path else GAME_MODES_PATH

    try:
        data = json.loads(registry_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid mode registry JSON in {registry_path}: {e}") from e

    registry = registry_from_dict(data)
    logger.info(
        f"Loaded {len(registry.base_modes)} base and {len(registry.composites)} composite "
        f"modes from {registry_path} (version {registry.version})"
    )
    return registry


_default_registry: Optional[ModeRegistry] = None


def get_default_registry() -> ModeRegistry:
    """Get or load the singleton registry from the bundled data file."""
    global _default_registry
    if _default_registry is None:
        _default_registry = load_mode_registry()
    return _default_registry
