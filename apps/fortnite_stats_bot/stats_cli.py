"""
Operator CLI for inspecting raw stats and maintaining the stats cache.

Usage:
    # Aggregate a raw counter map dumped from the provider
    python -m apps.fortnite_stats_bot.stats_cli aggregate raw_stats.json

    # Show a single mode, or the full snapshot as JSON
    python -m apps.fortnite_stats_bot.stats_cli aggregate raw_stats.json --mode zero_build
    python -m apps.fortnite_stats_bot.stats_cli aggregate raw_stats.json --json

    # Show how every raw key parses and classifies
    python -m apps.fortnite_stats_bot.stats_cli keys raw_stats.json

    # Sweep the persisted stats cache
    python -m apps.fortnite_stats_bot.stats_cli sweep
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pathlib import Path
from typing import Any, Dict, List, Optional

from tabulate import tabulate

from libs.stats_engine import (
    ModeRegistry,
    StatsSnapshot,
    aggregate_raw_stats,
    load_mode_registry,
    parse_stat_key,
)

from apps.fortnite_stats_bot.bot_config import get_bot_config
from apps.fortnite_stats_bot.common.shared import format_playtime
from apps.fortnite_stats_bot.common.stats_cache import StatsCacheStore

logger = logging.getLogger(__name__)


def load_raw_stats(path: Path) -> Dict[str, Any]:
    """
    Read a raw counter map from a JSON file.

    Accepts either the flat map itself or a provider response with the map
    under a "stats" key.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict) and isinstance(data.get("stats"), dict):
        data = data["stats"]
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object of raw stats in {path}")
    return data


def format_snapshot_table(snapshot: StatsSnapshot, mode_names: Optional[List[str]] = None) -> str:
    """Render the overall row plus per-mode rows as a github table."""
    headers = ["Mode", "Matches", "Wins", "Win %", "Kills", "K/D", "Playtime"]
    rows = [("Overall", snapshot.overall)]
    names = mode_names if mode_names is not None else list(snapshot.modes)
    rows.extend((name, snapshot.modes[name]) for name in names if name in snapshot.modes)

    table_data = [
        [
            name,
            f"{stats.matches:,}",
            f"{stats.wins:,}",
            f"{stats.win_rate:.1f}",
            f"{stats.kills:,}",
            f"{stats.kd:.2f}",
            format_playtime(stats.minutes_played),
        ]
        for name, stats in rows
    ]
    return tabulate(table_data, headers=headers, tablefmt="github")


def run_aggregate(registry: ModeRegistry, path: Path, mode: Optional[str], as_json: bool) -> int:
    raw_stats = load_raw_stats(path)
    snapshot = aggregate_raw_stats(raw_stats, registry)

    mode_names = None
    if mode:
        definition = registry.get(mode.strip().lower())
        if definition is None:
            valid = ", ".join(d.id for d in registry)
            print(f"Unknown mode: {mode}. Valid options: {valid}")
            return 2
        if definition.display_name not in snapshot.modes:
            print(f"No matches played in {definition.display_name}")
            return 1
        mode_names = [definition.display_name]

    if as_json:
        data = snapshot.to_dict()
        if mode_names is not None:
            data["modes"] = {name: data["modes"][name] for name in mode_names}
        print(json.dumps(data, indent=2))
    else:
        print(format_snapshot_table(snapshot, mode_names))
    return 0


def run_keys(registry: ModeRegistry, path: Path) -> int:
    raw_stats = load_raw_stats(path)

    table_data = []
    skipped = 0
    for key, value in raw_stats.items():
        parsed = parse_stat_key(key, value)
        if parsed is None:
            skipped += 1
            table_data.append([key, value, "-", "-", "skipped"])
            continue
        definition = registry.classify(parsed.playlist)
        bucket = definition.display_name if definition else f"{parsed.playlist} (unclassified)"
        table_data.append([key, value, parsed.stat_kind, parsed.input_device, bucket])

    headers = ["Key", "Value", "Stat", "Device", "Mode"]
    print(tabulate(table_data, headers=headers, tablefmt="github"))
    print(f"\n{len(raw_stats) - skipped} parsed, {skipped} skipped")
    return 0


def run_sweep(cache_file: Optional[Path]) -> int:
    config = get_bot_config()
    cache = StatsCacheStore(
        serving_ttl=config.serving_ttl_seconds,
        retention_ttl=config.retention_ttl_seconds,
        max_entries=config.cache_max_entries,
        persist_path=cache_file or config.stats_cache_file,
    )
    loaded = cache.load_from_disk()
    removed = cache.sweep()
    if not cache.save_to_disk():
        print(f"Failed to write {cache.persist_path}")
        return 1
    print(f"Loaded {loaded} entries, removed {removed}, {len(cache)} remaining")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(
        description="Inspect raw Fortnite stats and maintain the stats cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m apps.fortnite_stats_bot.stats_cli aggregate raw_stats.json
  python -m apps.fortnite_stats_bot.stats_cli aggregate raw_stats.json --mode solo --json
  python -m apps.fortnite_stats_bot.stats_cli keys raw_stats.json
  python -m apps.fortnite_stats_bot.stats_cli sweep
        """,
    )
    parser.add_argument(
        "--game-modes-file",
        type=Path,
        help="Mode registry file (defaults to FORTNITE_GAME_MODES_FILE or the bundled file)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    aggregate_parser = subparsers.add_parser("aggregate", help="Aggregate a raw counter JSON file")
    aggregate_parser.add_argument("file", type=Path, help="JSON file with the raw counter map")
    aggregate_parser.add_argument("--mode", help="Only show this mode id")
    aggregate_parser.add_argument("--json", action="store_true", help="Print the snapshot as JSON")

    keys_parser = subparsers.add_parser("keys", help="Show how raw keys parse and classify")
    keys_parser.add_argument("file", type=Path, help="JSON file with the raw counter map")

    sweep_parser = subparsers.add_parser("sweep", help="Sweep expired entries from the persisted cache")
    sweep_parser.add_argument("--cache-file", type=Path, help="Override the stats cache file")

    args = parser.parse_args(argv)

    if args.command == "sweep":
        sys.exit(run_sweep(args.cache_file))

    try:
        registry = load_mode_registry(args.game_modes_file or get_bot_config().game_modes_file)
    except (ValueError, OSError) as e:
        print(f"Configuration Error: {e}")
        sys.exit(1)

    try:
        if args.command == "aggregate":
            exit_code = run_aggregate(registry, args.file, args.mode, args.json)
        else:
            exit_code = run_keys(registry, args.file)
    except (ValueError, OSError) as e:
        print(f"Input Error: {e}")
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
