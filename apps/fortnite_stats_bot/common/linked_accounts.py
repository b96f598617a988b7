"""
In-memory cache with JSON persistence for Discord user to Epic account links.
"""

import asyncio
import json
import logging

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from cachetools import LRUCache

from apps.fortnite_stats_bot.bot_config import get_bot_config

logger = logging.getLogger(__name__)

_cache_lock = asyncio.Lock()
_cache: LRUCache[int, "LinkedAccount"] = LRUCache(maxsize=1000000)
_cache_file: Optional[Path] = None


@dataclass(frozen=True)
class LinkedAccount:
    """Epic account linked to a Discord user."""

    account_id: str
    display_name: str
    linked_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "display_name": self.display_name,
            "linked_at": self.linked_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinkedAccount":
        return cls(
            account_id=data["account_id"],
            display_name=data["display_name"],
            linked_at=datetime.fromisoformat(data["linked_at"]),
        )


def _get_cache_file() -> Path:
    if _cache_file is not None:
        return _cache_file
    return get_bot_config().linked_accounts_file


def _serialize_cache() -> Dict[str, Dict[str, Any]]:
    """Copy the cache to JSON-ready data. Caller must hold the lock."""
    return {str(user_id): account.to_dict() for user_id, account in _cache.items()}


async def _load_cache_from_disk() -> None:
    """Load persisted links from disk."""
    cache_file = _get_cache_file()

    if not cache_file.exists():
        logger.info(f"Linked accounts file not found at {cache_file}, starting with empty cache")
        return

    try:
        with open(cache_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        # JSON keys are strings, but Discord user IDs are integers
        async with _cache_lock:
            _cache.clear()
            for user_id_str, account_data in data.items():
                _cache[int(user_id_str)] = LinkedAccount.from_dict(account_data)

        logger.info(f"Loaded {len(_cache)} linked accounts from cache file")
    except (json.JSONDecodeError, ValueError, KeyError, TypeError, IOError) as e:
        logger.warning(f"Failed to load linked accounts from {cache_file}: {e}. Starting with empty cache.")


async def _save_cache_to_disk(data: Dict[str, Dict[str, Any]]) -> None:
    """Persist links to disk atomically."""
    cache_file = _get_cache_file()
    try:
        cache_file.parent.mkdir(parents=True, exist_ok=True)

        temp_file = cache_file.with_suffix('.json.tmp')
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

        temp_file.replace(cache_file)
        logger.info(f"Saved {len(data)} linked accounts")
    except IOError as e:
        logger.error(f"Failed to save linked accounts to {cache_file}: {e}", exc_info=True)


async def get_linked_account(discord_user_id: int) -> Optional[LinkedAccount]:
    """Get the Epic account linked to a Discord user, or None if not linked."""
    async with _cache_lock:
        return _cache.get(discord_user_id)


async def link_account(discord_user_id: int, account_id: str, display_name: str) -> LinkedAccount:
    """Link or re-link an Epic account to a Discord user."""
    account = LinkedAccount(
        account_id=account_id,
        display_name=display_name,
        linked_at=datetime.now(timezone.utc),
    )
    async with _cache_lock:
        _cache[discord_user_id] = account
        # Copy data while holding lock, then release before saving
        data_to_save = _serialize_cache()
    await _save_cache_to_disk(data_to_save)
    logger.info(f"Linked Discord user {discord_user_id} to Epic account {account_id} ({display_name})")
    return account


async def unlink_account(discord_user_id: int) -> bool:
    """Remove the link for a Discord user. Returns True if a link existed."""
    async with _cache_lock:
        if discord_user_id not in _cache:
            logger.info(f"No linked account found for Discord user {discord_user_id}")
            return False
        del _cache[discord_user_id]
        data_to_save = _serialize_cache()
        logger.info(f"Unlinked Epic account for Discord user {discord_user_id}")

    await _save_cache_to_disk(data_to_save)
    return True


async def get_all_linked_accounts() -> List[Tuple[int, LinkedAccount]]:
    """Return (discord_user_id, account) pairs in link order."""
    async with _cache_lock:
        accounts = list(_cache.items())
    return sorted(accounts, key=lambda item: item[1].linked_at)


async def initialize_linked_accounts(cache_file: Optional[Path] = None) -> None:
    """
    Initialize the link cache by loading from disk. Should be called during bot startup.

    Args:
        cache_file: Override of the persistence file (defaults to the configured cache dir)
    """
    global _cache_file
    if cache_file is not None:
        _cache_file = cache_file
    await _load_cache_from_disk()
