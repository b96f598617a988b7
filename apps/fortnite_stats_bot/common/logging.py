"""
Stats request logging utilities.
"""

import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


def _format_params(params: Optional[dict]) -> str:
    if not params:
        return ""
    filtered = {k: v for k, v in params.items() if v is not None}
    if not filtered:
        return ""
    return " | Params: " + ", ".join([f"{k}={v}" for k, v in filtered.items()])


def log_stats_request(operation: str, account_id: str, **kwargs) -> None:
    """Log a stats lookup with its account and parameters."""
    logger.info(f"Stats: {operation} | Account: {account_id}{_format_params(kwargs)}")


def get_latency_ms(start_time: float) -> float:
    """Calculate elapsed time in milliseconds since start_time."""
    return (time.time() - start_time) * 1000


def log_stats_completion(
    operation: str,
    account_id: str,
    start_time: float,
    outcome: str,
    cache: Optional[str] = None,
    kwargs: Optional[dict] = None
) -> None:
    """Log the outcome of a stats lookup with cache status and latency."""
    latency_ms = get_latency_ms(start_time)
    cache_str = f" | Cache: {cache}" if cache else ""

    logger.info(
        f"Stats: {operation} | Account: {account_id} | Status: {outcome}{cache_str} | "
        f"Latency: {latency_ms:.2f}ms{_format_params(kwargs)}"
    )
