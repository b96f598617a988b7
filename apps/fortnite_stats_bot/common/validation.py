"""
Input validation utilities for stats lookups.
"""

from apps.fortnite_stats_bot.common.constants import (
    LEADERBOARD_STAT_DISPLAY_LIST,
    LEADERBOARD_STAT_VALID_VALUES,
)


def validate_account_id(account_id: str) -> str:
    """Return the stripped account ID, or raise ValueError if it is empty."""
    if not isinstance(account_id, str) or not account_id.strip():
        raise ValueError("Account ID must be a non-empty string")
    return account_id.strip()


def validate_choice_parameter(
    parameter_name: str,
    value: str,
    valid_choices: set,
    display_choices: list = None
) -> str:
    """
    Validate and normalize a choice parameter.

    Args:
        parameter_name: Name of the parameter for error messages
        value: The value to validate
        valid_choices: Set of valid lowercase values
        display_choices: Optional list of display names for error messages

    Returns:
        Normalized (lowercase, stripped) value

    Raises:
        ValueError: If value is not in valid_choices
    """
    normalized_value = value.lower().strip()
    if normalized_value not in valid_choices:
        display_list = display_choices or sorted(valid_choices)
        raise ValueError(
            f"Invalid {parameter_name}: {value}. Valid options: {', '.join(display_list)}"
        )
    return normalized_value


def validate_mode_key(mode_key: str, valid_mode_keys: set) -> str:
    """Normalize a mode registry id, raising ValueError for unknown modes."""
    return validate_choice_parameter("mode", mode_key, valid_mode_keys)


def validate_leaderboard_stat(stat: str) -> str:
    """Normalize a leaderboard stat name, raising ValueError for unsupported stats."""
    return validate_choice_parameter(
        "stat", stat, LEADERBOARD_STAT_VALID_VALUES, LEADERBOARD_STAT_DISPLAY_LIST
    )
