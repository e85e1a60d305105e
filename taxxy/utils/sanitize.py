"""Utilities for sanitizing user data in logs."""

from typing import Optional


def sanitize_description(description: Optional[str], max_length: int = 80) -> str:
    """
    Shorten a transaction description for logging.

    Args:
        description: Transaction description
        max_length: Maximum length to return

    Returns:
        Single-line, truncated description
    """
    if not description:
        return ""

    flattened = " ".join(str(description).split())
    if len(flattened) > max_length:
        return flattened[:max_length] + "..."

    return flattened


def sanitize_for_logging(value: Optional[str], max_length: int = 200) -> str:
    """
    Sanitize any string value for logging.

    Args:
        value: Value to sanitize
        max_length: Maximum length to return

    Returns:
        Sanitized string
    """
    if value is None:
        return ""

    value_str = str(value)
    if len(value_str) > max_length:
        return value_str[:max_length] + "..."

    return value_str
