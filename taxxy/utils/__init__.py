"""Utility functions for the Taxxy application."""

from taxxy.utils.retry import retry_with_backoff
from taxxy.utils.sanitize import sanitize_description, sanitize_for_logging

__all__ = [
    "retry_with_backoff",
    "sanitize_description",
    "sanitize_for_logging",
]
