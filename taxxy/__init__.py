"""Taxxy: AI-assisted transaction classification for personal and small-business taxes."""

__version__ = "0.1.0"
