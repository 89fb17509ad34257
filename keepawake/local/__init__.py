"""
Local package for the keepawake application.

This package provides the merged application configuration through the
effective_settings singleton.
"""

from .config import effective_settings, MergedSettings

__all__ = ["effective_settings", "MergedSettings"]
