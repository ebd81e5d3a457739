"""Fetchers for GitHub entities used during data collection."""

from . import organizations, repositories, stats

__all__ = [
    "organizations",
    "repositories",
    "stats",
]
