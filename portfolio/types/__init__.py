"""Portfolio type definitions.

This module exports all data model types used by the components.
"""

from portfolio.types.profile import (
    UNKNOWN,
    CacheEntry,
    Count,
    Marker,
    ProfileSnapshot,
    SnapshotResult,
)
from portfolio.types.projects import CatalogSettings, Project
from portfolio.types.repos import RateLimitInfo, RepoSummary
from portfolio.types.themes import Theme, ThemeInfo

__all__ = [
    # Profile statistics
    "UNKNOWN",
    "Marker",
    "Count",
    "ProfileSnapshot",
    "SnapshotResult",
    "CacheEntry",
    # Repositories
    "RepoSummary",
    "RateLimitInfo",
    # Projects
    "Project",
    "CatalogSettings",
    # Themes
    "Theme",
    "ThemeInfo",
]
