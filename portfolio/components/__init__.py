"""Page components: profile statistics, project catalog and themes."""

from portfolio.components.projects import ProjectCatalog
from portfolio.components.stats import ProfileStatsClient
from portfolio.components.themes import BUILTIN_THEMES, ThemeController

__all__ = [
    "ProfileStatsClient",
    "ProjectCatalog",
    "ThemeController",
    "BUILTIN_THEMES",
]
