"""
Portfolio site components.

Profile statistics from the GitHub REST API, a filterable project catalog,
colour themes and the coordinator that wires them into one page.

Example:
    ```python
    import asyncio
    from portfolio import AppCoordinator, PortfolioConfig

    async def main():
        async with AppCoordinator.from_config(PortfolioConfig(username="octocat")) as app:
            await app.start()
            print(app.page.render_html())

    asyncio.run(main())
    ```
"""

from portfolio.app import AppCoordinator, KeyPress
from portfolio.components import ProfileStatsClient, ProjectCatalog, ThemeController
from portfolio.config import PortfolioConfig
from portfolio.events import (
    AppReady,
    DataLoaded,
    EventBus,
    ItemsDisplayed,
    ScrollProgressChanged,
    ThemeChanged,
)
from portfolio.exceptions import (
    ApiError,
    AuthorizationError,
    ConfigurationError,
    NotFoundError,
    PortfolioError,
    RateLimitedError,
    ServerError,
    StorageError,
    ValidationError,
)
from portfolio.logging import configure_logging
from portfolio.page import Element, Page
from portfolio.storage import FileStore, KeyValueStore, MemoryStore
from portfolio.transport import AsyncHTTPTransport

__version__ = "0.1.0"

__all__ = [
    # Coordinator
    "AppCoordinator",
    "KeyPress",
    "PortfolioConfig",
    # Components
    "ProfileStatsClient",
    "ProjectCatalog",
    "ThemeController",
    # Events
    "EventBus",
    "DataLoaded",
    "ItemsDisplayed",
    "ThemeChanged",
    "ScrollProgressChanged",
    "AppReady",
    # Page and storage
    "Page",
    "Element",
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
    "AsyncHTTPTransport",
    # Exceptions
    "PortfolioError",
    "ConfigurationError",
    "ValidationError",
    "StorageError",
    "ApiError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    # Logging
    "configure_logging",
]
