"""Portfolio testing utilities.

Provides a mock GitHub API, test doubles and fixtures for testing the page
components.
"""

from portfolio.testing.fixtures import (
    create_mock_project,
    create_mock_snapshot,
    create_project_record,
    write_projects_file,
)
from portfolio.testing.mock import (
    FailingStore,
    FakeClock,
    MockCall,
    MockGitHubAPI,
    MockResponse,
)

__all__ = [
    # Mock API
    "MockGitHubAPI",
    "MockCall",
    "MockResponse",
    # Test doubles
    "FakeClock",
    "FailingStore",
    # Helper functions
    "create_mock_snapshot",
    "create_mock_project",
    "create_project_record",
    "write_projects_file",
]
