"""
Pytest plugin for portfolio testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
discovered by pytest.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["portfolio.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from portfolio.testing.fixtures import (
    bus,
    failing_store,
    fake_clock,
    memory_store,
    mock_github,
    mock_transport,
    page,
    projects_file,
    sample_project,
    sample_snapshot,
)

__all__ = [
    "mock_github",
    "mock_transport",
    "fake_clock",
    "page",
    "bus",
    "memory_store",
    "failing_store",
    "sample_snapshot",
    "sample_project",
    "projects_file",
]
