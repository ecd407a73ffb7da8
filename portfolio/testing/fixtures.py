"""
Pytest fixtures for portfolio testing.

Provides common fixtures for testing the page components.
"""

import json
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from portfolio.events import EventBus
from portfolio.page import Page
from portfolio.storage import MemoryStore
from portfolio.testing.mock import FailingStore, FakeClock, MockGitHubAPI
from portfolio.transport import AsyncHTTPTransport
from portfolio.types.profile import ProfileSnapshot
from portfolio.types.projects import Project

MOCK_API_BASE_URL = "https://api.github.test"


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_snapshot(
    public_repos: int = 12,
    followers: int = 34,
    following: int = 5,
    bio: str = "",
    **kwargs: Any,
) -> ProfileSnapshot:
    """
    Create a ProfileSnapshot with sensible defaults.

    Example:
        ```python
        snapshot = create_mock_snapshot(followers=1200)
        ```
    """
    return ProfileSnapshot(
        public_repos=public_repos,
        followers=followers,
        following=following,
        bio=bio,
        **kwargs,
    )


def create_mock_project(
    id: str = "mock-project",
    name: str = "mock-project",
    created_at: datetime | None = None,
    featured: bool = False,
    language: str = "Python",
    technologies: tuple[str, ...] = ("Python",),
    **kwargs: Any,
) -> Project:
    """
    Create a Project with sensible defaults.

    Example:
        ```python
        project = create_mock_project(id="a", featured=True)
        ```
    """
    return Project(
        id=id,
        name=name,
        description=kwargs.pop("description", "A mock project"),
        icon=kwargs.pop("icon", "fab fa-python"),
        technologies=technologies,
        github=kwargs.pop("github", f"https://github.com/mock-user/{name}"),
        demo=kwargs.pop("demo", None),
        featured=featured,
        created_at=created_at or datetime(2024, 1, 15, tzinfo=timezone.utc),
        status=kwargs.pop("status", "active"),
        color=kwargs.pop("color", "#333"),
        language=language,
    )


def create_project_record(
    name: str,
    created_at: str = "2024-01-15",
    featured: bool = False,
    **kwargs: Any,
) -> dict[str, Any]:
    """Create a project record in the bundled JSON shape."""
    record: dict[str, Any] = {
        "id": name,
        "name": name,
        "description": f"Description of {name}",
        "technologies": ["Python"],
        "github": f"https://github.com/mock-user/{name}",
        "featured": featured,
        "createdAt": created_at,
        "language": "Python",
    }
    record.update(kwargs)
    return record


def write_projects_file(
    path: Path,
    records: list[dict[str, Any]],
    show_featured_first: bool = False,
) -> Path:
    """Write a projects document to ``path`` and return the path."""
    document = {"projects": records, "settings": {"showFeaturedFirst": show_featured_first}}
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


# ============================================================================
# Mock API Fixtures
# ============================================================================


@pytest.fixture
def mock_github() -> Generator[MockGitHubAPI, None, None]:
    """
    Provide a MockGitHubAPI for testing.

    Example:
        ```python
        def test_my_feature(mock_github):
            mock_github.configure_user(response={"public_repos": 3})
            ...
            assert mock_github.was_called("users.get")
        ```
    """
    api = MockGitHubAPI(username="mock-user")
    yield api
    api.reset()


@pytest.fixture
def mock_transport(mock_github: MockGitHubAPI) -> AsyncHTTPTransport:
    """Provide an AsyncHTTPTransport routed to ``mock_github``."""
    return AsyncHTTPTransport(MOCK_API_BASE_URL, transport=mock_github.transport)


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock starting at t=1000s."""
    return FakeClock()


# ============================================================================
# Page and Store Fixtures
# ============================================================================


@pytest.fixture
def page() -> Page:
    """Provide the standard page skeleton."""
    return Page.skeleton(title="mock-user | Portfolio", owner="mock-user")


@pytest.fixture
def bus() -> EventBus:
    """Provide an event bus that records published events."""
    event_bus = EventBus()
    event_bus.record_history = True
    return event_bus


@pytest.fixture
def memory_store() -> MemoryStore:
    """Provide an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def failing_store() -> FailingStore:
    """Provide a store that rejects every read and write."""
    return FailingStore()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_snapshot() -> ProfileSnapshot:
    """Provide a sample ProfileSnapshot object."""
    return create_mock_snapshot(bio="Builds small tools")


@pytest.fixture
def sample_project() -> Project:
    """Provide a sample Project object."""
    return create_mock_project()


@pytest.fixture
def projects_file(tmp_path: Path) -> Path:
    """
    Provide a projects document with three records.

    ``a`` (2024-01-01, not featured), ``b`` (2024-06-01, featured) and
    ``c`` (2024-03-01, not featured), with featured-first ordering enabled.
    """
    return write_projects_file(
        tmp_path / "projects.json",
        [
            create_project_record("a", created_at="2024-01-01"),
            create_project_record("b", created_at="2024-06-01", featured=True),
            create_project_record("c", created_at="2024-03-01", language="Go", technologies=["Go", "gRPC"]),
        ],
        show_featured_first=True,
    )
