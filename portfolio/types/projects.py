"""Project catalog data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Project:
    """A portfolio project card."""

    id: str
    name: str
    description: str
    icon: str
    technologies: tuple[str, ...]
    github: str
    demo: str | None
    featured: bool
    created_at: datetime
    status: str  # "active", "archived", ...
    color: str
    language: str


@dataclass
class CatalogSettings:
    """Display settings bundled with the project data."""

    show_featured_first: bool = False
    extra: dict[str, Any] = field(default_factory=dict)
