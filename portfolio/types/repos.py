"""Repository listing and rate limit data models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RepoSummary:
    """One entry of a user's public repository list."""

    name: str
    html_url: str
    description: str = ""
    homepage: str = ""
    language: str = ""
    stargazers_count: int = 0
    forks_count: int = 0
    updated_at: str | None = None
    created_at: str | None = None
    topics: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RateLimitInfo:
    """Core API rate limit status."""

    limit: int
    remaining: int
    reset: int  # epoch seconds
    used: int = 0
