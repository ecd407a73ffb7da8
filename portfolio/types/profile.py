"""Profile statistics data models."""

from dataclasses import dataclass
from enum import Enum


class Marker(Enum):
    """Placeholder for a counter whose value could not be fetched."""

    UNKNOWN = "?"

    def __str__(self) -> str:
        return self.value


UNKNOWN = Marker.UNKNOWN

Count = int | Marker


@dataclass(frozen=True)
class ProfileSnapshot:
    """Display-ready profile statistics."""

    public_repos: Count
    followers: Count
    following: Count
    avatar_url: str = ""
    bio: str = ""
    location: str = ""
    company: str = ""
    blog: str = ""
    created_at: str = ""

    @classmethod
    def unknown(cls) -> "ProfileSnapshot":
        """Sentinel snapshot returned when the profile cannot be fetched."""
        return cls(public_repos=UNKNOWN, followers=UNKNOWN, following=UNKNOWN)

    @property
    def counters(self) -> dict[str, Count]:
        """The three counters keyed by their display slot id."""
        return {
            "repos-count": self.public_repos,
            "followers-count": self.followers,
            "following-count": self.following,
        }


@dataclass(frozen=True)
class SnapshotResult:
    """Outcome of a snapshot fetch; reason is None on success."""

    snapshot: ProfileSnapshot
    reason: str | None = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class CacheEntry:
    """A snapshot together with the time it was captured."""

    snapshot: ProfileSnapshot
    timestamp: float
    ttl: float = 300.0

    def is_valid(self, now: float) -> bool:
        return now - self.timestamp < self.ttl
