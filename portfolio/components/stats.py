"""Profile statistics component.

Fetches the public GitHub profile of one user, caches it for a fixed TTL and
pushes the counters into the page with a count-up animation.
"""

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from portfolio.animation import count_up
from portfolio.events import DataLoaded, EventBus
from portfolio.exceptions import ApiError
from portfolio.logging import get_logger
from portfolio.scheduling import PeriodicTask
from portfolio.types.profile import CacheEntry, ProfileSnapshot, SnapshotResult
from portfolio.types.repos import RateLimitInfo, RepoSummary

if TYPE_CHECKING:
    from portfolio.page import Page
    from portfolio.transport import AsyncHTTPTransport

logger = get_logger("stats")

LOADING_TEXT = "..."


def _count(value: Any) -> int:
    """Coerce an API counter to a non-negative int; anything else becomes 0."""
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(value, 0)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _parse_snapshot(data: Any) -> ProfileSnapshot:
    """Normalise a ``GET /users/{username}`` body into a snapshot."""
    if not isinstance(data, dict):
        raise ApiError("INVALID_RESPONSE", "Profile response is not an object")
    return ProfileSnapshot(
        public_repos=_count(data.get("public_repos")),
        followers=_count(data.get("followers")),
        following=_count(data.get("following")),
        avatar_url=_text(data.get("avatar_url")),
        bio=_text(data.get("bio")),
        location=_text(data.get("location")),
        company=_text(data.get("company")),
        blog=_text(data.get("blog")),
        created_at=_text(data.get("created_at")),
    )


def _parse_repo(data: dict[str, Any]) -> RepoSummary:
    topics = data.get("topics") or []
    return RepoSummary(
        name=data["name"],
        html_url=data["html_url"],
        description=_text(data.get("description")),
        homepage=_text(data.get("homepage")),
        language=_text(data.get("language")),
        stargazers_count=_count(data.get("stargazers_count")),
        forks_count=_count(data.get("forks_count")),
        updated_at=data.get("updated_at"),
        created_at=data.get("created_at"),
        topics=tuple(str(topic) for topic in topics),
    )


class ProfileStatsClient:
    """
    Client for the profile statistics shown in the page header.

    Example:
        ```python
        transport = AsyncHTTPTransport("https://api.github.com")
        stats = ProfileStatsClient(transport, "octocat", bus, page)

        result = await stats.fetch_snapshot()
        if result.ok:
            print(result.snapshot.followers)
        ```
    """

    DEFAULT_CACHE_TTL = 300.0
    DEFAULT_REFRESH_INTERVAL = 300.0

    def __init__(
        self,
        transport: "AsyncHTTPTransport",
        username: str,
        bus: EventBus,
        page: "Page",
        cache_ttl: float = DEFAULT_CACHE_TTL,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        animation_duration: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the stats client.

        Args:
            transport: HTTP transport for the profile API
            username: GitHub account whose statistics are shown
            bus: Event bus that receives ``DataLoaded``
            page: Page holding the counter slots
            cache_ttl: Seconds a fetched snapshot stays valid
            refresh_interval: Seconds between automatic display refreshes
            animation_duration: Length of the counter animation in seconds
            clock: Time source in seconds, used for cache validity
        """
        self.transport = transport
        self.username = username
        self.bus = bus
        self.page = page
        self.cache_ttl = cache_ttl
        self.refresh_interval = refresh_interval
        self.animation_duration = animation_duration
        self.clock = clock

        self._cache: CacheEntry | None = None
        self._animations: set[asyncio.Task[None]] = set()
        self._refresh: PeriodicTask | None = None

    @property
    def cache(self) -> CacheEntry | None:
        return self._cache

    def is_cache_valid(self) -> bool:
        return self._cache is not None and self._cache.is_valid(self.clock())

    async def fetch_snapshot(self) -> SnapshotResult:
        """
        Get the profile snapshot, from cache when still valid.

        Never raises: a failed fetch yields the unknown snapshot together
        with the failure reason.

        Returns:
            SnapshotResult with the snapshot and, on failure, the reason
        """
        if self._cache is not None and self._cache.is_valid(self.clock()):
            return SnapshotResult(self._cache.snapshot, from_cache=True)

        try:
            data = await self.transport.get_json(f"/users/{self.username}")
            snapshot = _parse_snapshot(data)
        except ApiError as e:
            logger.warning("Failed to fetch profile for %s: %s", self.username, e)
            return SnapshotResult(ProfileSnapshot.unknown(), reason=str(e))

        self._cache = CacheEntry(snapshot, timestamp=self.clock(), ttl=self.cache_ttl)
        return SnapshotResult(snapshot)

    async def fetch_repository_page(self, page: int = 1, per_page: int = 30) -> list[RepoSummary]:
        """
        Get one page of the user's repositories, most recently updated first.

        Args:
            page: 1-based page number
            per_page: Page size (the API caps it at 100)

        Returns:
            List of RepoSummary objects; empty on any failure
        """
        params = {
            "page": page,
            "per_page": per_page,
            "sort": "updated",
            "direction": "desc",
        }
        try:
            data = await self.transport.get_json(f"/users/{self.username}/repos", params=params)
            if not isinstance(data, list):
                raise ApiError("INVALID_RESPONSE", "Repository list is not an array")
            return [_parse_repo(repo) for repo in data]
        except (ApiError, KeyError, TypeError) as e:
            logger.warning("Failed to fetch repositories for %s: %s", self.username, e)
            return []

    async def check_rate_limit(self) -> RateLimitInfo | None:
        """
        Get the core API rate limit.

        Returns:
            RateLimitInfo, or None when the status cannot be read
        """
        try:
            data = await self.transport.get_json("/rate_limit")
            rate = data["rate"]
            return RateLimitInfo(
                limit=int(rate["limit"]),
                remaining=int(rate["remaining"]),
                reset=int(rate["reset"]),
                used=int(rate.get("used", 0)),
            )
        except (ApiError, KeyError, TypeError, ValueError) as e:
            logger.warning("Failed to check rate limit: %s", e)
            return None

    async def update_display(self) -> SnapshotResult:
        """
        Push the counters into the page and announce ``DataLoaded``.

        Counters animate from zero; the unknown marker is written verbatim.
        The event is published as soon as the animations are started.

        Returns:
            The SnapshotResult that was displayed
        """
        self._cancel_animations()

        slots = {slot_id: self.page.get(slot_id) for slot_id in ProfileSnapshot.unknown().counters}
        for element in slots.values():
            if element is not None:
                element.text = LOADING_TEXT

        result = await self.fetch_snapshot()

        for slot_id, value in result.snapshot.counters.items():
            element = slots[slot_id]
            if element is None:
                continue
            task = asyncio.get_running_loop().create_task(
                count_up(element, value, duration=self.animation_duration)
            )
            self._animations.add(task)
            task.add_done_callback(self._animations.discard)

        self.bus.publish(DataLoaded(result.snapshot))
        return result

    async def settle(self) -> None:
        """Wait for running counter animations to finish."""
        if self._animations:
            await asyncio.gather(*self._animations, return_exceptions=True)

    def start_auto_refresh(self) -> PeriodicTask:
        """Refresh the display every ``refresh_interval`` seconds."""
        if self._refresh is None:
            self._refresh = PeriodicTask(self.refresh_interval, self.update_display, name="stats-refresh")
        return self._refresh.start()

    def stop_auto_refresh(self) -> None:
        if self._refresh is not None:
            self._refresh.stop()

    def _cancel_animations(self) -> None:
        for task in list(self._animations):
            task.cancel()
        self._animations.clear()

    async def close(self) -> None:
        """Stop timers and animations and close the transport."""
        self.stop_auto_refresh()
        self._cancel_animations()
        await self.transport.close()
