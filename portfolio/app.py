"""
Portfolio application coordinator.

Wires the three page components together: reacts to their events, to
viewport, scroll, visibility and connectivity changes, and to keyboard
shortcuts.
"""

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

import httpx

from portfolio.components.projects import ProjectCatalog
from portfolio.components.stats import ProfileStatsClient
from portfolio.components.themes import ThemeController
from portfolio.config import PortfolioConfig
from portfolio.events import (
    AppReady,
    DataLoaded,
    EventBus,
    ItemsDisplayed,
    ScrollProgressChanged,
    ThemeChanged,
)
from portfolio.logging import get_logger
from portfolio.page import Element, Page
from portfolio.scheduling import Debouncer
from portfolio.storage import FileStore, KeyValueStore, MemoryStore
from portfolio.transport import AsyncHTTPTransport

logger = get_logger("app")

RESIZE_DEBOUNCE = 0.1
SCROLL_DEBOUNCE = 0.01
OFFLINE_NOTICE_DELAY = 0.1
OFFLINE_NOTICE_DURATION = 5.0
OFFLINE_NOTICE_FADE = 0.3


@dataclass
class KeyPress:
    """A keyboard event delivered to the page."""

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


class ElementObserver:
    """Set of elements watched for entering the viewport."""

    def __init__(self) -> None:
        # insertion-ordered; Element hashes by identity
        self._elements: dict[Element, None] = {}

    def observe(self, element: Element) -> None:
        self._elements.setdefault(element, None)

    def unobserve(self, element: Element) -> None:
        self._elements.pop(element, None)

    def is_observing(self, element: Element) -> bool:
        return element in self._elements

    def prune(self, root: Element) -> int:
        """Stop watching elements that are no longer inside ``root``; returns how many."""
        attached = set(root.iter())
        detached = [element for element in self._elements if element not in attached]
        for element in detached:
            del self._elements[element]
        return len(detached)

    @property
    def observed(self) -> list[Element]:
        return list(self._elements)

    def disconnect(self) -> None:
        self._elements.clear()


class AppCoordinator:
    """
    Coordinates the profile statistics, project catalog and theme components.

    The components are passed in explicitly; ``from_config`` builds the
    whole graph from a PortfolioConfig.

    Example:
        ```python
        async def main():
            async with AppCoordinator.from_config(PortfolioConfig.from_env()) as app:
                await app.start()
                Path("index.html").write_text(app.page.render_html())

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        stats: ProfileStatsClient,
        catalog: ProjectCatalog,
        themes: ThemeController,
        bus: EventBus,
        page: Page,
        config: PortfolioConfig | None = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            stats: Profile statistics component
            catalog: Project catalog component
            themes: Theme component
            bus: Event bus shared with the components
            page: Page the components render into
            config: Settings for breakpoints and thresholds
        """
        self.stats = stats
        self.catalog = catalog
        self.themes = themes
        self.bus = bus
        self.page = page
        self.config = config or PortfolioConfig()

        self.initialized = False
        self.online = True
        self.error: BaseException | None = None

        self.fade_in = ElementObserver()
        self.sections = ElementObserver()

        self._resize = Debouncer(RESIZE_DEBOUNCE, self.handle_window_resize)
        self._scroll = Debouncer(SCROLL_DEBOUNCE, self.handle_scroll)
        self._unsubscribers: list[Callable[[], None]] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._timers: set[asyncio.TimerHandle] = set()

    @classmethod
    def from_config(
        cls,
        config: PortfolioConfig | None = None,
        store: KeyValueStore | None = None,
        page: Page | None = None,
        prefers_dark: bool = False,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AppCoordinator":
        """
        Build the components and the coordinator from configuration.

        Args:
            config: Settings (default: PortfolioConfig())
            store: Key-value store (default: FileStore under ``storage_dir``, else memory)
            page: Page to render into (default: the standard skeleton)
            prefers_dark: Current OS colour-scheme preference
            http_transport: Optional httpx transport for the profile API

        Returns:
            A coordinator that has not been started yet
        """
        config = config or PortfolioConfig()
        if store is None:
            store = FileStore(config.storage_dir) if config.storage_dir else MemoryStore()
        if page is None:
            page = Page.skeleton(title=f"{config.username} | Portfolio", owner=config.username)

        bus = EventBus()
        transport = AsyncHTTPTransport(config.api_base_url, config.timeout, transport=http_transport)
        stats = ProfileStatsClient(
            transport,
            config.username,
            bus,
            page,
            cache_ttl=config.cache_ttl,
            refresh_interval=config.refresh_interval,
            animation_duration=config.animation_duration,
        )
        catalog = ProjectCatalog(bus, page, store, source=config.projects_path)
        themes = ThemeController(bus, page, store, prefers_dark=prefers_dark)
        return cls(stats, catalog, themes, bus, page, config)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """
        Run the startup sequence.

        Any failure leaves a terminal error message with a reload action on
        the page; there is no automatic recovery.

        Returns:
            True if the app is initialised
        """
        try:
            logger.info("Initializing portfolio app...")
            self._subscribe()
            self.themes.init()
            await self.catalog.init()
            self._setup_observers()
            await self.stats.update_display()
            self.stats.start_auto_refresh()

            self.page.body.add_class("loaded")
            self.initialized = True
            logger.info("Portfolio app initialized successfully")
            self.bus.publish(AppReady())
        except Exception as e:
            logger.exception("Failed to initialize portfolio app")
            self._show_initialization_error(e)
        return self.initialized

    def _subscribe(self) -> None:
        self._unsubscribers = [
            self.bus.subscribe(DataLoaded, self.handle_data_loaded),
            self.bus.subscribe(ItemsDisplayed, self.handle_items_displayed),
            self.bus.subscribe(ThemeChanged, self.handle_theme_changed),
        ]

    def _setup_observers(self) -> None:
        for class_name in ("about-section", "projects-section"):
            for section in self.page.query(class_name=class_name):
                self.sections.observe(section)
        for class_name in ("project-card", "stat-card"):
            for element in self.page.query(class_name=class_name):
                self.fade_in.observe(element)

    def _show_initialization_error(self, error: BaseException) -> None:
        self.error = error
        message = Element(classes={"init-error"}, attrs={"role": "alert"})
        message.append(Element("h3", text="Loading error"))
        message.append(
            Element("p", text="The application failed to initialize. Please reload the page.")
        )
        message.append(
            Element("button", classes={"reload-button"}, attrs={"onclick": "location.reload()"}, text="Reload")
        )
        self.page.body.append(message)

    def status(self) -> dict[str, Any]:
        return {
            "initialized": self.initialized,
            "components": {
                "stats": self.stats is not None,
                "catalog": self.catalog is not None,
                "themes": self.themes is not None,
            },
            "theme": self.themes.current if self.themes is not None else None,
            "online": self.online,
        }

    async def drain(self) -> None:
        """Wait for refreshes triggered by visibility or connectivity changes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop timers, drop subscriptions and observers, close the transport."""
        self._resize.cancel()
        self._scroll.cancel()
        for handle in list(self._timers):
            handle.cancel()
        self._timers.clear()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.fade_in.disconnect()
        self.sections.disconnect()
        await self.stats.close()
        logger.info("Portfolio app cleaned up")

    async def __aenter__(self) -> "AppCoordinator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Component events
    # ------------------------------------------------------------------

    def handle_data_loaded(self, event: DataLoaded) -> None:
        logger.debug("Profile data loaded: %s", event.snapshot)
        if event.snapshot.bio:
            for element in self.page.query(class_name="github-bio"):
                element.text = event.snapshot.bio

    def handle_items_displayed(self, event: ItemsDisplayed) -> None:
        logger.debug("Projects displayed: %d", len(event.view))
        self.fade_in.prune(self.page.root)
        for card in self.page.query(class_name="project-card"):
            if not card.has_class("observed"):
                card.add_class("observed")
                self.fade_in.observe(card)

    def handle_theme_changed(self, event: ThemeChanged) -> None:
        logger.debug("Theme changed to: %s", event.identifier)
        self.page.root.attrs["data-theme"] = event.identifier

    # ------------------------------------------------------------------
    # Page events
    # ------------------------------------------------------------------

    def on_resize(self, width: int) -> None:
        self._resize.trigger(width)

    def handle_window_resize(self, width: int) -> None:
        self.page.body.toggle_class("mobile", width < self.config.mobile_breakpoint)

    def on_scroll(self, offset: float, scroll_height: float, viewport_height: float) -> None:
        self._scroll.trigger(offset, scroll_height, viewport_height)

    def handle_scroll(self, offset: float, scroll_height: float, viewport_height: float) -> None:
        self.page.body.toggle_class("scrolled", offset > self.config.scroll_threshold)

        scrollable = scroll_height - viewport_height
        ratio = min(max(offset / scrollable, 0.0), 1.0) if scrollable > 0 else 0.0
        self.page.set_property("--scroll-progress", f"{ratio:.4f}")
        self.bus.publish(ScrollProgressChanged(ratio))

    def on_visibility_change(self, hidden: bool) -> None:
        if hidden:
            self.page.set_property("--animation-play-state", "paused")
        else:
            self.page.set_property("--animation-play-state", "running")
            self._spawn(self.stats.update_display())

    def on_network_change(self, online: bool) -> None:
        self.online = online
        self.page.body.toggle_class("offline", not online)
        if online:
            logger.info("Network connection restored")
            self._spawn(self.stats.update_display())
        else:
            logger.info("Network connection lost")
            self._show_offline_message()

    def on_key(self, key: KeyPress) -> bool:
        """
        Handle the global keyboard shortcuts.

        Ctrl/Cmd+K focuses the search box, Escape clears focus and closes
        open modals and dropdowns, Ctrl/Cmd+Shift+T switches the theme.

        Returns:
            True if the key was handled
        """
        modifier = key.ctrl or key.meta

        if modifier and key.shift and key.key.upper() == "T":
            key.prevent_default()
            self.themes.switch_to_next()
            return True

        if modifier and key.key == "k":
            key.prevent_default()
            self.page.focus("search-input")
            return True

        if key.key == "Escape":
            self.page.blur()
            for class_name in ("modal", "dropdown"):
                for element in self.page.query(class_name=class_name):
                    element.remove_class("active")
            return True

        return False

    def on_element_visible(self, element: Element) -> None:
        """An observed element entered the viewport."""
        if self.fade_in.is_observing(element):
            element.add_class("fade-in")
            self.fade_in.unobserve(element)

        if self.sections.is_observing(element) and element.id:
            anchor = f"#{element.id}"
            for link in self.page.query(tag="a", attr="href"):
                href = link.attrs["href"]
                if href == anchor:
                    link.add_class("active")
                elif href.startswith("#"):
                    link.remove_class("active")

    def scroll_to_anchor(self, href: str) -> Element | None:
        """Smooth-scroll target for an in-page ``#id`` link."""
        if not href.startswith("#"):
            return None
        target = self.page.get(href[1:])
        if target is not None:
            self.page.scroll_target = target
        return target

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _later(self, delay: float, callback: Callable[..., None], *args: Any) -> None:
        handle: asyncio.TimerHandle | None = None

        def run() -> None:
            self._timers.discard(handle)  # type: ignore[arg-type]
            callback(*args)

        handle = asyncio.get_running_loop().call_later(delay, run)
        self._timers.add(handle)

    def _show_offline_message(self) -> None:
        notification = self.page.body.append(
            Element(
                classes={"offline-notification"},
                html='<i class="fas fa-wifi-slash"></i><span>You are offline</span>',
            )
        )

        def hide() -> None:
            notification.remove_class("visible")
            self._later(OFFLINE_NOTICE_FADE, notification.remove)

        self._later(OFFLINE_NOTICE_DELAY, notification.add_class, "visible")
        self._later(OFFLINE_NOTICE_DURATION, hide)
