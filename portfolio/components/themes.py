"""Theme component.

Keeps the registry of colour themes, applies the active one to the page and
remembers an explicit choice in the key-value store.
"""

import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from portfolio.events import EventBus, ThemeChanged
from portfolio.exceptions import StorageError
from portfolio.logging import get_logger
from portfolio.page import Element
from portfolio.types.themes import Theme, ThemeInfo

if TYPE_CHECKING:
    from portfolio.page import Page
    from portfolio.storage import KeyValueStore

logger = get_logger("themes")

STORAGE_KEY = "portfolio-theme"
DEFAULT_THEME = "cafe"
DARK_THEME = "dark"
THEME_CLASS_PREFIX = "theme-"

BUILTIN_THEMES: dict[str, Theme] = {
    "cafe": Theme(
        name="Cafe",
        colors={
            "primary-bg": "linear-gradient(135deg, #f7f3e9 0%, #e8ddd4 100%)",
            "text-primary": "#6b4423",
            "text-secondary": "#8b6f47",
            "accent-primary": "#d4a574",
            "accent-secondary": "#b8956a",
            "card-bg": "rgba(255, 255, 255, 0.8)",
            "shadow-light": "rgba(107, 68, 35, 0.1)",
            "shadow-medium": "rgba(107, 68, 35, 0.2)",
        },
    ),
    "dark": Theme(
        name="Dark",
        colors={
            "primary-bg": "linear-gradient(135deg, #2c1810 0%, #3d2817 100%)",
            "text-primary": "#f4e6d3",
            "text-secondary": "#d4c4a8",
            "accent-primary": "#d4a574",
            "accent-secondary": "#b8956a",
            "card-bg": "rgba(0, 0, 0, 0.3)",
            "shadow-light": "rgba(0, 0, 0, 0.3)",
            "shadow-medium": "rgba(0, 0, 0, 0.5)",
        },
    ),
    "ocean": Theme(
        name="Ocean",
        colors={
            "primary-bg": "linear-gradient(135deg, #e6f7ff 0%, #bae0ff 100%)",
            "text-primary": "#003a8c",
            "text-secondary": "#1f54a3",
            "accent-primary": "#1890ff",
            "accent-secondary": "#096dd9",
            "card-bg": "rgba(255, 255, 255, 0.8)",
            "shadow-light": "rgba(0, 58, 140, 0.1)",
            "shadow-medium": "rgba(0, 58, 140, 0.2)",
        },
    ),
    "forest": Theme(
        name="Forest",
        colors={
            "primary-bg": "linear-gradient(135deg, #f0f9f0 0%, #d9f7be 100%)",
            "text-primary": "#135200",
            "text-secondary": "#389e0d",
            "accent-primary": "#52c41a",
            "accent-secondary": "#73d13d",
            "card-bg": "rgba(255, 255, 255, 0.8)",
            "shadow-light": "rgba(19, 82, 0, 0.1)",
            "shadow-medium": "rgba(19, 82, 0, 0.2)",
        },
    ),
}


class ThemeController:
    """
    Registry of colour themes with exactly one active theme.

    Only explicit choices (``apply_theme`` with ``persist=True``) are
    remembered. While nothing is remembered the theme follows the OS
    light/dark preference.

    Example:
        ```python
        themes = ThemeController(bus, page, store, prefers_dark=False)
        themes.init()
        themes.apply_theme("ocean")
        themes.switch_to_next()  # forest
        ```
    """

    def __init__(
        self,
        bus: EventBus,
        page: "Page",
        store: "KeyValueStore",
        prefers_dark: bool = False,
    ) -> None:
        """
        Initialize the theme controller.

        Args:
            bus: Event bus that receives ``ThemeChanged``
            page: Page the colours are applied to
            store: Key-value store for the chosen theme
            prefers_dark: Current OS colour-scheme preference
        """
        self.bus = bus
        self.page = page
        self.store = store
        self.prefers_dark = prefers_dark

        self.themes: dict[str, Theme] = {
            key: Theme(theme.name, dict(theme.colors)) for key, theme in BUILTIN_THEMES.items()
        }
        self.current = DEFAULT_THEME
        self.selector: Element | None = None

    def init(self) -> str:
        """
        Resolve and apply the startup theme and mount the selector.

        Returns:
            Identifier of the applied theme
        """
        self.apply_theme(self._resolve_startup_theme(), persist=False)
        self.mount_selector()
        return self.current

    def _resolve_startup_theme(self) -> str:
        saved = self.saved_theme()
        if saved is not None and saved in self.themes:
            return saved
        return self._preferred_theme()

    def _preferred_theme(self) -> str:
        return DARK_THEME if self.prefers_dark else DEFAULT_THEME

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def saved_theme(self) -> str | None:
        """The remembered theme identifier, or None if there is none."""
        try:
            raw = self.store.get(STORAGE_KEY)
        except StorageError as e:
            logger.warning("Failed to load saved theme: %s", e)
            return None
        if not raw:
            return None
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Saved theme is not valid UTF-8")
            return None

    def _save_theme(self, name: str) -> None:
        try:
            self.store.put(STORAGE_KEY, name.encode("utf-8"))
        except StorageError as e:
            logger.warning("Failed to save theme: %s", e)

    # ------------------------------------------------------------------
    # Switching
    # ------------------------------------------------------------------

    def apply_theme(self, name: str, persist: bool = True) -> bool:
        """
        Make ``name`` the active theme.

        Args:
            name: Registered theme identifier
            persist: Remember the choice in the store

        Returns:
            False if no such theme is registered
        """
        theme = self.themes.get(name)
        if theme is None:
            logger.warning('Theme "%s" not found', name)
            return False

        for role, value in theme.colors.items():
            self.page.set_property(f"--{role}", value)

        self.current = name

        stale = [cls for cls in self.page.body.classes if cls.startswith(THEME_CLASS_PREFIX)]
        self.page.body.remove_class(*stale)
        self.page.body.add_class(f"{THEME_CLASS_PREFIX}{name}")

        if persist:
            self._save_theme(name)

        self.bus.publish(ThemeChanged(name, dict(theme.colors)))
        self.update_selector()
        return True

    def switch_to_next(self) -> str:
        """Apply the theme after the current one in registry order, wrapping around."""
        names = list(self.themes)
        index = names.index(self.current) if self.current in names else -1
        next_name = names[(index + 1) % len(names)]
        self.apply_theme(next_name)
        return next_name

    def set_system_preference(self, prefers_dark: bool) -> None:
        """
        Record an OS colour-scheme change.

        Re-applies the preferred theme unless a choice is remembered.
        """
        self.prefers_dark = prefers_dark
        if self.saved_theme() is None:
            self.apply_theme(self._preferred_theme(), persist=False)

    def current_theme(self) -> ThemeInfo:
        return self._info(self.current)

    def all_themes(self) -> list[ThemeInfo]:
        return [self._info(key) for key in self.themes]

    def _info(self, key: str) -> ThemeInfo:
        theme = self.themes[key]
        return ThemeInfo(key=key, name=theme.name, colors=dict(theme.colors), builtin=key in BUILTIN_THEMES)

    # ------------------------------------------------------------------
    # Selector control
    # ------------------------------------------------------------------

    def create_selector(self) -> Element:
        """Build the toggle button and dropdown with one option per theme."""
        selector = Element(classes={"theme-selector"})
        selector.append(
            Element(
                "button",
                classes={"theme-toggle"},
                attrs={"aria-label": "Change theme"},
                html='<i class="fas fa-palette"></i>',
            )
        )
        dropdown = selector.append(Element(classes={"theme-dropdown", "dropdown"}))
        for key, theme in self.themes.items():
            option = Element(
                "button",
                classes={"theme-option"},
                attrs={"data-theme": key},
                text=theme.name,
            )
            option.append(
                Element(
                    "span",
                    classes={"theme-preview"},
                    style={"background": theme.colors.get("accent-primary", "")},
                )
            )
            dropdown.append(option)
        return selector

    def mount_selector(self) -> Element | None:
        """Place the selector in the page header, replacing an older one."""
        header = next(iter(self.page.query(class_name="container")), None)
        if header is None:
            return None
        if self.selector is not None:
            self.selector.remove()
        self.selector = header.append(self.create_selector())
        self.update_selector()
        return self.selector

    def update_selector(self) -> None:
        """Mark the option of the active theme."""
        for option in self.page.query(class_name="theme-option"):
            if option.attrs.get("data-theme") == self.current:
                option.attrs["aria-current"] = "true"
                option.add_class("active")
            else:
                option.attrs.pop("aria-current", None)
                option.remove_class("active")

    def toggle_selector(self) -> bool:
        """Open or close the dropdown; returns True when it is open."""
        for dropdown in self.page.query(class_name="theme-dropdown"):
            return dropdown.toggle_class("active")
        return False

    def select_option(self, name: str) -> bool:
        """Apply a theme picked in the dropdown and close the dropdown."""
        applied = self.apply_theme(name)
        for dropdown in self.page.query(class_name="theme-dropdown"):
            dropdown.remove_class("active")
        return applied

    # ------------------------------------------------------------------
    # Custom themes
    # ------------------------------------------------------------------

    def add_custom_theme(self, name: str, colors: Mapping[str, str]) -> bool:
        """
        Register a new theme.

        Returns:
            False if the name is taken or the colours are not a mapping
        """
        if not name or name in self.themes:
            logger.warning('Theme "%s" already exists', name)
            return False
        if not isinstance(colors, Mapping):
            logger.warning('Theme "%s" colours must be a mapping', name)
            return False

        self.themes[name] = Theme(name=name[:1].upper() + name[1:], colors=dict(colors))
        if self.selector is not None:
            self.mount_selector()
        return True

    def remove_custom_theme(self, name: str) -> bool:
        """
        Unregister a custom theme; built-in themes cannot be removed.

        Removing the active theme switches back to the default theme.
        """
        if name in BUILTIN_THEMES:
            logger.warning('Cannot remove built-in theme "%s"', name)
            return False
        if name not in self.themes:
            logger.warning('Theme "%s" not found', name)
            return False

        del self.themes[name]
        if self.selector is not None:
            self.mount_selector()

        if self.current == name:
            self.apply_theme(DEFAULT_THEME)
        return True

    def export_theme(self) -> dict[str, Any]:
        """Serialise the active theme."""
        return {
            "name": self.current,
            "colors": dict(self.themes[self.current].colors),
            "timestamp": int(time.time() * 1000),
        }

    def import_theme(self, data: Mapping[str, Any]) -> bool:
        """
        Register (unless already present) and apply an exported theme.

        Returns:
            False if the payload lacks a name or colours
        """
        if not isinstance(data, Mapping) or not data.get("name") or not data.get("colors"):
            logger.error("Failed to import theme: invalid theme data format")
            return False

        name = str(data["name"])
        self.add_custom_theme(name, data["colors"])
        return self.apply_theme(name)
