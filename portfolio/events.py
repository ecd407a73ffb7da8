"""
Typed publish/subscribe bus shared by the page components.

Each event is a frozen dataclass; listeners subscribe to an event class and
only ever receive instances of that class.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, TypeVar

from portfolio.logging import get_logger

if TYPE_CHECKING:
    from portfolio.types.profile import ProfileSnapshot
    from portfolio.types.projects import Project

logger = get_logger("events")


@dataclass(frozen=True)
class DataLoaded:
    """Profile statistics were pushed to the page."""

    name: ClassVar[str] = "dataLoaded"

    snapshot: "ProfileSnapshot"


@dataclass(frozen=True)
class ItemsDisplayed:
    """The project grid was re-rendered."""

    name: ClassVar[str] = "itemsDisplayed"

    view: tuple["Project", ...]


@dataclass(frozen=True)
class ThemeChanged:
    """A theme was applied to the page."""

    name: ClassVar[str] = "themeChanged"

    identifier: str
    colors: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ScrollProgressChanged:
    """Normalised scroll position, 0.0 at the top and 1.0 at the bottom."""

    name: ClassVar[str] = "scrollProgress"

    ratio: float


@dataclass(frozen=True)
class AppReady:
    """The coordinator finished its startup sequence."""

    name: ClassVar[str] = "appReady"


Event = DataLoaded | ItemsDisplayed | ThemeChanged | ScrollProgressChanged | AppReady

EVENT_TYPES: dict[str, type] = {
    cls.name: cls
    for cls in (DataLoaded, ItemsDisplayed, ThemeChanged, ScrollProgressChanged, AppReady)
}

E = TypeVar("E", DataLoaded, ItemsDisplayed, ThemeChanged, ScrollProgressChanged, AppReady)


class EventBus:
    """
    Broadcast bus with one listener list per event class.

    Delivery is synchronous and in subscription order within an event class.
    A failing listener is logged and does not prevent delivery to the others,
    mirroring DOM event dispatch.

    Example:
        ```python
        bus = EventBus()
        bus.subscribe(ThemeChanged, lambda event: print(event.identifier))
        bus.publish(ThemeChanged("dark", {}))
        ```
    """

    def __init__(self) -> None:
        self._listeners: dict[type, list[Callable[..., None]]] = {}
        self._history: list[Event] = []
        self.record_history = False

    def subscribe(self, event_type: type[E], listener: Callable[[E], None]) -> Callable[[], None]:
        """
        Register a listener for one event class.

        Args:
            event_type: Event class to listen for
            listener: Callable receiving the event instance

        Returns:
            A function that removes the listener again
        """
        if event_type not in EVENT_TYPES.values():
            raise TypeError(f"Unknown event type: {event_type!r}")

        listeners = self._listeners.setdefault(event_type, [])
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def publish(self, event: Event) -> int:
        """
        Deliver an event to every listener of its class.

        Args:
            event: Event instance

        Returns:
            Number of listeners the event was delivered to
        """
        if self.record_history:
            self._history.append(event)

        delivered = 0
        for listener in list(self._listeners.get(type(event), [])):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener for %s failed", event.name)
            delivered += 1
        return delivered

    def listener_count(self, event_type: type | None = None) -> int:
        if event_type is None:
            return sum(len(listeners) for listeners in self._listeners.values())
        return len(self._listeners.get(event_type, []))

    def history(self, event_type: type | None = None) -> list[Event]:
        """Published events (only kept while ``record_history`` is set)."""
        if event_type is None:
            return list(self._history)
        return [event for event in self._history if isinstance(event, event_type)]

    def clear(self) -> None:
        """Remove every listener and forget the recorded history."""
        self._listeners.clear()
        self._history.clear()
