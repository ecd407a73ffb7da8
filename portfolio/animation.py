"""Counter animations for the statistics slots."""

import asyncio
import math
import time
from collections.abc import Callable

from portfolio.page import Element
from portfolio.types.profile import Count, Marker

FRAME_INTERVAL = 1 / 60


def ease_out_cubic(progress: float) -> float:
    """Cubic ease-out: fast start, gentle landing. ``progress`` is clamped to [0, 1]."""
    progress = min(max(progress, 0.0), 1.0)
    return 1 - (1 - progress) ** 3


def eased_value(start: int, target: int, progress: float) -> int:
    """Integer counter value for a point of the animation."""
    return math.floor(start + (target - start) * ease_out_cubic(progress))


def format_count(value: Count) -> str:
    """Render a counter the way the page shows it ("1,234" or "?")."""
    if isinstance(value, Marker):
        return str(value)
    return f"{value:,}"


async def count_up(
    element: Element,
    target: Count,
    duration: float = 1.0,
    start: int = 0,
    clock: Callable[[], float] = time.monotonic,
    frame_interval: float = FRAME_INTERVAL,
) -> None:
    """
    Animate an element's text from ``start`` to ``target``.

    Non-numeric targets are written verbatim without animation. The final
    frame always shows the exact target.

    Args:
        element: Element whose text is updated on every frame
        target: Final counter value
        duration: Animation length in seconds
        start: Initial counter value
        clock: Monotonic time source in seconds
        frame_interval: Delay between frames in seconds
    """
    if isinstance(target, Marker) or duration <= 0:
        element.text = format_count(target)
        return

    started = clock()
    while True:
        progress = min((clock() - started) / duration, 1.0)
        if progress >= 1.0:
            break
        element.text = format_count(eased_value(start, target, progress))
        await asyncio.sleep(frame_interval)

    element.text = format_count(target)
