"""Theme data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    """A named set of colour-role values applied to the page."""

    name: str  # display name
    colors: dict[str, str]


@dataclass(frozen=True)
class ThemeInfo:
    """A registered theme together with its identifier."""

    key: str
    name: str
    colors: dict[str, str]
    builtin: bool
