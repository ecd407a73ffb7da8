"""
Portfolio configuration.

Values come from constructor arguments or from ``PORTFOLIO_*`` environment
variables via ``PortfolioConfig.from_env()``.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from portfolio.exceptions import ConfigurationError

DEFAULT_PROJECTS_PATH = Path(__file__).resolve().parent / "data" / "projects.json"

CONFIG_ENV_VARS = {
    "username": "PORTFOLIO_GITHUB_USERNAME",
    "api_base_url": "PORTFOLIO_API_BASE_URL",
    "timeout": "PORTFOLIO_TIMEOUT",
    "projects_path": "PORTFOLIO_PROJECTS_PATH",
    "storage_dir": "PORTFOLIO_STORAGE_DIR",
    "cache_ttl": "PORTFOLIO_CACHE_TTL",
    "refresh_interval": "PORTFOLIO_REFRESH_INTERVAL",
    "animation_duration": "PORTFOLIO_ANIMATION_DURATION",
    "mobile_breakpoint": "PORTFOLIO_MOBILE_BREAKPOINT",
    "scroll_threshold": "PORTFOLIO_SCROLL_THRESHOLD",
}


@dataclass
class PortfolioConfig:
    """Settings shared by the page components."""

    username: str = "minngk"
    api_base_url: str = "https://api.github.com"
    timeout: float = 30.0
    projects_path: Path = DEFAULT_PROJECTS_PATH
    storage_dir: Path | None = None  # None keeps persisted state in memory
    cache_ttl: float = 300.0
    refresh_interval: float = 300.0
    animation_duration: float = 1.0
    mobile_breakpoint: int = 768
    scroll_threshold: int = 50

    def __post_init__(self) -> None:
        if not self.username:
            raise ConfigurationError("username must not be empty")
        for name in ("timeout", "cache_ttl", "refresh_interval"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if self.animation_duration < 0:
            raise ConfigurationError("animation_duration must not be negative")
        self.projects_path = Path(self.projects_path)
        if self.storage_dir is not None:
            self.storage_dir = Path(self.storage_dir).expanduser()

    @classmethod
    def from_env(cls) -> "PortfolioConfig":
        """
        Create a configuration from environment variables.

        Environment variables (all optional):
            PORTFOLIO_GITHUB_USERNAME: GitHub account whose statistics are shown
            PORTFOLIO_API_BASE_URL: REST API host (default: https://api.github.com)
            PORTFOLIO_TIMEOUT: Request timeout in seconds
            PORTFOLIO_PROJECTS_PATH: JSON file with ``projects`` and ``settings``
            PORTFOLIO_STORAGE_DIR: Directory for persisted catalog and theme
            PORTFOLIO_CACHE_TTL / PORTFOLIO_REFRESH_INTERVAL: seconds
            PORTFOLIO_ANIMATION_DURATION: counter animation length in seconds
            PORTFOLIO_MOBILE_BREAKPOINT / PORTFOLIO_SCROLL_THRESHOLD: pixels

        Returns:
            Configured PortfolioConfig instance

        Raises:
            ConfigurationError: If a variable holds a malformed value
        """
        values: dict[str, object] = {}
        for key, env_var in CONFIG_ENV_VARS.items():
            raw = os.environ.get(env_var)
            if raw is None or raw == "":
                continue
            if key in ("timeout", "cache_ttl", "refresh_interval", "animation_duration"):
                values[key] = _parse_float(raw, env_var)
            elif key in ("mobile_breakpoint", "scroll_threshold"):
                values[key] = _parse_int(raw, env_var)
            elif key in ("projects_path", "storage_dir"):
                values[key] = Path(raw).expanduser()
            else:
                values[key] = raw

        return cls(**values)  # type: ignore[arg-type]


def _parse_float(raw: str, env_var: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid {env_var}: {raw!r} is not a number") from None


def _parse_int(raw: str, env_var: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid {env_var}: {raw!r} is not an integer") from None
