"""Shared pytest configuration."""

pytest_plugins = ["portfolio.testing.conftest"]
