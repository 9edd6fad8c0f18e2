"""Configuration package."""

from phishlens.config.settings import Environment, Settings, get_settings, settings
from phishlens.config.logging import configure_logging, get_logger

__all__ = [
    "Environment",
    "Settings",
    "settings",
    "get_settings",
    "configure_logging",
    "get_logger",
]
