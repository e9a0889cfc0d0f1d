"""Configuration."""

from .settings import CONFIG_FILE, Settings

__all__ = ["CONFIG_FILE", "Settings"]
