"""Configuration module: unified application settings."""

from .settings import Environment, Settings, get_settings, settings

__all__ = ["Settings", "Environment", "get_settings", "settings"]
