"""Modal screens."""

from .settings import SettingsScreen

__all__ = ["SettingsScreen"]
