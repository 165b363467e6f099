"""Shared utilities."""

from .observers import ObserverManager
from .paths import app_dir, default_config_path, default_log_path
from .persistence import PydanticPersistence

__all__ = [
    "ObserverManager",
    "PydanticPersistence",
    "app_dir",
    "default_config_path",
    "default_log_path",
]
