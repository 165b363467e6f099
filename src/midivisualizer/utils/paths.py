"""Default on-disk locations."""

from pathlib import Path


def app_dir() -> Path:
    """Root directory for user data (~/.midivisualizer)."""
    return Path.home() / ".midivisualizer"


def default_config_path() -> Path:
    """Default configuration file."""
    return app_dir() / "config.json"


def default_log_path() -> Path:
    """Default rotating log file."""
    return app_dir() / "logs" / "midivisualizer.log"
