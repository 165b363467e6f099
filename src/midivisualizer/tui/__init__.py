"""Terminal user interface built with Textual."""

from .app import VisualizerApp

__all__ = ["VisualizerApp"]
