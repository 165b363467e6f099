"""CLI commands for midivisualizer."""

from .audio import audio_group
from .config import config_group
from .midi import midi_group

__all__ = ["audio_group", "config_group", "midi_group"]
