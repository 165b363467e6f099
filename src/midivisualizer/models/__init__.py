"""Data models for the MIDI visualizer."""

from .color import Color
from .config import MAX_ANIMATION_SPEED, MIN_ANIMATION_SPEED, AppConfig
from .enums import ColorScheme, VisualizationStyle
from .note import (
    KEYBOARD_RANGE,
    MIDI_MAX,
    NOTE_NAMES,
    ActiveNote,
    NoteEvent,
    NoteEventKind,
    NoteState,
    PendingFadeTimer,
    get_note_name,
)

__all__ = [
    "ActiveNote",
    "AppConfig",
    "Color",
    "ColorScheme",
    "KEYBOARD_RANGE",
    "MAX_ANIMATION_SPEED",
    "MIDI_MAX",
    "MIN_ANIMATION_SPEED",
    "NOTE_NAMES",
    "NoteEvent",
    "NoteEventKind",
    "NoteState",
    "PendingFadeTimer",
    "VisualizationStyle",
    "get_note_name",
]
