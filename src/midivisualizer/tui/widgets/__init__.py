"""Reusable UI widgets for the TUI."""

from .keyboard import KEY_BINDINGS, VirtualKeyboard
from .note_canvas import NoteCanvas, draw_notes
from .status_bar import StatusBar

__all__ = [
    "KEY_BINDINGS",
    "NoteCanvas",
    "StatusBar",
    "VirtualKeyboard",
    "draw_notes",
]
