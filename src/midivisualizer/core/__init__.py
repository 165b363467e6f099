"""Core note pipeline: lifecycle state machine, styling, demo and session wiring."""

from .dispatcher import NoteLifecycleDispatcher
from .sequencer import DEMO_MELODY, DemoSequencer
from .session import VisualizerSession
from .styling import note_color, scheme_preview, velocity_to_radius

__all__ = [
    "DEMO_MELODY",
    "DemoSequencer",
    "NoteLifecycleDispatcher",
    "VisualizerSession",
    "note_color",
    "scheme_preview",
    "velocity_to_radius",
]
