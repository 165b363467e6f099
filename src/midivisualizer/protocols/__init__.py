"""Protocol definitions for events, observers and collaborators."""

from .events import ConfigEvent, NoteLifecycleEvent
from .observers import ConfigObserver, NoteEventSink, NoteObserver, SynthOutput

__all__ = [
    "ConfigEvent",
    "ConfigObserver",
    "NoteEventSink",
    "NoteLifecycleEvent",
    "NoteObserver",
    "SynthOutput",
]
