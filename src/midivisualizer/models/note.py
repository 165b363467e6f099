"""Note data structures.

These are dataclasses rather than Pydantic models: they are created for
every incoming MIDI message and every redraw, never persisted, and must
stay cheap to construct and copy.
"""

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .color import Color

MIDI_MAX = 127

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

# On-screen keyboard: C4 to B4
KEYBOARD_RANGE = range(60, 72)


def get_note_name(pitch: int) -> str:
    """
    Get the standard note name for a MIDI pitch.

    Octave numbering puts middle C (60) in octave 4.

    Example:
        >>> get_note_name(60)
        'C4'
        >>> get_note_name(70)
        'A#4'
    """
    return f"{NOTE_NAMES[pitch % 12]}{pitch // 12 - 1}"


class NoteEventKind(Enum):
    """Kind of a decoded channel-voice note message."""

    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"


@dataclass(frozen=True, slots=True)
class NoteEvent:
    """A decoded note-on or note-off, passed by value across threads."""

    kind: NoteEventKind
    pitch: int
    velocity: int = 0  # Only meaningful for NOTE_ON

    @classmethod
    def note_on(cls, pitch: int, velocity: int) -> "NoteEvent":
        """Create a note-on event."""
        return cls(NoteEventKind.NOTE_ON, pitch, velocity)

    @classmethod
    def note_off(cls, pitch: int) -> "NoteEvent":
        """Create a note-off event."""
        return cls(NoteEventKind.NOTE_OFF, pitch)

    @property
    def is_note_on(self) -> bool:
        return self.kind is NoteEventKind.NOTE_ON


class NoteState(Enum):
    """Per-pitch lifecycle state."""

    IDLE = "idle"              # No active note, no timer
    SOUNDING = "sounding"      # Active note at full opacity
    FADING_OUT = "fading_out"  # Released, removal timer pending


@dataclass(frozen=True, slots=True)
class ActiveNote:
    """
    A note currently shown (and heard).

    Instances are immutable; the dispatcher swaps in a new instance on
    every transition so snapshots handed to the UI never change under it.
    """

    pitch: int
    velocity: int
    radius: float
    color: Color
    fade_duration: float   # Seconds from release to removal
    created_at: float      # Loop time of the note-on
    released_at: Optional[float] = None  # Loop time of the note-off
    opacity: float = 1.0

    @property
    def is_fading(self) -> bool:
        return self.released_at is not None

    @property
    def name(self) -> str:
        return get_note_name(self.pitch)

    def at(self, now: float) -> "ActiveNote":
        """Return a copy with the opacity evaluated at loop time `now`."""
        if self.released_at is None:
            return self
        if self.fade_duration <= 0:
            return replace(self, opacity=0.0)
        progress = (now - self.released_at) / self.fade_duration
        return replace(self, opacity=min(max(1.0 - progress, 0.0), 1.0))


@dataclass(slots=True)
class PendingFadeTimer:
    """Cancellation token for the removal of one released note."""

    pitch: int
    deadline: float
    handle: Optional[asyncio.TimerHandle] = None

    def cancel(self) -> None:
        if self.handle is not None:
            self.handle.cancel()
            self.handle = None
