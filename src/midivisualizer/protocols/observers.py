"""Observer and collaborator protocols.

- NoteEventSink: receives decoded note events on the presentation loop
- NoteObserver: reacts to note lifecycle transitions (UI redraw)
- SynthOutput: the audio collaborator the port adapter echoes notes to
- ConfigObserver: reacts to configuration changes
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from midivisualizer.models import NoteEvent

from .events import ConfigEvent, NoteLifecycleEvent


@runtime_checkable
class NoteEventSink(Protocol):
    """
    Single consumer registered on the MIDI port adapter.

    Threading:
        Always called on the presentation event loop, never on the MIDI
        delivery thread. Implementations may mutate loop-confined state
        without locks.
    """

    def handle_note_event(self, event: "NoteEvent") -> None:
        """Apply one decoded note event."""
        ...


@runtime_checkable
class NoteObserver(Protocol):
    """
    Observer of the dispatcher's active-note set.

    Threading:
        Called on the presentation event loop right after the transition,
        so `dispatcher.snapshot()` already reflects it.
    """

    def on_note_event(self, event: NoteLifecycleEvent, pitch: int | None) -> None:
        """
        Handle a note lifecycle transition.

        Args:
            event: The transition that occurred
            pitch: The pitch involved, or None for NOTES_CLEARED
        """
        ...


@runtime_checkable
class SynthOutput(Protocol):
    """Audio collaborator mirroring note-on/note-off as tones."""

    def play_note(self, pitch: int, velocity: int) -> None:
        """Start (or restart) a tone for `pitch`."""
        ...

    def stop_note(self, pitch: int) -> None:
        """Release the tone for `pitch`."""
        ...


@runtime_checkable
class ConfigObserver(Protocol):
    """
    Observer that receives configuration events.

    Error Handling:
        Exceptions raised by observers are caught and logged by the
        ConfigService; they never reach the caller that changed the config.
    """

    def on_config_event(self, event: ConfigEvent, **kwargs: Any) -> None:
        """
        Handle a configuration event.

        Args:
            event: The configuration event
            **kwargs: Event data (keys/values for CONFIG_UPDATED, path for LOADED/SAVED)
        """
        ...
