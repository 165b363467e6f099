"""Domain events for the observer pattern.

- Note lifecycle events: raised by the dispatcher after each transition
- Config events: raised by the config service after each change
"""

from enum import Enum


class NoteLifecycleEvent(Enum):
    """Transitions of the per-pitch note state machine."""

    NOTE_STARTED = "note_started"            # Idle -> Sounding
    NOTE_RETRIGGERED = "note_retriggered"    # Sounding/FadingOut -> Sounding
    NOTE_RELEASED = "note_released"          # Sounding -> FadingOut
    NOTE_REMOVED = "note_removed"            # FadingOut -> Idle (timer fired)
    NOTES_CLEARED = "notes_cleared"          # Session teardown


class ConfigEvent(Enum):
    """Events from the configuration service."""

    CONFIG_UPDATED = "config_updated"  # One or more values changed
    CONFIG_RESET = "config_reset"      # Reset to defaults
    CONFIG_LOADED = "config_loaded"    # Reloaded from disk
    CONFIG_SAVED = "config_saved"      # Written to disk
