"""Root of the MIDI Visualizer error hierarchy.

Errors fall in two groups. Recoverable ones (a refused virtual port, a
missing audio device) leave the visualizer running in loopback-only or
silent mode; the TUI shows them as notifications. Fatal ones (an
unreadable config file) stop the CLI with the message and hint.
"""

from typing import Optional


class MidiVisualizerError(Exception):
    """
    Base exception for visualizer errors.

    `str(error)` is the short message for the status line or CLI;
    `technical_message` goes to the log file and may quote the backend
    (rtmidi, PortAudio, pydantic) verbatim.
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        """
        Args:
            user_message: Short message without backend details
            technical_message: Log message (defaults to user_message)
            recoverable: True if the session keeps running in a degraded mode
            recovery_hint: What the user can change, e.g. a CLI command to run
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """User message followed by the recovery hint, for dialogs and the CLI."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"
