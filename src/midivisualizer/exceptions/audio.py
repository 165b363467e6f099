"""Audio-related exceptions."""

from .base import MidiVisualizerError


class AudioDeviceError(MidiVisualizerError):
    """Audio output stream could not be opened or failed while running."""

    def __init__(self, user_message: str, device_id: int | None = None, **kwargs):
        """
        Initialize audio device error.

        Args:
            user_message: User-friendly error message
            device_id: The device ID that failed (if applicable)
        """
        kwargs.setdefault("recoverable", True)
        kwargs.setdefault(
            "recovery_hint",
            "Notes are still visualized without sound. "
            "Run 'midivisualizer audio list' to pick another output device.",
        )
        super().__init__(user_message, **kwargs)
        self.device_id = device_id
