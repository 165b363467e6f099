"""MIDI port exceptions.

- MidiPortError: Base class for virtual MIDI endpoint errors
- PortUnavailableError: The platform refused to register an endpoint
"""

from .base import MidiVisualizerError


class MidiPortError(MidiVisualizerError):
    """Virtual MIDI endpoint setup or operation failed."""

    def __init__(self, user_message: str, port_name: str | None = None, **kwargs):
        """
        Initialize MIDI port error.

        Args:
            user_message: User-friendly error message
            port_name: Name of the endpoint involved (if known)
        """
        super().__init__(user_message, **kwargs)
        self.port_name = port_name


class PortUnavailableError(MidiPortError):
    """The platform MIDI service refused to create a virtual endpoint."""

    def __init__(self, port_name: str, original_error: str | None = None):
        """
        Initialize port-unavailable error.

        Args:
            port_name: The virtual endpoint that could not be registered
            original_error: The error reported by the MIDI backend
        """
        user_msg = f"Virtual MIDI port '{port_name}' is unavailable."
        tech_msg = user_msg
        if original_error:
            tech_msg += f"\nOriginal error: {original_error}"

        recovery = (
            "The visualizer keeps running with the on-screen keyboard and demo only. "
            "Virtual ports need ALSA (Linux), CoreMIDI (macOS) or a loopback driver "
            "such as loopMIDI (Windows). Run 'midivisualizer midi list' to inspect ports."
        )

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            port_name=port_name,
            recoverable=True,
            recovery_hint=recovery,
        )
