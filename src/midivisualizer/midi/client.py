"""Virtual MIDI endpoints backed by python-rtmidi.

A VirtualMidiClient registers software MIDI ports with the platform MIDI
service (ALSA sequencer, CoreMIDI, JACK):

- a virtual *source*: an output port other applications read from
- a virtual *destination*: an input port other applications write to.
  Raw bytes arriving there are handed to a callback on rtmidi's own
  delivery thread.

python-rtmidi is imported when the first endpoint is created, so a
machine without a usable MIDI library still runs in loopback-only mode.
Windows MME has no virtual ports; creating one raises
PortUnavailableError there.
"""

import logging
from collections.abc import Callable, Sequence
from types import ModuleType
from typing import TYPE_CHECKING, Optional

import mido

from midivisualizer.exceptions import MidiPortError, wrap_midi_error

if TYPE_CHECKING:
    import rtmidi

logger = logging.getLogger(__name__)

PacketCallback = Callable[[list[int]], None]


def load_rtmidi(port_name: str) -> ModuleType:
    """
    Import python-rtmidi on first use.

    Args:
        port_name: Endpoint being created, for the error message

    Raises:
        PortUnavailableError: If the module or the platform MIDI library
            it links against (e.g. libasound) cannot be loaded
    """
    try:
        import rtmidi
    except (ImportError, OSError) as e:
        logger.error(f"python-rtmidi could not be loaded: {e}")
        raise wrap_midi_error(e, port_name) from e
    return rtmidi


class VirtualSource:
    """Virtual output endpoint that transmits raw MIDI bytes."""

    def __init__(self, port: "rtmidi.MidiOut", name: str, error_type: type[Exception]):
        self._port: Optional["rtmidi.MidiOut"] = port
        self._error_type = error_type
        self.name = name

    @property
    def is_open(self) -> bool:
        return self._port is not None

    def send(self, message: Sequence[int]) -> None:
        """Transmit one MIDI message to every application reading this port."""
        if self._port is None:
            return
        try:
            self._port.send_message(list(message))
        except self._error_type as e:
            raise MidiPortError(
                f"Could not send on virtual port '{self.name}'",
                technical_message=f"send_message({list(message)}) failed: {e}",
                port_name=self.name,
                recoverable=True,
            ) from e

    def close(self) -> None:
        """Unregister the port (idempotent)."""
        if self._port is None:
            return
        port, self._port = self._port, None
        port.close_port()
        port.delete()
        logger.debug(f"Closed virtual source: {self.name}")


class VirtualDestination:
    """Virtual input endpoint delivering raw MIDI bytes to a callback."""

    def __init__(self, port: "rtmidi.MidiIn", name: str):
        self._port: Optional["rtmidi.MidiIn"] = port
        self.name = name

    @property
    def is_open(self) -> bool:
        return self._port is not None

    def close(self) -> None:
        """Stop delivery and unregister the port (idempotent)."""
        if self._port is None:
            return
        port, self._port = self._port, None
        port.cancel_callback()
        port.close_port()
        port.delete()
        logger.debug(f"Closed virtual destination: {self.name}")


class VirtualMidiClient:
    """
    Connection to the platform MIDI service.

    Owns nothing but the endpoints it creates; callers release the
    endpoints first and the client last.
    """

    def __init__(self, name: str):
        """
        Initialize the client.

        Args:
            name: Client name shown by the platform next to the port names
        """
        self.name = name
        self._endpoints: list[VirtualSource | VirtualDestination] = []
        self._closed = False

    def create_source(self, name: str) -> VirtualSource:
        """
        Register a virtual source.

        Raises:
            PortUnavailableError: If the platform refuses the port
        """
        rtmidi = load_rtmidi(name)
        port = None
        try:
            port = rtmidi.MidiOut(name=self.name)
            port.open_virtual_port(name)
        except rtmidi.RtMidiError as e:
            logger.error(f"Failed to create virtual source '{name}': {e}")
            if port is not None:
                port.delete()
            raise wrap_midi_error(e, name) from e

        source = VirtualSource(port, name, rtmidi.RtMidiError)
        self._endpoints.append(source)
        logger.info(f"Created virtual source: {name}")
        return source

    def create_destination(self, name: str, on_packet: PacketCallback) -> VirtualDestination:
        """
        Register a virtual destination.

        Args:
            name: Port name
            on_packet: Called with the raw bytes of every incoming message.
                       Runs on rtmidi's delivery thread - keep it fast!

        Raises:
            PortUnavailableError: If the platform refuses the port
        """
        def rtmidi_callback(event: tuple[list[int], float], data: object = None) -> None:
            message, _delta_time = event
            on_packet(message)

        rtmidi = load_rtmidi(name)
        port = None
        try:
            port = rtmidi.MidiIn(name=self.name)
            port.ignore_types(sysex=True, timing=True, active_sense=True)
            port.set_callback(rtmidi_callback)
            port.open_virtual_port(name)
        except rtmidi.RtMidiError as e:
            logger.error(f"Failed to create virtual destination '{name}': {e}")
            if port is not None:
                port.cancel_callback()
                port.delete()
            raise wrap_midi_error(e, name) from e

        destination = VirtualDestination(port, name)
        self._endpoints.append(destination)
        logger.info(f"Created virtual destination: {name}")
        return destination

    def close(self) -> None:
        """Release any endpoint still open and close the client (idempotent)."""
        if self._closed:
            return
        self._closed = True
        for endpoint in self._endpoints:
            endpoint.close()
        self._endpoints.clear()
        logger.debug(f"Closed MIDI client: {self.name}")

    @staticmethod
    def list_ports() -> dict[str, list[str]]:
        """
        List the MIDI ports currently visible to this machine.

        Returns:
            Dictionary with 'input' and 'output' lists of port names

        Raises:
            MidiPortError: If the MIDI backend cannot be loaded
        """
        try:
            return {
                "input": mido.get_input_names(),
                "output": mido.get_output_names(),
            }
        except (ImportError, OSError) as e:
            raise MidiPortError(
                "MIDI ports cannot be listed: the MIDI backend could not be loaded.",
                technical_message=f"{type(e).__name__}: {e}",
                recovery_hint="Install python-rtmidi and the platform MIDI library (ALSA/JACK on Linux)",
            ) from e
