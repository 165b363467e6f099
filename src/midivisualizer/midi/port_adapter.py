"""MIDI port adapter: virtual endpoints plus the thread hop.

The adapter is the only component that crosses execution contexts:

- Inbound: rtmidi calls `_on_packet` on its delivery thread. The bytes are
  decoded right there, and the resulting immutable NoteEvents are handed
  to the presentation loop with `call_soon_threadsafe`. The sink is never
  called from the delivery thread.
- Outbound: `send_note_on`/`send_note_off` encode a 3-byte message with
  mido, transmit it through the virtual source, and loop the same bytes
  back through the decoder to the presentation loop so that on-screen
  input is visualized whether or not anyone listens to the port.

If the platform refuses the endpoints, `open()` raises
PortUnavailableError and the adapter stays usable in loopback-only mode:
sends are not transmitted, but still visualized.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

import mido

from midivisualizer.exceptions import MidiPortError, PortUnavailableError
from midivisualizer.models import NoteEvent
from midivisualizer.protocols import NoteEventSink, SynthOutput

from .client import VirtualDestination, VirtualMidiClient, VirtualSource
from .decoder import decode_packet

logger = logging.getLogger(__name__)

# Release velocity used for outgoing note-offs
DEFAULT_RELEASE_VELOCITY = 64


class MidiPortAdapter:
    """
    Owns one virtual source/destination pair and forwards note events.

    Components it talks to (the event sink and the audio collaborator) are
    injected as non-owning references; the session that wires everything
    together owns their lifetime.

    Threading:
        `_on_packet` runs on the MIDI delivery thread. Everything else,
        including sink and audio calls, runs on the presentation loop.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        client_name: str = "MIDI Visualizer",
        source_name: str = "MIDI Visualizer Source",
        destination_name: str = "MIDI Visualizer Destination",
        client_factory: Callable[[str], VirtualMidiClient] = VirtualMidiClient,
    ):
        """
        Initialize the adapter (no endpoints are created yet).

        Args:
            loop: The presentation event loop all events are delivered on
            client_name: MIDI client name
            source_name: Name of the virtual port other applications read from
            destination_name: Name of the virtual port other applications write to
            client_factory: Creates the platform MIDI client (replaced in tests)
        """
        self._loop = loop
        self._client_name = client_name
        self._source_name = source_name
        self._destination_name = destination_name
        self._client_factory = client_factory

        self._client: Optional[VirtualMidiClient] = None
        self._source: Optional[VirtualSource] = None
        self._destination: Optional[VirtualDestination] = None

        self._sink: Optional[NoteEventSink] = None
        self._audio: Optional[SynthOutput] = None

    # =================================================================
    # Wiring
    # =================================================================

    def set_sink(self, sink: Optional[NoteEventSink]) -> None:
        """
        Register the single event sink (replaces any previous one).

        Args:
            sink: Object implementing NoteEventSink, or None to detach
        """
        self._sink = sink

    def set_audio(self, audio: Optional[SynthOutput]) -> None:
        """
        Register the audio collaborator that mirrors delivered events.

        Args:
            audio: Object implementing SynthOutput, or None to detach
        """
        self._audio = audio

    # =================================================================
    # Endpoint lifecycle
    # =================================================================

    def open(self) -> None:
        """
        Register the virtual source and destination.

        Raises:
            PortUnavailableError: If the platform refuses either endpoint.
                Anything created before the failure is released again, and
                the adapter keeps working in loopback-only mode.
        """
        if self.is_connected:
            logger.warning("MidiPortAdapter is already open")
            return

        client = self._client_factory(self._client_name)
        source: Optional[VirtualSource] = None
        try:
            source = client.create_source(self._source_name)
            destination = client.create_destination(self._destination_name, self._on_packet)
        except PortUnavailableError:
            if source is not None:
                source.close()
            client.close()
            raise

        self._client = client
        self._source = source
        self._destination = destination
        logger.info(
            f"MIDI endpoints ready: source='{self._source_name}', "
            f"destination='{self._destination_name}'"
        )

    def close(self) -> None:
        """
        Release source, destination and client, in that order.

        Safe to call repeatedly and when `open()` never succeeded.
        """
        if self._source is not None:
            self._source.close()
            self._source = None
        if self._destination is not None:
            self._destination.close()
            self._destination = None
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MIDI endpoints released")

    @property
    def is_connected(self) -> bool:
        """True when both virtual endpoints are registered."""
        return self._source is not None and self._destination is not None

    @property
    def source_name(self) -> str:
        return self._source_name

    @property
    def destination_name(self) -> str:
        return self._destination_name

    # =================================================================
    # Outbound path
    # =================================================================

    def send_note_on(self, pitch: int, velocity: int, channel: int = 0) -> None:
        """
        Transmit a Note On and visualize it locally.

        Raises:
            ValueError: If pitch, velocity or channel is out of range
        """
        message = mido.Message("note_on", channel=channel, note=pitch, velocity=velocity)
        self._transmit_and_loop_back(message.bytes())

    def send_note_off(self, pitch: int, channel: int = 0) -> None:
        """
        Transmit a Note Off (release velocity 64) and visualize it locally.

        Raises:
            ValueError: If pitch or channel is out of range
        """
        message = mido.Message(
            "note_off", channel=channel, note=pitch, velocity=DEFAULT_RELEASE_VELOCITY
        )
        self._transmit_and_loop_back(message.bytes())

    def _transmit_and_loop_back(self, data: Sequence[int]) -> None:
        if self._source is not None:
            try:
                self._source.send(data)
            except MidiPortError as e:
                logger.error(f"{e.technical_message}")
        self._enqueue(tuple(decode_packet(data)))

    # =================================================================
    # Inbound path
    # =================================================================

    def _on_packet(self, data: Sequence[int]) -> None:
        """
        Raw packet callback - called on the MIDI delivery thread.

        Decodes here and hops to the presentation loop; never touches
        the sink directly.
        """
        try:
            events = tuple(decode_packet(data))
        except Exception as e:
            logger.error(f"Error decoding MIDI packet {data!r}: {e}")
            return
        if events:
            self._enqueue(events)

    def _enqueue(self, events: tuple[NoteEvent, ...]) -> None:
        """Schedule delivery of one buffer's events, preserving their order."""
        if not events:
            return
        try:
            self._loop.call_soon_threadsafe(self._deliver, events)
        except RuntimeError:
            # Loop already closed during shutdown
            logger.debug(f"Presentation loop closed, dropping {len(events)} event(s)")

    def _deliver(self, events: Iterable[NoteEvent]) -> None:
        """Deliver events to the audio collaborator and the sink (presentation loop)."""
        for event in events:
            if self._audio is not None:
                try:
                    if event.is_note_on:
                        self._audio.play_note(event.pitch, event.velocity)
                    else:
                        self._audio.stop_note(event.pitch)
                except Exception as e:
                    logger.error(f"Error in audio collaborator for {event}: {e}")

            if self._sink is not None:
                try:
                    self._sink.handle_note_event(event)
                except Exception as e:
                    logger.error(f"Error in note event sink for {event}: {e}", exc_info=True)

    def __enter__(self):
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
