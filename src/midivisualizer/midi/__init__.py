"""MIDI input/output: byte decoding, virtual endpoints and the port adapter."""

from .client import VirtualDestination, VirtualMidiClient, VirtualSource
from .decoder import decode_packet, decode_packet_list
from .port_adapter import MidiPortAdapter

__all__ = [
    "MidiPortAdapter",
    "VirtualDestination",
    "VirtualMidiClient",
    "VirtualSource",
    "decode_packet",
    "decode_packet_list",
]
