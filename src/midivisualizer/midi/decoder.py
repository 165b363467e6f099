"""MIDI byte-stream decoder for note messages.

Turns raw MIDI bytes into NoteEvent values. Only Note On (0x9n) and
Note Off (0x8n) are decoded; every other message is skipped. Running
status is honored for note messages, and a Note On with velocity 0 is
reported as a Note Off.

The decoder is a pure function of its input and is safe to call from
the MIDI delivery thread.
"""

import logging
from collections.abc import Iterable, Iterator

from midivisualizer.models import NoteEvent

logger = logging.getLogger(__name__)

NOTE_OFF_STATUS = 0x80
NOTE_ON_STATUS = 0x90
SYSTEM_STATUS = 0xF0
REALTIME_STATUS = 0xF8

NOTE_MESSAGE_DATA_BYTES = 2


def _is_status(byte: int) -> bool:
    return byte & 0x80 != 0


def decode_packet(data: Iterable[int]) -> Iterator[NoteEvent]:
    """
    Lazily decode one buffer of concatenated MIDI messages.

    Args:
        data: Raw MIDI bytes (bytes, bytearray or a list of ints)

    Yields:
        NoteEvent values in buffer order

    Malformed input never raises: a note message cut short by a new
    status byte or by the end of the buffer is dropped, and decoding
    resumes at the next status byte.

    Example:
        >>> [(e.kind.value, e.pitch) for e in decode_packet([0x90, 60, 100, 0x80, 60, 64])]
        [('note_on', 60), ('note_off', 60)]
    """
    status: int | None = None  # Running status of the current note message
    pending: list[int] = []

    for byte in data:
        if not 0 <= byte <= 0xFF:
            logger.debug(f"Dropping invalid byte value {byte!r}")
            status = None
            pending.clear()
            continue

        if byte >= REALTIME_STATUS:
            # Real-time bytes may be interleaved anywhere; they don't cancel a message
            continue

        if _is_status(byte):
            if pending:
                logger.debug(f"Dropping truncated message {[status, *pending]}")
                pending.clear()
            kind = byte & 0xF0
            status = byte if kind in (NOTE_ON_STATUS, NOTE_OFF_STATUS) else None
            continue

        if status is None:
            # Data of a skipped message (or stray data with no status)
            continue

        pending.append(byte)
        if len(pending) < NOTE_MESSAGE_DATA_BYTES:
            continue

        pitch, velocity = pending
        pending.clear()
        if status & 0xF0 == NOTE_ON_STATUS and velocity > 0:
            yield NoteEvent.note_on(pitch, velocity)
        else:
            yield NoteEvent.note_off(pitch)

    if pending:
        logger.debug(f"Dropping truncated trailing message {[status, *pending]}")


def decode_packet_list(packets: Iterable[Iterable[int]]) -> Iterator[NoteEvent]:
    """
    Decode a list of packets in order.

    Running status does not carry over from one packet to the next.
    """
    for packet in packets:
        yield from decode_packet(packet)
