"""Tests for the MIDI byte-stream decoder."""

import pytest

from midivisualizer.midi import decode_packet, decode_packet_list
from midivisualizer.models import NoteEvent


def decode(data) -> list[NoteEvent]:
    return list(decode_packet(data))


@pytest.mark.unit
class TestNoteMessages:
    """Decoding of complete note-on and note-off messages."""

    def test_note_on(self):
        assert decode([0x90, 60, 100]) == [NoteEvent.note_on(60, 100)]

    def test_note_off(self):
        assert decode([0x80, 60, 64]) == [NoteEvent.note_off(60)]

    def test_note_on_velocity_zero_is_note_off(self):
        """A note-on with velocity 0 must decode as a note-off, not a note-on."""
        events = decode([0x90, 60, 0])

        assert events == [NoteEvent.note_off(60)]
        assert not events[0].is_note_on

    def test_any_channel(self):
        assert decode([0x9F, 72, 1, 0x85, 72, 0]) == [
            NoteEvent.note_on(72, 1),
            NoteEvent.note_off(72),
        ]

    def test_concatenated_messages_keep_order(self):
        data = [0x90, 60, 100, 0x90, 64, 90, 0x80, 60, 0, 0x90, 64, 0]

        assert decode(data) == [
            NoteEvent.note_on(60, 100),
            NoteEvent.note_on(64, 90),
            NoteEvent.note_off(60),
            NoteEvent.note_off(64),
        ]

    def test_accepts_bytes(self):
        assert decode(bytes([0x90, 0, 127])) == [NoteEvent.note_on(0, 127)]

    def test_is_lazy(self):
        events = decode_packet([0x90, 60, 100, 0x90, 61, 100])

        assert next(events) == NoteEvent.note_on(60, 100)
        assert next(events) == NoteEvent.note_on(61, 100)
        with pytest.raises(StopIteration):
            next(events)


@pytest.mark.unit
class TestRunningStatus:
    """Data bytes following a note message reuse its status."""

    def test_running_status_note_on(self):
        assert decode([0x90, 60, 100, 64, 90, 67, 80]) == [
            NoteEvent.note_on(60, 100),
            NoteEvent.note_on(64, 90),
            NoteEvent.note_on(67, 80),
        ]

    def test_running_status_velocity_zero_releases(self):
        assert decode([0x90, 60, 100, 60, 0]) == [
            NoteEvent.note_on(60, 100),
            NoteEvent.note_off(60),
        ]

    def test_running_status_does_not_cross_packets(self):
        events = list(decode_packet_list([[0x90, 60, 100], [64, 90]]))

        assert events == [NoteEvent.note_on(60, 100)]


@pytest.mark.unit
class TestSkippedAndMalformed:
    """Other messages are skipped and malformed input never raises."""

    def test_truncated_trailing_message_yields_valid_prefix(self):
        assert decode([0x90, 60, 100, 0x90, 64]) == [NoteEvent.note_on(60, 100)]

    def test_lone_status_byte(self):
        assert decode([0x90]) == []

    def test_empty_buffer(self):
        assert decode([]) == []

    def test_truncated_message_interrupted_by_status(self):
        assert decode([0x90, 60, 0x80, 62, 0]) == [NoteEvent.note_off(62)]

    def test_control_change_skipped(self):
        assert decode([0xB0, 7, 100, 0x90, 60, 100]) == [NoteEvent.note_on(60, 100)]

    def test_program_change_skipped(self):
        assert decode([0xC0, 5, 0x90, 60, 100]) == [NoteEvent.note_on(60, 100)]

    def test_pitch_bend_data_not_mistaken_for_notes(self):
        assert decode([0xE0, 0, 64, 10, 20]) == []

    def test_sysex_skipped(self):
        data = [0xF0, 0x7E, 0x7F, 0x06, 0x01, 0xF7, 0x90, 60, 100]

        assert decode(data) == [NoteEvent.note_on(60, 100)]

    def test_realtime_bytes_interleaved(self):
        """Clock bytes inside a note message don't break it."""
        assert decode([0x90, 0xF8, 60, 0xFE, 100]) == [NoteEvent.note_on(60, 100)]

    def test_stray_data_without_status(self):
        assert decode([60, 100, 0x90, 61, 90]) == [NoteEvent.note_on(61, 90)]

    def test_invalid_byte_values_dropped(self):
        assert decode([0x90, 60, 300, 0x90, 61, 90, -1]) == [NoteEvent.note_on(61, 90)]

    def test_decoded_values_in_midi_range(self):
        data = [0x90, 127, 127, 0x80, 0, 0] + list(range(0xF8, 0x100))
        for event in decode(data):
            assert 0 <= event.pitch <= 127
            assert 0 <= event.velocity <= 127
