"""Tests for the demo sequencer."""

import asyncio

import pytest

from midivisualizer.core import DEMO_MELODY, DemoSequencer, NoteLifecycleDispatcher
from midivisualizer.exceptions import PortUnavailableError
from midivisualizer.midi import MidiPortAdapter

SHORT_MELODY = ((60, 0.05), (64, 0.01))


def make_sequencer(loop, backend, melody=SHORT_MELODY):
    adapter = MidiPortAdapter(loop, client_factory=backend)
    dispatcher = NoteLifecycleDispatcher(loop)
    adapter.set_sink(dispatcher)
    adapter.open()
    sequencer = DemoSequencer(adapter, loop, melody=melody, velocity=90, gap=0.0)
    return sequencer, dispatcher


async def settle() -> None:
    """Let loopback deliveries scheduled with call_soon_threadsafe run."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.unit
def test_default_melody_is_c_major_arpeggio():
    assert [pitch for pitch, _ in DEMO_MELODY] == [60, 64, 67, 64, 60]
    assert [duration for _, duration in DEMO_MELODY] == [0.5, 0.5, 0.5, 0.5, 1.0]


@pytest.mark.integration
class TestDemoSequencer:
    """Melody playback through the port adapter."""

    @pytest.mark.asyncio
    async def test_plays_melody_through_source(self, midi_backend):
        sequencer, dispatcher = make_sequencer(asyncio.get_running_loop(), midi_backend)

        await sequencer.play()
        await settle()

        assert midi_backend.client.source.sent == [
            [0x90, 60, 90],
            [0x80, 60, 64],
            [0x90, 64, 90],
            [0x80, 64, 64],
        ]
        assert dispatcher.sounding_pitches == []
        assert not sequencer.is_playing

    @pytest.mark.asyncio
    async def test_notes_visualized_while_playing(self, midi_backend):
        sequencer, dispatcher = make_sequencer(asyncio.get_running_loop(), midi_backend)

        task = sequencer.play()
        await asyncio.sleep(0.02)

        assert dispatcher.sounding_pitches == [60]
        assert sequencer.is_playing
        await task

    @pytest.mark.asyncio
    async def test_restart_releases_held_note_first(self, midi_backend):
        sequencer, dispatcher = make_sequencer(asyncio.get_running_loop(), midi_backend)

        first = sequencer.play()
        await asyncio.sleep(0.01)
        second = sequencer.play()

        with pytest.raises(asyncio.CancelledError):
            await first
        await second
        await settle()

        assert midi_backend.client.source.sent == [
            [0x90, 60, 90],
            [0x80, 60, 64],
            [0x90, 60, 90],
            [0x80, 60, 64],
            [0x90, 64, 90],
            [0x80, 64, 64],
        ]
        assert dispatcher.sounding_pitches == []

    @pytest.mark.asyncio
    async def test_stop_releases_held_note(self, midi_backend):
        sequencer, dispatcher = make_sequencer(asyncio.get_running_loop(), midi_backend)

        task = sequencer.play()
        await asyncio.sleep(0.01)
        sequencer.stop()

        with pytest.raises(asyncio.CancelledError):
            await task
        await settle()

        assert midi_backend.client.source.sent == [[0x90, 60, 90], [0x80, 60, 64]]
        assert dispatcher.sounding_pitches == []
        assert not sequencer.is_playing

    @pytest.mark.asyncio
    async def test_stop_when_idle(self, midi_backend):
        sequencer, _ = make_sequencer(asyncio.get_running_loop(), midi_backend)

        sequencer.stop()

        assert not sequencer.is_playing
        assert midi_backend.client.source.sent == []

    @pytest.mark.asyncio
    async def test_plays_in_loopback_only_mode(self, refusing_midi_backend):
        loop = asyncio.get_running_loop()
        adapter = MidiPortAdapter(loop, client_factory=refusing_midi_backend)
        dispatcher = NoteLifecycleDispatcher(loop)
        adapter.set_sink(dispatcher)
        with pytest.raises(PortUnavailableError):
            adapter.open()
        sequencer = DemoSequencer(adapter, loop, melody=((62, 0.02),), gap=0.0)

        task = sequencer.play()
        await asyncio.sleep(0.01)
        assert dispatcher.sounding_pitches == [62]

        await task
        await settle()
        assert dispatcher.sounding_pitches == []
