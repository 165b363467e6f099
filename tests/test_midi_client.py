"""Tests for the python-rtmidi virtual endpoints with the backend mocked out."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import mido
import pytest

from midivisualizer.exceptions import MidiPortError, PortUnavailableError
from midivisualizer.midi import VirtualMidiClient
from midivisualizer.midi import client as client_module


class FakeRtMidiError(Exception):
    """Stands in for rtmidi.RtMidiError."""


@pytest.fixture
def fake_rtmidi(monkeypatch):
    """Replace the lazily loaded rtmidi module with MagicMock ports."""
    module = SimpleNamespace(
        MidiIn=MagicMock(name="MidiIn"),
        MidiOut=MagicMock(name="MidiOut"),
        RtMidiError=FakeRtMidiError,
    )
    monkeypatch.setattr(client_module, "load_rtmidi", lambda port_name: module)
    return module


def method_names(port) -> list[str]:
    return [call[0] for call in port.method_calls]


@pytest.mark.unit
class TestVirtualSource:
    def test_create_opens_virtual_port(self, fake_rtmidi):
        source = VirtualMidiClient("Visualizer").create_source("Out")

        fake_rtmidi.MidiOut.assert_called_once_with(name="Visualizer")
        fake_rtmidi.MidiOut.return_value.open_virtual_port.assert_called_once_with("Out")
        assert source.is_open
        assert source.name == "Out"

    def test_send_passes_bytes(self, fake_rtmidi):
        source = VirtualMidiClient("Visualizer").create_source("Out")

        source.send((0x90, 60, 100))

        fake_rtmidi.MidiOut.return_value.send_message.assert_called_once_with([0x90, 60, 100])

    def test_send_failure_raises_port_error(self, fake_rtmidi):
        source = VirtualMidiClient("Visualizer").create_source("Out")
        fake_rtmidi.MidiOut.return_value.send_message.side_effect = FakeRtMidiError("queue full")

        with pytest.raises(MidiPortError) as exc_info:
            source.send([0x80, 60, 64])

        assert exc_info.value.port_name == "Out"
        assert "queue full" in exc_info.value.technical_message

    def test_send_after_close_is_ignored(self, fake_rtmidi):
        source = VirtualMidiClient("Visualizer").create_source("Out")
        source.close()

        source.send([0x90, 60, 100])

        fake_rtmidi.MidiOut.return_value.send_message.assert_not_called()

    def test_refused_port_is_deleted(self, fake_rtmidi):
        port = fake_rtmidi.MidiOut.return_value
        port.open_virtual_port.side_effect = FakeRtMidiError("virtual ports not supported")

        with pytest.raises(PortUnavailableError) as exc_info:
            VirtualMidiClient("Visualizer").create_source("Out")

        assert exc_info.value.port_name == "Out"
        assert "virtual ports not supported" in exc_info.value.technical_message
        port.delete.assert_called_once()

    def test_refused_client_raises(self, fake_rtmidi):
        fake_rtmidi.MidiOut.side_effect = FakeRtMidiError("no ALSA sequencer")

        with pytest.raises(PortUnavailableError):
            VirtualMidiClient("Visualizer").create_source("Out")

    def test_close_order_and_idempotence(self, fake_rtmidi):
        port = fake_rtmidi.MidiOut.return_value
        source = VirtualMidiClient("Visualizer").create_source("Out")

        source.close()
        source.close()

        assert method_names(port)[-2:] == ["close_port", "delete"]
        port.delete.assert_called_once()
        assert not source.is_open


@pytest.mark.unit
class TestVirtualDestination:
    def test_create_configures_port(self, fake_rtmidi):
        destination = VirtualMidiClient("Visualizer").create_destination("In", lambda data: None)

        port = fake_rtmidi.MidiIn.return_value
        fake_rtmidi.MidiIn.assert_called_once_with(name="Visualizer")
        port.ignore_types.assert_called_once_with(sysex=True, timing=True, active_sense=True)
        port.open_virtual_port.assert_called_once_with("In")
        assert destination.is_open

    def test_callback_delivers_message_bytes(self, fake_rtmidi):
        received = []
        VirtualMidiClient("Visualizer").create_destination("In", received.append)
        rtmidi_callback = fake_rtmidi.MidiIn.return_value.set_callback.call_args.args[0]

        rtmidi_callback(([0x90, 60, 100], 0.004), None)
        rtmidi_callback(([0x80, 60, 0], 0.25))

        assert received == [[0x90, 60, 100], [0x80, 60, 0]]

    def test_refused_port_is_released(self, fake_rtmidi):
        port = fake_rtmidi.MidiIn.return_value
        port.open_virtual_port.side_effect = FakeRtMidiError("refused")

        with pytest.raises(PortUnavailableError) as exc_info:
            VirtualMidiClient("Visualizer").create_destination("In", lambda data: None)

        assert exc_info.value.port_name == "In"
        port.cancel_callback.assert_called_once()
        port.delete.assert_called_once()

    def test_close_cancels_callback_first(self, fake_rtmidi):
        port = fake_rtmidi.MidiIn.return_value
        destination = VirtualMidiClient("Visualizer").create_destination("In", lambda data: None)

        destination.close()
        destination.close()

        assert method_names(port)[-3:] == ["cancel_callback", "close_port", "delete"]
        port.delete.assert_called_once()


@pytest.mark.unit
class TestVirtualMidiClient:
    def test_close_releases_open_endpoints_once(self, fake_rtmidi):
        client = VirtualMidiClient("Visualizer")
        source = client.create_source("Out")
        destination = client.create_destination("In", lambda data: None)

        client.close()
        client.close()

        assert not source.is_open
        assert not destination.is_open
        fake_rtmidi.MidiOut.return_value.delete.assert_called_once()
        fake_rtmidi.MidiIn.return_value.delete.assert_called_once()

    def test_close_skips_endpoints_already_closed(self, fake_rtmidi):
        client = VirtualMidiClient("Visualizer")
        source = client.create_source("Out")
        source.close()

        client.close()

        fake_rtmidi.MidiOut.return_value.delete.assert_called_once()

    def test_missing_backend_is_port_unavailable(self, monkeypatch):
        # A None entry makes `import rtmidi` raise ImportError
        monkeypatch.setitem(sys.modules, "rtmidi", None)

        with pytest.raises(PortUnavailableError) as exc_info:
            VirtualMidiClient("Visualizer").create_destination("In", lambda data: None)

        assert exc_info.value.recoverable
        assert exc_info.value.port_name == "In"

    def test_list_ports(self, monkeypatch):
        monkeypatch.setattr(mido, "get_input_names", lambda: ["Keys"])
        monkeypatch.setattr(mido, "get_output_names", lambda: ["Synth", "Thru"])

        assert VirtualMidiClient.list_ports() == {"input": ["Keys"], "output": ["Synth", "Thru"]}

    def test_list_ports_without_backend(self, monkeypatch):
        def broken():
            raise OSError("libasound.so.2: cannot open shared object file")

        monkeypatch.setattr(mido, "get_input_names", broken)

        with pytest.raises(MidiPortError) as exc_info:
            VirtualMidiClient.list_ports()

        assert "libasound" in exc_info.value.technical_message
        assert exc_info.value.recovery_hint
